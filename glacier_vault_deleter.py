#!/usr/bin/env python3
"""
Glacier Vault Deleter - Empty an Amazon S3 Glacier vault archive by archive.

Glacier only exposes the contents of a vault through an inventory-retrieval
job, which usually takes several hours to complete. This script starts (or
reuses) such a job, waits for it, downloads the inventory and then deletes
every listed archive one at a time, tolerating individual failures.

License: MIT
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import math
import os
import sys
import threading
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

import boto3
import botocore.config
import botocore.exceptions
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

if TYPE_CHECKING:
    from boto3 import Session
    from mypy_boto3_ec2 import EC2Client
    from mypy_boto3_glacier import GlacierClient


# === Logging Configuration ===
# Shared by log records and the progress bar.
shared_console = Console(stderr=True)
logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_CHECK_INTERVAL_MS = 3_600_000
MIN_CHECK_INTERVAL_MS = 10_000
ACCOUNT_ID = "-"
INVENTORY_RETRIEVAL = "InventoryRetrieval"

REMOTE_ERRORS = (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError)


def configure_logging(verbose: bool = False) -> None:
    """Send log records through the shared rich console."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        handler = RichHandler(
            console=shared_console, show_path=False, log_time_format="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)


class GlacierDeleterError(Exception):
    """Base class for errors raised by this tool."""


class ConfigurationError(GlacierDeleterError, ValueError):
    """Raised when a configuration value is unusable."""


class JobPollingError(GlacierDeleterError):
    """Raised when a job status query fails."""


class PollingCancelled(GlacierDeleterError):
    """Raised when a pending re-check is withdrawn through cancel()."""


class InventoryError(GlacierDeleterError):
    """Raised when the inventory job output cannot be fetched or parsed."""


def validate_check_interval(interval_ms: Any) -> float:
    """
    Check that a polling interval is usable.

    Args:
        interval_ms: Delay between two status checks, in milliseconds.

    Returns:
        The interval as a float.

    Raises:
        ConfigurationError: If the value is not a finite number at least
            MIN_CHECK_INTERVAL_MS.
    """
    if isinstance(interval_ms, bool) or not isinstance(interval_ms, (int, float)):
        raise ConfigurationError(
            f"Check interval must be a number of milliseconds, got {interval_ms!r}"
        )
    if not math.isfinite(interval_ms) or interval_ms < MIN_CHECK_INTERVAL_MS:
        raise ConfigurationError(
            f"Check interval must be at least {MIN_CHECK_INTERVAL_MS} ms, "
            f"got {interval_ms!r}"
        )
    return float(interval_ms)


def _format_interval(interval_ms: float) -> str:
    seconds = interval_ms / 1000
    if seconds >= 3600:
        return f"{seconds / 3600:g} hour(s)"
    if seconds >= 60:
        return f"{seconds / 60:g} minute(s)"
    return f"{seconds:g} second(s)"


@dataclass
class GlacierConfig:
    """Configuration settings for Glacier vault operations."""

    region: str = DEFAULT_REGION
    check_interval_ms: float = DEFAULT_CHECK_INTERVAL_MS
    access_key: str | None = None
    secret_key: str | None = None
    max_retries: int = 5
    connection_pool_size: int = 10

    @classmethod
    def from_environment(cls) -> GlacierConfig:
        """
        Create configuration from environment variables.

        Credentials are optional; when they are absent boto3 falls back to
        its usual credential chain (shared config, instance profile, ...).

        Raises:
            ConfigurationError: If GLACIER_CHECK_INTERVAL_MS is not a number.
        """
        raw_interval = os.environ.get("GLACIER_CHECK_INTERVAL_MS", "")
        check_interval_ms: float = DEFAULT_CHECK_INTERVAL_MS
        if raw_interval:
            try:
                check_interval_ms = float(raw_interval)
            except ValueError as e:
                raise ConfigurationError(
                    f"GLACIER_CHECK_INTERVAL_MS is not a number: {raw_interval!r}"
                ) from e

        return cls(
            region=os.environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION,
            check_interval_ms=check_interval_ms,
            access_key=os.environ.get("AWS_ACCESS_KEY_ID") or None,
            secret_key=os.environ.get("AWS_SECRET_ACCESS_KEY") or None,
        )

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is unusable."""
        self.check_interval_ms = validate_check_interval(self.check_interval_ms)
        if not self.region:
            raise ConfigurationError("A region is required")
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must not be negative, got {self.max_retries}"
            )
        if bool(self.access_key) != bool(self.secret_key):
            raise ConfigurationError(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
            )


@dataclass(frozen=True)
class Job:
    """Snapshot of one Glacier job as reported by the service."""

    job_id: str
    vault_name: str
    completed: bool = False
    status_code: str = "InProgress"
    action: str = INVENTORY_RETRIEVAL
    creation_date: str = ""

    @classmethod
    def from_description(cls, description: dict[str, Any], vault_name: str) -> Job:
        """Build a Job from a DescribeJob response or a ListJobs entry."""
        return cls(
            job_id=description["JobId"],
            vault_name=vault_name,
            completed=bool(description.get("Completed", False)),
            status_code=description.get("StatusCode", "InProgress"),
            action=description.get("Action", INVENTORY_RETRIEVAL),
            creation_date=str(description.get("CreationDate", "")),
        )

    @property
    def label(self) -> str:
        state = "Completed" if self.completed else self.status_code
        return f"[{state}]: {self.job_id} ({self.action})"


@dataclass(frozen=True)
class Archive:
    """One deletable archive listed in a vault inventory."""

    archive_id: str
    description: str = ""
    size: int = 0
    creation_date: str = ""
    sha256_tree_hash: str = ""

    @classmethod
    def from_inventory(cls, entry: dict[str, Any]) -> Archive:
        return cls(
            archive_id=entry["ArchiveId"],
            description=entry.get("ArchiveDescription", ""),
            size=int(entry.get("Size", 0)),
            creation_date=entry.get("CreationDate", ""),
            sha256_tree_hash=entry.get("SHA256TreeHash", ""),
        )


@dataclass(frozen=True)
class InventorySnapshot:
    """The archive list produced by a completed inventory-retrieval job."""

    vault_name: str
    archives: tuple[Archive, ...] = ()
    inventory_date: str = ""

    @classmethod
    def from_json(cls, payload: str | bytes, vault_name: str) -> InventorySnapshot:
        """
        Parse the JSON output of an inventory-retrieval job.

        Args:
            payload: Raw job output body.
            vault_name: Vault the inventory belongs to.

        Raises:
            InventoryError: If the payload is not a valid inventory document.
        """
        try:
            document = json.loads(payload)
            archives = tuple(
                Archive.from_inventory(entry) for entry in document["ArchiveList"]
            )
        except (ValueError, KeyError, TypeError) as e:
            raise InventoryError(
                f"Malformed inventory for vault {vault_name}: {e!r}"
            ) from e
        return cls(
            vault_name=vault_name,
            archives=archives,
            inventory_date=document.get("InventoryDate", ""),
        )

    @property
    def total_size(self) -> int:
        return sum(archive.size for archive in self.archives)


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of one archive deletion attempt."""

    archive_id: str
    succeeded: bool
    reason: str | None = None

    @classmethod
    def success(cls, archive_id: str) -> DeletionOutcome:
        return cls(archive_id=archive_id, succeeded=True)

    @classmethod
    def failure(cls, archive_id: str, reason: str) -> DeletionOutcome:
        return cls(archive_id=archive_id, succeeded=False, reason=reason)


@dataclass
class DeletionReport:
    """Ordered outcomes of one pipeline run."""

    vault_name: str
    outcomes: list[DeletionOutcome] = field(default_factory=list)

    def record(self, outcome: DeletionOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    @property
    def failures(self) -> list[DeletionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]


class ProgressHandle(Protocol):
    def start(self, total: int) -> None: ...

    def advance(self) -> None: ...

    def stop(self) -> None: ...


class ConsoleProgress:
    """Progress bar shown while archives are deleted, cleared once finished."""

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            MofNCompleteColumn(),
            console=console or shared_console,
            transient=True,
        )
        self._task_id: Any = None

    def start(self, total: int) -> None:
        self._task_id = self._progress.add_task("delete", total=total, completed=0)
        self._progress.start()

    def advance(self) -> None:
        self._progress.advance(self._task_id)

    def stop(self) -> None:
        self._progress.stop()


class PollState(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobStatusPoller:
    """
    Wait for a Glacier job to complete without busy-waiting.

    Each check is a single DescribeJob call. Incomplete jobs are checked
    again after ``interval_ms`` until the service reports completion, with no
    retry ceiling. A failing status query is fatal and is never retried.

    Attributes:
        state: Current PollState. COMPLETED, FAILED and CANCELLED are final.
        checks: Number of status queries issued so far.
    """

    def __init__(
        self,
        describe_job: Callable[[str, str], Job],
        interval_ms: float = DEFAULT_CHECK_INTERVAL_MS,
        waiter: Callable[[float], bool] | None = None,
    ) -> None:
        """
        Initialize the poller.

        Args:
            describe_job: Returns the current Job for (vault_name, job_id).
            interval_ms: Delay between checks; validated immediately.
            waiter: Blocks for the given number of seconds and returns True
                if the wait was cancelled. Defaults to a cancellable event wait.

        Raises:
            ConfigurationError: If interval_ms is invalid.
        """
        self.interval_ms = validate_check_interval(interval_ms)
        self.state = PollState.PENDING
        self.checks = 0
        self._describe_job = describe_job
        self._cancelled = threading.Event()
        self._waiter = waiter or self._cancelled.wait

    def cancel(self) -> None:
        """Withdraw the pending re-check, if any."""
        self._cancelled.set()

    def _check(self, vault_name: str, job_id: str) -> Job:
        self.checks += 1
        try:
            return self._describe_job(vault_name, job_id)
        except REMOTE_ERRORS as e:
            self.state = PollState.FAILED
            logger.error(
                f"Error checking status of job {job_id} (vault {vault_name}): {e}"
            )
            raise JobPollingError(
                f"Status check failed for job {job_id} in vault {vault_name}"
            ) from e
        except Exception:
            self.state = PollState.FAILED
            logger.error(
                f"Unexpected error checking status of job {job_id} (vault {vault_name})"
            )
            raise

    def wait_for_completion(self, vault_name: str, job_id: str) -> str:
        """
        Block until the job is reported complete.

        Args:
            vault_name: Vault the job belongs to.
            job_id: Job to wait for.

        Returns:
            The job id, once the service reports completion.

        Raises:
            JobPollingError: If a status query fails.
            PollingCancelled: If cancel() was called while waiting.
        """
        if self.state is not PollState.PENDING:
            raise GlacierDeleterError(f"Poller already finished ({self.state.value})")

        delay_seconds = self.interval_ms / 1000
        while True:
            if self._cancelled.is_set():
                self.state = PollState.CANCELLED
                raise PollingCancelled(f"Stopped waiting for job {job_id}")

            job = self._check(vault_name, job_id)
            if job.completed:
                self.state = PollState.COMPLETED
                if job.status_code == "Failed":
                    logger.warning(f"Job {job_id} completed with status Failed")
                logger.info(f"Job {job_id} completed after {self.checks} check(s)")
                return job_id

            logger.info(
                f"Vault: {vault_name} | Job: {job_id} | {job.status_code}: "
                f"not yet completed. Checking again in "
                f"{_format_interval(self.interval_ms)}..."
            )
            if self._waiter(delay_seconds):
                self.state = PollState.CANCELLED
                raise PollingCancelled(f"Stopped waiting for job {job_id}")


class ArchiveDeletionPipeline:
    """
    Delete the archives of an inventory one at a time.

    A failed deletion is logged and recorded, never fatal: every archive is
    attempted exactly once, in inventory order.
    """

    def __init__(
        self,
        delete_archive: Callable[[str, str], Any],
        progress: ProgressHandle | None = None,
    ) -> None:
        self._delete_archive = delete_archive
        self._progress = progress or ConsoleProgress()

    def _attempt(self, vault_name: str, archive: Archive) -> DeletionOutcome:
        try:
            self._delete_archive(vault_name, archive.archive_id)
        except Exception as e:
            logger.error(f"Failed to delete archive {archive.archive_id}: {e}")
            return DeletionOutcome.failure(archive.archive_id, str(e) or type(e).__name__)
        logger.info(f"Successfully deleted archive: {archive.archive_id}")
        return DeletionOutcome.success(archive.archive_id)

    def iter_outcomes(
        self, vault_name: str, archives: Iterable[Archive]
    ) -> Iterator[DeletionOutcome]:
        """Yield one outcome per archive, in order."""
        for archive in archives:
            yield self._attempt(vault_name, archive)

    def run(self, vault_name: str, archives: Sequence[Archive]) -> list[DeletionOutcome]:
        """
        Attempt to delete every archive.

        Args:
            vault_name: Vault holding the archives.
            archives: Archives to delete, in the order they are attempted.

        Returns:
            One DeletionOutcome per archive, in the same order.
        """
        report = DeletionReport(vault_name=vault_name)
        if not archives:
            logger.info(f"No archives to delete in vault {vault_name}")
            return report.outcomes

        start_time = time.time()
        self._progress.start(len(archives))
        try:
            for outcome in self.iter_outcomes(vault_name, archives):
                report.record(outcome)
                if outcome.succeeded:
                    self._progress.advance()
        finally:
            self._progress.stop()

        self._log_summary(report, time.time() - start_time)
        return report.outcomes

    def _log_summary(self, report: DeletionReport, elapsed: float) -> None:
        logger.info(f"\n{'=' * 50}")
        logger.info(f"Vault '{report.vault_name}' archive deletion finished")
        logger.info(f"Archives deleted: {report.succeeded}")
        logger.info(f"Failed deletes: {report.failed}")
        logger.info(f"Time elapsed: {elapsed:.2f} seconds")
        logger.info(f"{'=' * 50}\n")
        for outcome in report.failures:
            logger.warning(f"Not deleted: {outcome.archive_id} ({outcome.reason})")


class GlacierVaultClient:
    """
    Thin wrapper around the Glacier and EC2 APIs used by this tool.

    Attributes:
        config: Configuration settings for the client.
    """

    def __init__(self, config: GlacierConfig) -> None:
        self.config = config
        self._session: Session | None = None
        self._boto_config: botocore.config.Config | None = None
        self._glacier_client: GlacierClient | None = None
        self._ec2_client: EC2Client | None = None

    @property
    def session(self) -> Session:
        """Lazily create and cache boto3 session."""
        if self._session is None:
            self._session = boto3.session.Session(
                aws_access_key_id=self.config.access_key,
                aws_secret_access_key=self.config.secret_key,
                region_name=self.config.region,
            )
        return self._session

    @property
    def boto_config(self) -> botocore.config.Config:
        """Lazily create and cache boto configuration."""
        if self._boto_config is None:
            self._boto_config = botocore.config.Config(
                max_pool_connections=self.config.connection_pool_size,
                retries={"max_attempts": self.config.max_retries, "mode": "adaptive"},
            )
        return self._boto_config

    @property
    def glacier(self) -> GlacierClient:
        """Lazily create and cache the Glacier client for the configured region."""
        if self._glacier_client is None:
            self._glacier_client = self.session.client(
                "glacier", region_name=self.config.region, config=self.boto_config
            )
        return self._glacier_client

    @property
    def ec2(self) -> EC2Client:
        """Lazily create and cache the EC2 client used for region discovery."""
        if self._ec2_client is None:
            self._ec2_client = self.session.client(
                "ec2", region_name=DEFAULT_REGION, config=self.boto_config
            )
        return self._ec2_client

    def use_region(self, region: str) -> None:
        """Point subsequent Glacier calls at another region."""
        if region != self.config.region:
            self.config.region = region
            self._glacier_client = None

    def list_regions(self) -> list[str]:
        """
        List the regions enabled for the account.

        Returns:
            Region names, or an empty list if the lookup failed.
        """
        try:
            response = self.ec2.describe_regions()
            return sorted(region["RegionName"] for region in response.get("Regions", []))
        except REMOTE_ERRORS as e:
            logger.error(f"Error getting regions: {e}")
            return []

    def list_vaults(self) -> list[dict[str, Any]]:
        """
        List the vaults in the current region.

        Returns:
            Vault descriptions, or an empty list if the lookup failed.
        """
        try:
            paginator = self.glacier.get_paginator("list_vaults")
            vaults: list[dict[str, Any]] = []
            for page in paginator.paginate(accountId=ACCOUNT_ID):
                vaults.extend(page.get("VaultList", []))
            return vaults
        except REMOTE_ERRORS as e:
            logger.error(f"Error getting vaults in {self.config.region}: {e}")
            return []

    def list_inventory_jobs(self, vault_name: str) -> list[Job]:
        """List the inventory-retrieval jobs known for a vault."""
        try:
            paginator = self.glacier.get_paginator("list_jobs")
            jobs: list[Job] = []
            for page in paginator.paginate(accountId=ACCOUNT_ID, vaultName=vault_name):
                jobs.extend(
                    Job.from_description(entry, vault_name)
                    for entry in page.get("JobList", [])
                    if entry.get("Action") == INVENTORY_RETRIEVAL
                )
            return jobs
        except REMOTE_ERRORS as e:
            logger.error(f"Error listing jobs for vault {vault_name}: {e}")
            return []

    def initiate_inventory_job(self, vault_name: str) -> str:
        """
        Start an inventory-retrieval job.

        Returns:
            The new job id.
        """
        response = self.glacier.initiate_job(
            accountId=ACCOUNT_ID,
            vaultName=vault_name,
            jobParameters={"Type": "inventory-retrieval", "Format": "JSON"},
        )
        job_id = response["jobId"]
        logger.info(f"Job started for vault: {vault_name}. Job ID: {job_id}")
        return job_id

    def describe_job(self, vault_name: str, job_id: str) -> Job:
        response = self.glacier.describe_job(
            accountId=ACCOUNT_ID, vaultName=vault_name, jobId=job_id
        )
        return Job.from_description(response, vault_name)

    def get_inventory(self, vault_name: str, job_id: str) -> InventorySnapshot:
        """
        Download and parse the output of a completed inventory job.

        Raises:
            InventoryError: If the output cannot be fetched or parsed.
        """
        try:
            response = self.glacier.get_job_output(
                accountId=ACCOUNT_ID, vaultName=vault_name, jobId=job_id
            )
            with contextlib.closing(response["body"]) as body:
                payload = body.read()
        except REMOTE_ERRORS as e:
            logger.error(
                f"Failed to get output of job {job_id} (vault {vault_name}): {e}"
            )
            raise InventoryError(f"Could not fetch inventory for job {job_id}") from e

        snapshot = InventorySnapshot.from_json(payload, vault_name)
        logger.info(
            f"Inventory of {vault_name} ({snapshot.inventory_date or 'undated'}): "
            f"{len(snapshot.archives)} archives, {snapshot.total_size * 1e-9:.2f} GB"
        )
        return snapshot

    def delete_archive(self, vault_name: str, archive_id: str) -> None:
        self.glacier.delete_archive(
            accountId=ACCOUNT_ID, vaultName=vault_name, archiveId=archive_id
        )


def confirm(prompt: str) -> bool:
    """
    Get user confirmation for destructive operations.

    Args:
        prompt: The confirmation prompt to display.

    Returns:
        True if user confirms, False otherwise.
    """
    ans = input(f"{prompt} (y/N): ").strip().lower()
    return ans in ("y", "yes")


def choose(prompt: str, options: Sequence[tuple[str, str]]) -> str:
    """
    Let the user pick one entry from a numbered list.

    Args:
        prompt: Question shown above the list.
        options: (value, label) pairs.

    Returns:
        The value of the chosen entry.
    """
    logger.info(f"\n=== {prompt} ===")
    for i, (_, label) in enumerate(options, 1):
        logger.info(f"{i}. {label}")
    while True:
        ans = input(f"Select 1-{len(options)}: ").strip()
        if ans.isdigit() and 1 <= int(ans) <= len(options):
            return options[int(ans) - 1][0]
        logger.warning(f"Invalid selection: {ans!r}")


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description="Glacier Vault Deleter - Delete every archive in an S3 Glacier vault",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   Interactive mode - select region, vault and job
  %(prog)s --region eu-west-1 --vault photos Reuse or start an inventory job for one vault
  %(prog)s --vault photos --job-id JOBID     Wait for an existing inventory job
  %(prog)s --list                            List vaults and inventory jobs without deleting

Environment Variables:
  AWS_DEFAULT_REGION         Default region (us-east-1 if unset)
  AWS_ACCESS_KEY_ID          Optional access key (boto3 credential chain otherwise)
  AWS_SECRET_ACCESS_KEY      Optional secret key
  GLACIER_CHECK_INTERVAL_MS  Delay between job status checks (default: 3600000)
        """,
    )
    parser.add_argument("--region", "-r", type=str, help="Region holding the vault")
    parser.add_argument("--vault", "-V", type=str, help="Vault to empty")
    job_group = parser.add_mutually_exclusive_group()
    job_group.add_argument(
        "--job-id", "-j", type=str, help="Existing inventory-retrieval job to wait for"
    )
    job_group.add_argument(
        "--new-job", "-n", action="store_true", help="Always start a new inventory job"
    )
    parser.add_argument(
        "--check-interval-ms",
        "-i",
        type=float,
        help=f"Delay between job status checks (minimum: {MIN_CHECK_INTERVAL_MS})",
    )
    parser.add_argument(
        "--yes", "-y", action="store_true", help="Skip confirmation prompts"
    )
    parser.add_argument(
        "--list", "-l", action="store_true", help="List vaults and jobs without deleting"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser.parse_args(argv)


def _log_vaults(client: GlacierVaultClient, vaults: list[dict[str, Any]]) -> None:
    logger.info("\n=== Vaults Found ===")
    for i, vault in enumerate(vaults, 1):
        size_gb = vault.get("SizeInBytes", 0) * 1e-9
        logger.info(
            f"{i}. {vault['VaultName']} ({vault.get('NumberOfArchives', 0)} archives, "
            f"{size_gb:.2f} GB)"
        )
        for job in client.list_inventory_jobs(vault["VaultName"]):
            logger.info(f"     {job.label} created {job.creation_date}")


def _select_job(
    client: GlacierVaultClient, vault_name: str, args: argparse.Namespace
) -> str:
    if args.job_id:
        return args.job_id
    if not args.new_job:
        jobs = client.list_inventory_jobs(vault_name)
        if jobs:
            options = [("", "new: create a new inventory retrieval job")] + [
                (job.job_id, f"{job.label} created {job.creation_date}") for job in jobs
            ]
            selected = choose("Inventory retrieval jobs", options)
            if selected:
                return selected
    return client.initiate_inventory_job(vault_name)


def main(argv: Sequence[str] | None = None) -> None:
    """Main function that orchestrates the vault emptying process."""
    args = parse_arguments(argv)

    configure_logging(args.verbose)

    try:
        config = GlacierConfig.from_environment()
        if args.region:
            config.region = args.region
        if args.check_interval_ms is not None:
            config.check_interval_ms = args.check_interval_ms
        config.validate()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    client = GlacierVaultClient(config)
    poller: JobStatusPoller | None = None

    try:
        if not args.region:
            regions = client.list_regions()
            if not regions:
                logger.info("No regions found.")
                return
            client.use_region(choose("Glacier vault region", [(r, r) for r in regions]))

        vaults = client.list_vaults()
        if not vaults:
            logger.info(f"No vaults found in {config.region}.")
            return

        if args.list:
            _log_vaults(client, vaults)
            return

        vault_names = [vault["VaultName"] for vault in vaults]
        if args.vault:
            if args.vault not in vault_names:
                logger.error(f"Vault '{args.vault}' not found in {config.region}.")
                sys.exit(1)
            vault_name = args.vault
        else:
            vault_name = choose("Glacier vaults", [(name, name) for name in vault_names])

        job_id = _select_job(client, vault_name, args)

        if not (
            args.yes
            or confirm(
                f"\nWait for job {job_id} and then delete the archives of '{vault_name}'?"
            )
        ):
            logger.info("Stopped before waiting for the inventory.")
            return

        poller = JobStatusPoller(client.describe_job, interval_ms=config.check_interval_ms)
        completed_job_id = poller.wait_for_completion(vault_name, job_id)
        snapshot = client.get_inventory(vault_name, completed_job_id)

        if not (
            args.yes
            or confirm(
                f"\nDelete ALL {len(snapshot.archives)} archives in vault '{vault_name}'?"
            )
        ):
            logger.info(f"Skipped: {vault_name}")
            return

        pipeline = ArchiveDeletionPipeline(client.delete_archive)
        pipeline.run(vault_name, snapshot.archives)
        logger.info("\nOperation completed!")

    except (GlacierDeleterError, *REMOTE_ERRORS) as e:
        logger.error(f"Error during the deletion process: {e}")
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error during the deletion process")
        sys.exit(1)
    except KeyboardInterrupt:
        if poller is not None:
            poller.cancel()
        logger.warning("\n\nOperation interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
