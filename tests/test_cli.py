"""Tests for the command-line orchestration."""

import logging
from unittest.mock import MagicMock

import pytest
from rich.logging import RichHandler

import glacier_vault_deleter
from conftest import RecordingProgress, client_error
from glacier_vault_deleter import (
    Archive,
    InventorySnapshot,
    Job,
    configure_logging,
    main,
    parse_arguments,
    shared_console,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "AWS_DEFAULT_REGION",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "GLACIER_CHECK_INTERVAL_MS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def progress(monkeypatch):
    recorder = RecordingProgress()
    monkeypatch.setattr(glacier_vault_deleter, "ConsoleProgress", lambda: recorder)
    return recorder


@pytest.fixture
def vault_client(monkeypatch):
    instance = MagicMock()
    instance.list_regions.return_value = ["eu-west-1", "us-east-1"]
    instance.list_vaults.return_value = [
        {"VaultName": "photos", "SizeInBytes": 2_000_000_000, "NumberOfArchives": 2}
    ]
    instance.list_inventory_jobs.return_value = []
    instance.describe_job.return_value = Job(
        job_id="job-1", vault_name="photos", completed=True, status_code="Succeeded"
    )
    instance.get_inventory.return_value = InventorySnapshot(
        vault_name="photos", archives=(Archive("a"), Archive("b"))
    )
    monkeypatch.setattr(
        glacier_vault_deleter, "GlacierVaultClient", MagicMock(return_value=instance)
    )
    return instance


def answer(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))


class TestParseArguments:
    def test_job_id_and_new_job_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--job-id", "j", "--new-job"])

    def test_interval_is_numeric(self):
        args = parse_arguments(["--check-interval-ms", "20000"])
        assert args.check_interval_ms == 20000.0


class TestMain:
    """Tests for main()."""

    def test_full_run_with_existing_job(self, vault_client, progress):
        main(["--region", "us-east-1", "--vault", "photos", "--job-id", "job-1", "--yes"])

        vault_client.describe_job.assert_called_once_with("photos", "job-1")
        vault_client.get_inventory.assert_called_once_with("photos", "job-1")
        assert [c.args for c in vault_client.delete_archive.call_args_list] == [
            ("photos", "a"),
            ("photos", "b"),
        ]
        assert progress.value == 2

    def test_interactive_selection(self, monkeypatch, vault_client, progress):
        vault_client.list_inventory_jobs.return_value = [
            Job(job_id="job-1", vault_name="photos", completed=True)
        ]
        # region 1, vault 1, job 2 (existing), confirm wait, confirm delete
        answer(monkeypatch, "1", "1", "2", "y", "y")

        main([])

        vault_client.use_region.assert_called_once_with("eu-west-1")
        vault_client.initiate_inventory_job.assert_not_called()
        assert vault_client.delete_archive.call_count == 2

    def test_new_job_is_initiated(self, vault_client, progress):
        vault_client.initiate_inventory_job.return_value = "job-1"

        main(["--region", "us-east-1", "--vault", "photos", "--new-job", "--yes"])

        vault_client.initiate_inventory_job.assert_called_once_with("photos")
        vault_client.describe_job.assert_called_once_with("photos", "job-1")

    def test_no_regions_exits_early(self, vault_client):
        vault_client.list_regions.return_value = []

        main([])

        vault_client.list_vaults.assert_not_called()
        vault_client.describe_job.assert_not_called()

    def test_no_vaults_exits_early(self, vault_client):
        vault_client.list_vaults.return_value = []

        main(["--region", "us-east-1", "--yes"])

        vault_client.describe_job.assert_not_called()
        vault_client.delete_archive.assert_not_called()

    def test_unknown_vault(self, vault_client):
        with pytest.raises(SystemExit) as excinfo:
            main(["--region", "us-east-1", "--vault", "missing", "--yes"])
        assert excinfo.value.code == 1

    def test_invalid_interval_exits_with_configuration_error(self, vault_client):
        with pytest.raises(SystemExit) as excinfo:
            main(["--region", "us-east-1", "--check-interval-ms", "100"])

        assert excinfo.value.code == 2
        vault_client.list_vaults.assert_not_called()

    def test_declining_deletion_skips_pipeline(self, monkeypatch, vault_client, progress):
        answer(monkeypatch, "y", "n")

        main(["--region", "us-east-1", "--vault", "photos", "--job-id", "job-1"])

        vault_client.get_inventory.assert_called_once()
        vault_client.delete_archive.assert_not_called()
        assert not progress.started

    def test_declining_wait_skips_polling(self, monkeypatch, vault_client):
        answer(monkeypatch, "no")

        main(["--region", "us-east-1", "--vault", "photos", "--job-id", "job-1"])

        vault_client.describe_job.assert_not_called()

    def test_polling_error_is_fatal(self, vault_client, progress):
        vault_client.describe_job.side_effect = client_error("ResourceNotFoundException", "DescribeJob")

        with pytest.raises(SystemExit) as excinfo:
            main(["--region", "us-east-1", "--vault", "photos", "--job-id", "job-1", "--yes"])

        assert excinfo.value.code == 1
        vault_client.get_inventory.assert_not_called()
        vault_client.delete_archive.assert_not_called()

    def test_deletion_failures_do_not_change_exit(self, vault_client, progress):
        vault_client.delete_archive.side_effect = [client_error(), None]

        main(["--region", "us-east-1", "--vault", "photos", "--job-id", "job-1", "--yes"])

        assert vault_client.delete_archive.call_count == 2
        assert progress.value == 1

    def test_list_only(self, vault_client):
        main(["--region", "us-east-1", "--list"])

        vault_client.list_inventory_jobs.assert_called_once_with("photos")
        vault_client.describe_job.assert_not_called()


def test_unexpected_error_exits_with_failure(vault_client, progress, caplog):
    vault_client.get_inventory.side_effect = RuntimeError("stream reset")

    with pytest.raises(SystemExit) as excinfo:
        main(["--region", "us-east-1", "--vault", "photos", "--job-id", "job-1", "--yes"])

    assert excinfo.value.code == 1
    assert "Unexpected error during the deletion process" in caplog.text
    vault_client.delete_archive.assert_not_called()


def test_logging_shares_the_progress_console():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging(verbose=True)
        configure_logging()
        added = [h for h in root.handlers if isinstance(h, RichHandler)]

        assert len(added) == 1
        assert added[0].console is shared_console
        assert root.level == logging.INFO
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(level)
