"""Shared fakes for the Glacier vault deleter tests."""

import pytest
from botocore.exceptions import ClientError

from glacier_vault_deleter import Archive, Job


def client_error(code="ResourceNotFoundException", operation="DeleteArchive"):
    return ClientError(
        {"Error": {"Code": code, "Message": f"{code} raised by fake"}}, operation
    )


class RecordingProgress:
    """Progress handle that remembers every call."""

    def __init__(self):
        self.total = None
        self.value = 0
        self.started = False
        self.stopped = False

    def start(self, total):
        self.total = total
        self.value = 0
        self.started = True

    def advance(self):
        self.value += 1

    def stop(self):
        self.stopped = True


class FakeVault:
    """In-memory vault whose delete_archive behaves like the remote service."""

    def __init__(self, archive_ids, broken=()):
        self.archive_ids = set(archive_ids)
        self.broken = set(broken)
        self.calls = []

    def delete_archive(self, vault_name, archive_id):
        self.calls.append((vault_name, archive_id))
        if archive_id in self.broken:
            raise client_error("ServiceUnavailableException")
        if archive_id not in self.archive_ids:
            raise client_error("ResourceNotFoundException")
        self.archive_ids.remove(archive_id)


class ScriptedJobStatus:
    """describe_job fake that reports completion on a given check."""

    def __init__(self, complete_on, vault_name="photos", job_id="job-1"):
        self.complete_on = complete_on
        self.vault_name = vault_name
        self.job_id = job_id
        self.calls = []

    def __call__(self, vault_name, job_id):
        self.calls.append((vault_name, job_id))
        return Job(
            job_id=job_id,
            vault_name=vault_name,
            completed=len(self.calls) >= self.complete_on,
            status_code="Succeeded" if len(self.calls) >= self.complete_on else "InProgress",
        )


@pytest.fixture
def progress():
    return RecordingProgress()


@pytest.fixture
def archives():
    return [Archive(archive_id=f"archive-{i}", size=1024 * i) for i in range(1, 6)]
