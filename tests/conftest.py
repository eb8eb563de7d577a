"""Shared fixtures for IPC reporting tests."""

from unittest.mock import MagicMock

import pytest

from ipc_src.data import SQLiteRecordStore
from ipc_src.sheets_backup import SheetsBackup
from ipc_src.workflow import ReportWorkflow


@pytest.fixture
def store(tmp_path):
    """Record store backed by a throwaway SQLite file."""
    return SQLiteRecordStore(tmp_path / "ipc.db")


@pytest.fixture
def backup():
    """Backup channel that records calls instead of posting."""
    mock = MagicMock(spec=SheetsBackup)
    mock.sync.return_value = True
    mock.is_configured.return_value = True
    return mock


@pytest.fixture
def workflow(store, backup):
    return ReportWorkflow(store, backup=backup)


@pytest.fixture
def census_row():
    """A single day's census with every area filled in."""
    return {
        "date": "2025-03-01",
        "overall": 100, "overallVent": 20, "overallIfc": 30, "overallCentral": 40,
        "icu": 10, "icuVent": 5, "icuIfc": 6, "icuCentral": 7,
        "picu": 8, "picuVent": 2, "picuIfc": 3, "picuCentral": 4,
        "nicu": 12, "nicuVent": 4, "nicuIfc": 0, "nicuCentral": 5,
        "medicine": 40, "medicineVent": 1, "medicineIfc": 10, "medicineCentral": 2,
        "cohort": 5, "cohortVent": 0, "cohortIfc": 1, "cohortCentral": 0,
    }
