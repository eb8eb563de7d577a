"""Tests for the CLI runner."""

import sys

from ipc_src.data import SQLiteRecordStore
from ipc_src.runner import main
from ipc_src.sheets_backup import SheetsBackup
from ipc_src.workflow import ReportWorkflow


def run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["ipc-report", *args])
    monkeypatch.setattr("ipc_src.runner.setup_logging", lambda verbose=False: None)
    return main()


class TestRunner:
    """Tests for runner.main."""

    def test_no_action_prints_help(self, monkeypatch, tmp_path, capsys):
        assert run(monkeypatch, "--db", str(tmp_path / "cli.db")) == 1
        assert "usage" in capsys.readouterr().out

    def test_summaries(self, monkeypatch, tmp_path, capsys):
        db_path = tmp_path / "cli.db"
        workflow = ReportWorkflow(SQLiteRecordStore(db_path), backup=SheetsBackup(webhook_url=""))
        workflow.submit_census_log({"date": "2025-03-01", "icu": 10, "icuVent": 4})
        report = workflow.submit_report("notifiable", {"disease": "Dengue"})
        workflow.validate_report("notifiable", report["id"], "Coordinator")

        code = run(
            monkeypatch, "--db", str(db_path),
            "--rates", "--compliance", "--census", "--pending",
        )
        out = capsys.readouterr().out

        assert code == 0
        assert "Medicine Ward" in out
        assert "No hand hygiene audits found." in out
        assert "Dengue" in out
        assert "Notifiable Disease" in out

    def test_export_csv(self, monkeypatch, tmp_path):
        db_path = tmp_path / "cli.db"
        csv_path = tmp_path / "cases.csv"
        workflow = ReportWorkflow(SQLiteRecordStore(db_path), backup=SheetsBackup(webhook_url=""))
        report = workflow.submit_report(
            "notifiable", {"disease": "Dengue", "lastName": "Santos", "firstName": "Maria"}
        )
        workflow.validate_report("notifiable", report["id"], "Coordinator")

        assert run(monkeypatch, "--db", str(db_path), "--export-csv", str(csv_path)) == 0
        assert '"Santos, Maria"' in csv_path.read_text()
