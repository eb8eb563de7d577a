"""Tests for the spreadsheet backup webhook."""

from unittest.mock import MagicMock, patch

import requests

from ipc_src.sheets_backup import SheetsBackup


class TestSheetsBackup:
    """Tests for SheetsBackup."""

    def test_not_configured(self):
        backup = SheetsBackup(webhook_url="")

        with patch("ipc_src.sheets_backup.requests.post") as post:
            assert backup.sync({"id": "abc-123"}) is False
        assert not backup.is_configured()
        post.assert_not_called()

    def test_sync_posts_json(self):
        backup = SheetsBackup(webhook_url="https://example.test/hook", timeout=3)
        response = MagicMock()
        response.raise_for_status.return_value = None

        with patch("ipc_src.sheets_backup.requests.post", return_value=response) as post:
            assert backup.sync({"id": "abc-123", "disease": "Dengue"}) is True

        assert post.call_args[0][0] == "https://example.test/hook"
        assert post.call_args[1]["json"] == {"id": "abc-123", "disease": "Dengue"}
        assert post.call_args[1]["timeout"] == 3

    def test_http_error_returns_false(self):
        backup = SheetsBackup(webhook_url="https://example.test/hook")
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("500")

        with patch("ipc_src.sheets_backup.requests.post", return_value=response):
            assert backup.sync({"id": "abc-123"}) is False

    def test_connection_error_returns_false(self):
        backup = SheetsBackup(webhook_url="https://example.test/hook")

        with patch("ipc_src.sheets_backup.requests.post", side_effect=requests.ConnectionError("down")):
            assert backup.sync({"id": "abc-123"}) is False
