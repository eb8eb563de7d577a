"""Spreadsheet backup for notifiable-disease and TB reports.

Reports are mirrored to a Google Apps Script (or any JSON) webhook when
they are submitted and again when a coordinator validates them. The backup
is best-effort: a failure is logged and never blocks the workflow.
"""

import logging
from typing import Any, Mapping

import requests

from .config import Config

logger = logging.getLogger(__name__)


class SheetsBackup:
    """Posts report payloads to the backup webhook."""

    def __init__(self, webhook_url: str | None = None, timeout: int | None = None):
        """Initialize the backup channel.

        Args:
            webhook_url: Webhook URL. Uses config if None.
            timeout: Request timeout in seconds. Uses config if None.
        """
        self.webhook_url = webhook_url if webhook_url is not None else Config.SHEETS_WEBHOOK_URL
        self.timeout = timeout or Config.SHEETS_TIMEOUT

    def is_configured(self) -> bool:
        """Check if the backup webhook is configured."""
        return bool(self.webhook_url)

    def sync(self, payload: Mapping[str, Any]) -> bool:
        """Send one report to the backup sheet.

        Returns:
            True if the webhook accepted the payload
        """
        if not self.is_configured():
            logger.debug("Sheets backup not configured, skipping")
            return False

        try:
            response = requests.post(
                self.webhook_url,
                json=dict(payload),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            logger.info(f"Backed up report {payload.get('id', '(new)')} to sheets")
            return True

        except requests.RequestException as e:
            logger.error(f"Sheets backup failed: {e}")
            return False
