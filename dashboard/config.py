"""Flask settings for the IPC JSON API.

Record store, backup and extraction settings are shared with the CLI and
come from ``ipc_src.config.Config``.
"""

import os

from ipc_src.config import Config as PortalConfig


class Config:
    """Settings common to every environment."""

    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-change-in-production")
    DEBUG = False

    # Requests carrying this key get full patient names in CSV exports
    DASHBOARD_API_KEY = os.environ.get("DASHBOARD_API_KEY", "")

    IPC_DB_PATH = PortalConfig.IPC_DB_PATH
    SHEETS_WEBHOOK_URL = PortalConfig.SHEETS_WEBHOOK_URL


class DevelopmentConfig(Config):
    DEBUG = os.environ.get("FLASK_DEBUG", "true").lower() == "true"


class ProductionConfig(Config):
    pass


def get_config():
    """Pick the settings class for FLASK_ENV (development unless "production")."""
    if os.environ.get("FLASK_ENV", "development") == "production":
        return ProductionConfig()
    return DevelopmentConfig()
