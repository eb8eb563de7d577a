"""Flask application factory for the IPC reporting API."""

import logging
import os

from flask import Flask, jsonify

from ipc_src.data import SQLiteRecordStore
from ipc_src.extraction import DocumentExtractor
from ipc_src.sheets_backup import SheetsBackup
from ipc_src.workflow import ReportWorkflow

from .config import get_config

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Build the app around a record store at ``IPC_DB_PATH``.

    Args:
        config: Settings object or dict; defaults to ``get_config()``.
            Dict settings not given fall back to the portal config.

    Returns:
        Flask app with ``app.workflow`` and ``app.extractor`` attached
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    app.config.from_object(get_config())
    if isinstance(config, dict):
        app.config.update(config)
    elif config is not None:
        app.config.from_object(config)

    store = SQLiteRecordStore(app.config["IPC_DB_PATH"])
    app.workflow = ReportWorkflow(
        store,
        backup=SheetsBackup(webhook_url=app.config["SHEETS_WEBHOOK_URL"]),
    )
    app.extractor = DocumentExtractor()
    logger.info(f"Record store at {store.db_path}")

    from .routes import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Blueprint handlers never see routing errors
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    return app


def run_dev_server():
    """Run development server."""
    app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=app.config["DEBUG"],
    )


if __name__ == "__main__":
    run_dev_server()
