"""Configuration for the IPC reporting portal.

Values come from the environment, optionally seeded from a ``.env`` file
next to the package.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Find and load .env file
_env_candidates = [
    Path(__file__).parent.parent / ".env",
    Path(__file__).parent.parent / ".env.template",
]

for env_path in _env_candidates:
    if env_path.exists():
        load_dotenv(env_path)
        break


class Config:
    """IPC reporting configuration."""

    # --- Record Store ---
    IPC_DB_PATH: str = os.getenv(
        "IPC_DB_PATH",
        str(Path.home() / ".ipc" / "ipc.db"),
    )

    # --- Document Extraction (vision LLM) ---
    EXTRACTION_ENABLED: bool = os.getenv("EXTRACTION_ENABLED", "true").lower() == "true"
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_VISION_MODEL: str = os.getenv("OLLAMA_VISION_MODEL", "llama3.2-vision")
    EXTRACTION_TIMEOUT: int = int(os.getenv("EXTRACTION_TIMEOUT", "120"))

    # --- Backup Sync ---
    # Validated notifiable/TB reports are mirrored to a spreadsheet webhook
    SHEETS_WEBHOOK_URL: str = os.getenv("SHEETS_WEBHOOK_URL", "")
    SHEETS_TIMEOUT: int = int(os.getenv("SHEETS_TIMEOUT", "15"))

    @classmethod
    def is_extraction_configured(cls) -> bool:
        """Check if the vision extraction backend is configured."""
        return cls.EXTRACTION_ENABLED and bool(cls.OLLAMA_BASE_URL)

