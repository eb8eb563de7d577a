"""Ollama vision client for document extraction.

Runs a local multimodal model so scanned charts and lab reports (PHI) stay
on-premise.
"""

import json
import logging
from typing import Any

import requests

from ..config import Config

logger = logging.getLogger(__name__)

TAGS_TIMEOUT = 5


class OllamaVisionClient:
    """Sends one image plus a prompt to Ollama's chat API."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: int | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Ollama server, e.g. ``http://localhost:11434``. Uses config if None.
            model: Multimodal model tag. Uses config if None.
            timeout: Seconds to wait for a chat reply. Uses config if None.
        """
        self.base_url = (base_url or Config.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or Config.OLLAMA_VISION_MODEL
        self.timeout = timeout or Config.EXTRACTION_TIMEOUT
        self.session = requests.Session()

    def _chat(self, message: dict[str, Any], output_schema: dict[str, Any], temperature: float) -> str:
        """POST one user message and return the reply text."""
        response = self.session.post(
            f"{self.base_url}/api/chat",
            json={
                "model": self.model,
                "messages": [message],
                "stream": False,
                "format": output_schema,
                "options": {"temperature": temperature},
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json().get("message", {}).get("content") or "{}"

    def generate_structured(
        self,
        prompt: str,
        image_b64: str,
        output_schema: dict[str, Any],
        temperature: float = 0.0,
    ) -> dict[str, Any]:
        """Ask the model about one image and get JSON matching ``output_schema``.

        Raises:
            requests.RequestException: If the request fails.
            ValueError: If the model does not return a JSON object.
        """
        message = {"role": "user", "content": prompt, "images": [image_b64]}
        try:
            content = self._chat(message, output_schema, temperature)
        except requests.RequestException as e:
            logger.error(f"Ollama vision request to {self.model} failed: {e}")
            raise

        try:
            result = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Vision model returned unparseable JSON: {e}")
            raise ValueError(f"Invalid JSON response: {e}") from e

        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
        return result

    def is_available(self) -> bool:
        """Check that the server answers and has pulled the vision model.

        ``llama3.2-vision`` matches a pulled ``llama3.2-vision:latest``.
        """
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=TAGS_TIMEOUT)
            response.raise_for_status()
            pulled = {m.get("name", "") for m in response.json().get("models", [])}
        except requests.RequestException as e:
            logger.debug(f"Ollama not reachable at {self.base_url}: {e}")
            return False

        wanted = self.model if ":" in self.model else f"{self.model}:latest"
        return self.model in pulled or wanted in pulled

    @property
    def model_name(self) -> str:
        return self.model
