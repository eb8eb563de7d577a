"""Extract patient and lab fields from document images.

Used to prefill report forms from a photo of a chart face sheet or a lab
report. Extraction is strictly best-effort: any failure returns None and
the user fills the form by hand.
"""

import logging
import time

from ..config import Config
from .ollama_vision import OllamaVisionClient
from .schemas import (
    CULTURE_REPORT_SCHEMA,
    PATIENT_INFO_SCHEMA,
    CultureReportExtraction,
    PatientInfoExtraction,
)

logger = logging.getLogger(__name__)

PATIENT_INFO_PROMPT = (
    "Extract patient info from the document image. "
    "Return dates as YYYY-MM-DD and leave unknown fields empty."
)

CULTURE_REPORT_PROMPT = (
    "Extract all culture and sensitivity results from the lab report image. "
    "Use S, I or R for each antibiotic interpretation."
)


def strip_data_url(image: str) -> str:
    """Drop a ``data:image/...;base64,`` prefix if present."""
    if "base64," in image:
        return image.split("base64,", 1)[1]
    return image


class DocumentExtractor:
    """Reads structured fields from document images with a vision model."""

    def __init__(self, client: OllamaVisionClient | None = None, enabled: bool | None = None):
        """Initialize the extractor.

        Args:
            client: Vision client. Created from config if None.
            enabled: Override ``Config.is_extraction_configured()``.
        """
        self.enabled = Config.is_extraction_configured() if enabled is None else enabled
        self.client = client or OllamaVisionClient()

    def _extract(self, image: str, prompt: str, schema: dict) -> dict | None:
        if not self.enabled:
            logger.debug("Document extraction disabled")
            return None
        if not image:
            return None

        start_time = time.time()
        try:
            result = self.client.generate_structured(prompt, strip_data_url(image), schema)
        except Exception as e:
            logger.warning(f"Document extraction failed: {e}")
            return None

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Document extraction completed in {elapsed_ms}ms ({self.client.model_name})")
        return result

    def extract_patient_info(self, image: str) -> PatientInfoExtraction | None:
        """Read patient identity fields from a base64 image (or data URL)."""
        result = self._extract(image, PATIENT_INFO_PROMPT, PATIENT_INFO_SCHEMA)
        if result is None:
            return None
        return PatientInfoExtraction.from_dict(result)

    def extract_culture_report(self, image: str) -> CultureReportExtraction | None:
        """Read a culture and sensitivity report from a base64 image (or data URL)."""
        result = self._extract(image, CULTURE_REPORT_PROMPT, CULTURE_REPORT_SCHEMA)
        if result is None:
            return None
        return CultureReportExtraction.from_dict(result)
