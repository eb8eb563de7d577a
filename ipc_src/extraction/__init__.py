"""Document image extraction for form prefill."""

from .extractor import DocumentExtractor, strip_data_url
from .ollama_vision import OllamaVisionClient
from .schemas import CultureReportExtraction, PatientInfoExtraction

__all__ = [
    "DocumentExtractor",
    "strip_data_url",
    "OllamaVisionClient",
    "CultureReportExtraction",
    "PatientInfoExtraction",
]
