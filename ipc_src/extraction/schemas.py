"""Schemas for document extraction.

This module defines:
- PATIENT_INFO_SCHEMA / CULTURE_REPORT_SCHEMA: JSON schemas sent to the model
- PatientInfoExtraction: Patient identity fields read from a document
- CultureReportExtraction: Patient, organism and antibiogram from a lab report

Extractions only prefill forms; staff review every field before submitting.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..models import AntibioticResult

SEX_VALUES = ("Male", "Female")
INTERPRETATIONS = ("S", "I", "R")

PATIENT_INFO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "lastName": {"type": "string"},
        "firstName": {"type": "string"},
        "middleName": {"type": "string"},
        "hospitalNumber": {"type": "string"},
        "dob": {"type": "string", "description": "Date of birth in YYYY-MM-DD format"},
        "sex": {"type": "string", "enum": list(SEX_VALUES)},
    },
}

CULTURE_REPORT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "lastName": {"type": "string"},
        "firstName": {"type": "string"},
        "middleName": {"type": "string"},
        "hospitalNumber": {"type": "string"},
        "age": {"type": "integer"},
        "sex": {"type": "string", "enum": list(SEX_VALUES)},
        "organism": {"type": "string"},
        "specimen": {"type": "string"},
        "colonyCount": {"type": "string"},
        "antibiotics": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "mic": {"type": "string"},
                    "interpretation": {"type": "string", "enum": list(INTERPRETATIONS)},
                },
                "required": ["name", "interpretation"],
            },
        },
    },
}


def _text(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _sex(data: Mapping[str, Any]) -> str | None:
    value = _text(data, "sex")
    return value if value in SEX_VALUES else None


@dataclass
class PatientInfoExtraction:
    """Patient identity read from a document image."""
    last_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    hospital_number: str | None = None
    dob: str | None = None  # YYYY-MM-DD
    sex: str | None = None  # Male / Female

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PatientInfoExtraction":
        return cls(
            last_name=_text(data, "lastName"),
            first_name=_text(data, "firstName"),
            middle_name=_text(data, "middleName"),
            hospital_number=_text(data, "hospitalNumber"),
            dob=_text(data, "dob"),
            sex=_sex(data),
        )

    def to_record(self) -> dict:
        """Form prefill (camelCase, blanks as empty strings)."""
        return {
            "lastName": self.last_name or "",
            "firstName": self.first_name or "",
            "middleName": self.middle_name or "",
            "hospitalNumber": self.hospital_number or "",
            "dob": self.dob or "",
            "sex": self.sex or "",
        }


@dataclass
class CultureReportExtraction:
    """Culture and sensitivity results read from a lab report image."""
    last_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    hospital_number: str | None = None
    age: int | None = None
    sex: str | None = None
    organism: str | None = None
    specimen: str | None = None
    colony_count: str | None = None
    antibiotics: list[AntibioticResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CultureReportExtraction":
        try:
            age = int(data["age"]) if data.get("age") not in (None, "") else None
        except (TypeError, ValueError):
            age = None

        antibiotics = []
        for item in data.get("antibiotics") or []:
            if not isinstance(item, Mapping) or not _text(item, "name"):
                continue
            result = AntibioticResult.from_dict(item)
            if result.interpretation not in INTERPRETATIONS:
                result.interpretation = None
            antibiotics.append(result)

        return cls(
            last_name=_text(data, "lastName"),
            first_name=_text(data, "firstName"),
            middle_name=_text(data, "middleName"),
            hospital_number=_text(data, "hospitalNumber"),
            age=age,
            sex=_sex(data),
            organism=_text(data, "organism"),
            specimen=_text(data, "specimen"),
            colony_count=_text(data, "colonyCount"),
            antibiotics=antibiotics,
        )

    def to_record(self) -> dict:
        """Form prefill (camelCase, blanks as empty strings)."""
        return {
            "lastName": self.last_name or "",
            "firstName": self.first_name or "",
            "middleName": self.middle_name or "",
            "hospitalNumber": self.hospital_number or "",
            "age": str(self.age) if self.age is not None else "",
            "sex": self.sex or "",
            "organism": self.organism or "",
            "specimen": self.specimen or "",
            "colonyCount": self.colony_count or "",
            "antibiotics": [a.to_dict() for a in self.antibiotics],
        }
