"""Cleanup applied to form data before it reaches the record store."""

from datetime import date
from typing import Any, Mapping

# Person/place names are stored title-cased
NAME_FIELDS = frozenset([
    "lastName",
    "firstName",
    "middleName",
    "reporterName",
    "hcwName",
    "organism",
    "barangay",
    "city",
    "supervisorName",
    "ipcName",
    "patientName",
    "nurseInCharge",
])

# Client-side placeholder ids look like "temp-3", "form-1" or are very short
_PLACEHOLDER_ID_MARKERS = ("temp", "form")
_MIN_REAL_ID_LENGTH = 5


def title_case(value: str) -> str:
    """Collapse whitespace and capitalize each word ("dela CRUZ" -> "Dela Cruz")."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split())


def _is_placeholder_id(value: str) -> bool:
    return (
        any(marker in value for marker in _PLACEHOLDER_ID_MARKERS)
        or len(value) < _MIN_REAL_ID_LENGTH
    )


def sanitize_record(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a cleaned copy of submitted form data.

    - String values are trimmed; blank strings become None.
    - Name fields are title-cased.
    - A placeholder string ``id`` is dropped so the store assigns one.
    """
    sanitized = dict(data or {})

    record_id = sanitized.get("id")
    if isinstance(record_id, str) and record_id and _is_placeholder_id(record_id):
        del sanitized["id"]

    for key, value in sanitized.items():
        if isinstance(value, str):
            trimmed = value.strip()
            if not trimmed:
                sanitized[key] = None
            elif key in NAME_FIELDS:
                sanitized[key] = title_case(trimmed)
            else:
                sanitized[key] = trimmed
        elif isinstance(value, list):
            sanitized[key] = list(value)

    return sanitized


def calculate_age(dob: str | date | None, today: date | None = None) -> str:
    """Age in whole years from a date of birth, or "" if unknown."""
    if not dob:
        return ""
    if isinstance(dob, str):
        try:
            dob = date.fromisoformat(dob[:10])
        except ValueError:
            return ""
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return str(age)
