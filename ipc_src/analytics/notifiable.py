"""Notifiable-disease census, filters and export.

A case is *active* while its outcome is blank, "Admitted" or "ER-level";
any other outcome (Recovered, Discharged, Died, ...) resolves it. The same
predicate drives the active census and the "Active" outcome filter.
"""

import csv
import logging
from datetime import date
from typing import Any, Iterable, Mapping

import pandas as pd

from ..models import ActiveCensus, NotifiableDiseaseCase

logger = logging.getLogger(__name__)

ACTIVE_OUTCOMES = ("Admitted", "ER-level")
OUTCOME_FILTER_ACTIVE = "Active"
OUTCOME_FILTER_ALL = "All"
UNKNOWN_DISEASE = "Unknown"

EXPORT_COLUMNS = [
    "Report_Date",
    "Patient_Name",
    "Hospital_Number",
    "Disease",
    "Ward",
    "Status",
    "Admission_Date",
    "Reporter",
]

_QUARTERS = {
    "Q1": ((1, 1), (3, 31)),
    "Q2": ((4, 1), (6, 30)),
    "Q3": ((7, 1), (9, 30)),
    "Q4": ((10, 1), (12, 31)),
}


def _as_case(case: NotifiableDiseaseCase | Mapping[str, Any]) -> NotifiableDiseaseCase:
    if isinstance(case, NotifiableDiseaseCase):
        return case
    return NotifiableDiseaseCase.from_record(case)


def is_active_outcome(outcome: str | None) -> bool:
    """Check whether an outcome leaves the case active."""
    return not outcome or outcome in ACTIVE_OUTCOMES


def compute_active_census(
    cases: Iterable[NotifiableDiseaseCase | Mapping[str, Any]],
) -> ActiveCensus:
    """Count active cases overall and per disease.

    Active cases without a disease count toward the total only.

    Returns:
        ActiveCensus with per-disease counts sorted highest first
        (ties keep first-seen order).
    """
    active = [c for c in map(_as_case, cases) if is_active_outcome(c.outcome)]

    counts: dict[str, int] = {}
    for case in active:
        if case.disease:
            counts[case.disease] = counts.get(case.disease, 0) + 1

    return ActiveCensus(
        total_active=len(active),
        per_disease_counts=sorted(counts.items(), key=lambda item: item[1], reverse=True),
    )


def quarter_date_range(
    quarter: str | None,
    year: int | str | None = None,
    today: date | None = None,
) -> tuple[date, date] | None:
    """Resolve a quarter selector to an inclusive date range.

    Args:
        quarter: "Q1".."Q4" (a "(Jan-Mar)" style suffix is allowed) or "YTD".
        year: Calendar year; defaults to the current year.
        today: Reference date for YTD and the default year.

    Returns:
        (start, end) dates, or None for a blank/unknown selector.
    """
    if not quarter:
        return None
    today = today or date.today()
    year = int(year) if year else today.year
    key = quarter.strip().split(" ")[0].upper()

    if key == "YTD":
        return date(year, 1, 1), today
    if key in _QUARTERS:
        (start_month, start_day), (end_month, end_day) = _QUARTERS[key]
        return date(year, start_month, start_day), date(year, end_month, end_day)
    return None


def filter_cases(
    cases: Iterable[NotifiableDiseaseCase | Mapping[str, Any]],
    disease: str | None = None,
    area: str | None = None,
    outcome: str | None = OUTCOME_FILTER_ACTIVE,
    year: int | str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[NotifiableDiseaseCase]:
    """Filter cases the way the notifiable dashboard does.

    Args:
        disease: Exact disease name, or None for all.
        area: Exact ward, or None for all.
        outcome: "Active" (blank/Admitted/ER-level), "All", or an exact outcome.
        year: Calendar year of ``dateReported``.
        start_date: Inclusive lower bound on ``dateReported``.
        end_date: Inclusive upper bound on ``dateReported``.
    """
    results = []
    for case in map(_as_case, cases):
        reported = case.date_reported
        if year and (reported is None or reported.year != int(year)):
            continue
        if disease and case.disease != disease:
            continue
        if area and case.area != area:
            continue
        if outcome == OUTCOME_FILTER_ACTIVE:
            if not is_active_outcome(case.outcome):
                continue
        elif outcome and outcome != OUTCOME_FILTER_ALL and case.outcome != outcome:
            continue
        if start_date and (reported is None or reported < start_date):
            continue
        if end_date and (reported is None or reported > end_date):
            continue
        results.append(case)
    return results


def monthly_trend(
    cases: Iterable[NotifiableDiseaseCase | Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Per-month case counts by disease, oldest month first.

    Each row is ``{"name": "YYYY-MM", "total": n, "diseases": {"<disease>": n}}``.
    Cases without a disease are counted under "Unknown".
    """
    months: dict[str, dict[str, Any]] = {}
    for case in map(_as_case, cases):
        if case.date_reported is None:
            continue
        month = case.date_reported.strftime("%Y-%m")
        row = months.setdefault(month, {"name": month, "total": 0, "diseases": {}})
        disease = case.disease or UNKNOWN_DISEASE
        row["diseases"][disease] = row["diseases"].get(disease, 0) + 1
        row["total"] += 1
    return [months[m] for m in sorted(months)]


def outcome_breakdown(
    cases: Iterable[NotifiableDiseaseCase | Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Case counts per outcome; a blank outcome is reported as "Active"."""
    counts: dict[str, int] = {}
    for case in map(_as_case, cases):
        key = case.outcome or OUTCOME_FILTER_ACTIVE
        counts[key] = counts.get(key, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def format_patient_name(last: str | None, first: str | None, authenticated: bool) -> str:
    """Full name for signed-in staff, initials ("D.J.") otherwise."""
    if authenticated:
        return f"{last}, {first}"
    return f"{(last or '')[:1]}.{(first or '')[:1]}."


def export_cases_csv(
    cases: Iterable[NotifiableDiseaseCase | Mapping[str, Any]],
    authenticated: bool = False,
) -> str:
    """Export cases as CSV text (every value quoted).

    Returns:
        CSV text, or an empty string when there is nothing to export.
    """
    rows = [
        {
            "Report_Date": c.date_reported.isoformat() if c.date_reported else None,
            "Patient_Name": format_patient_name(c.last_name, c.first_name, authenticated),
            "Hospital_Number": c.hospital_number,
            "Disease": c.disease,
            "Ward": c.area,
            "Status": c.outcome or "Admitted",
            "Admission_Date": c.date_of_admission,
            "Reporter": c.reporter_name,
        }
        for c in map(_as_case, cases)
    ]
    if not rows:
        return ""

    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS).fillna("")
    logger.info(f"Exporting {len(df)} notifiable cases to CSV")
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
