"""Infection-rate aggregation from census logs and HAI events.

Turns daily census snapshots (patient-days and device-days per area) and
reported infection events into standardized incidence rates:

- Overall HAI rate: (VAP + HAP + CAUTI + CLABSI) per 1,000 patient-days
- VAP rate: per 1,000 ventilator-days
- HAP rate: per 1,000 patient-days
- CAUTI rate: per 1,000 indwelling-catheter-days
- CLABSI rate: per 1,000 central-line-days

Overall patient- and device-days come from the stored ``overall`` census
columns, not from summing the per-area columns. The two are entered
separately and may disagree.

Events are matched to an area by exact (case-sensitive) comparison of the
event's ``area`` with the area label. A mislabelled ward ("Icu") is not
counted for that area; it still counts toward Overall.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

from ..models import (
    AreaRates,
    CensusLogEntry,
    HAIType,
    InfectionEvent,
    MonitoredArea,
    RateReport,
)

logger = logging.getLogger(__name__)

RATE_MULTIPLIER = 1000


def round_rate(value: float, places: int = 2) -> float:
    """Round half away from zero on the exact binary value of ``value``."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _per_thousand(numerator: int, denominator: int | float) -> float:
    return round_rate(numerator / denominator * RATE_MULTIPLIER)


def _as_census(entry: CensusLogEntry | Mapping[str, Any]) -> CensusLogEntry:
    if isinstance(entry, CensusLogEntry):
        return entry
    return CensusLogEntry.from_record(entry)


def _as_event(event: InfectionEvent | Mapping[str, Any]) -> InfectionEvent:
    if isinstance(event, InfectionEvent):
        return event
    if hasattr(event, "to_event"):
        return event.to_event()
    return InfectionEvent.from_record(event)


def _count(events: list[InfectionEvent], hai_type: HAIType, area_label: str | None) -> int:
    return sum(
        1
        for event in events
        if event.hai_type == hai_type.value
        and (area_label is None or event.area == area_label)
    )


def compute_area_rates(
    area: MonitoredArea,
    census_logs: list[CensusLogEntry],
    events: list[InfectionEvent],
) -> AreaRates:
    """Calculate the five rates for a single monitored area.

    Every denominator is floored at 1 so an area with no logged days
    reports 0 instead of dividing by zero.
    """
    patient_days = sum(entry.area(area).patient_days for entry in census_logs) or 1
    vent_days = sum(entry.area(area).ventilator_days for entry in census_logs) or 1
    catheter_days = sum(entry.area(area).catheter_days for entry in census_logs) or 1
    central_days = sum(entry.area(area).central_line_days for entry in census_logs) or 1

    label = None if area.is_overall else area.label
    vap = _count(events, HAIType.VAP, label)
    hap = _count(events, HAIType.HAP, label)
    cauti = _count(events, HAIType.CAUTI, label)
    clabsi = _count(events, HAIType.CLABSI, label)

    return AreaRates(
        overall=_per_thousand(vap + hap + cauti + clabsi, patient_days),
        vap=_per_thousand(vap, vent_days),
        hap=_per_thousand(hap, patient_days),
        cauti=_per_thousand(cauti, catheter_days),
        clabsi=_per_thousand(clabsi, central_days),
    )


def compute_infection_rates(
    census_logs: Iterable[CensusLogEntry | Mapping[str, Any]],
    infection_events: Iterable[InfectionEvent | Mapping[str, Any]],
) -> RateReport:
    """Compute incidence rates for every monitored area.

    Args:
        census_logs: Daily census entries, in any order. Raw store rows are
            accepted and converted.
        infection_events: Reported HAIs (events, HAI reports, or raw rows).

    Returns:
        Mapping of area key (``overall``, ``icu``, ``picu``, ``nicu``,
        ``medicine``, ``cohort``) to its rounded rates.
    """
    logs = [_as_census(entry) for entry in census_logs]
    events = [_as_event(event) for event in infection_events]

    logger.debug(f"Computing infection rates from {len(logs)} census logs, {len(events)} events")

    return {
        area.value: compute_area_rates(area, logs, events)
        for area in MonitoredArea
    }
