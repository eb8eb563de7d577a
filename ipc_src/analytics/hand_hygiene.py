"""Hand-hygiene compliance tally from direct-observation audits."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

from ..models import ComplianceBucket, ComplianceReport, HandHygieneAudit

logger = logging.getLogger(__name__)

UNKNOWN_ROLE = "Other"
UNKNOWN_AREA = "Unknown"


def _percent(performed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when nothing observed."""
    if total == 0:
        return 0
    return int(Decimal(performed / total * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _as_audit(audit: HandHygieneAudit | Mapping[str, Any]) -> HandHygieneAudit:
    if isinstance(audit, HandHygieneAudit):
        return audit
    return HandHygieneAudit.from_record(audit)


def filter_audits_by_year(
    audits: Iterable[HandHygieneAudit | Mapping[str, Any]],
    year: int | str | None,
) -> list[HandHygieneAudit]:
    """Keep audits dated in the given calendar year (all audits if no year)."""
    parsed = [_as_audit(a) for a in audits]
    if not year:
        return parsed
    year = int(year)
    return [a for a in parsed if a.date is not None and a.date.year == year]


def compute_hand_hygiene_stats(
    audits: Iterable[HandHygieneAudit | Mapping[str, Any]],
) -> ComplianceReport | None:
    """Tally hand-hygiene compliance by auditee role and by area.

    Every observed moment is one opportunity for its audit's role bucket and
    area bucket; it is a performed opportunity unless the action was
    "Missed". A blank role goes to "Other" and a blank area to "Unknown",
    so bucket totals always add up to the grand total.

    Args:
        audits: Audit sessions (dataclasses or raw store rows).

    Returns:
        ComplianceReport with area buckets ranked by score (stable for
        ties), or None when there are no audits at all.
    """
    audits = [_as_audit(a) for a in audits]
    if not audits:
        return None

    roles: dict[str, ComplianceBucket] = {}
    areas: dict[str, ComplianceBucket] = {}
    grand_total = 0
    grand_performed = 0

    for audit in audits:
        role = audit.auditee_role or UNKNOWN_ROLE
        area = audit.area or UNKNOWN_AREA
        role_bucket = roles.setdefault(role, ComplianceBucket(name=role))
        area_bucket = areas.setdefault(area, ComplianceBucket(name=area))

        for moment in audit.moments:
            role_bucket.total += 1
            area_bucket.total += 1
            grand_total += 1
            if moment.performed:
                role_bucket.performed += 1
                area_bucket.performed += 1
                grand_performed += 1

    for bucket in [*roles.values(), *areas.values()]:
        bucket.compliance = _percent(bucket.performed, bucket.total)

    area_data = sorted(areas.values(), key=lambda b: b.compliance, reverse=True)

    logger.debug(f"Hand hygiene: {grand_performed}/{grand_total} opportunities performed")

    return ComplianceReport(
        role_data=list(roles.values()),
        area_data=area_data,
        overall=_percent(grand_performed, grand_total),
        grand_total=grand_total,
        grand_performed=grand_performed,
    )
