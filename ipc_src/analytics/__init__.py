"""Dashboard analytics: infection rates, hand-hygiene compliance, disease census."""

from .rates import compute_infection_rates, compute_area_rates, round_rate
from .hand_hygiene import compute_hand_hygiene_stats, filter_audits_by_year
from .notifiable import (
    compute_active_census,
    export_cases_csv,
    filter_cases,
    is_active_outcome,
    monthly_trend,
    outcome_breakdown,
    quarter_date_range,
)

__all__ = [
    "compute_infection_rates",
    "compute_area_rates",
    "round_rate",
    "compute_hand_hygiene_stats",
    "filter_audits_by_year",
    "compute_active_census",
    "export_cases_csv",
    "filter_cases",
    "is_active_outcome",
    "monthly_trend",
    "outcome_breakdown",
    "quarter_date_range",
]
