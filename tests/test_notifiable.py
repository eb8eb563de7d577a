"""Tests for notifiable-disease census, filters and export."""

from datetime import date

import pytest

from ipc_src.analytics import (
    compute_active_census,
    export_cases_csv,
    filter_cases,
    is_active_outcome,
    monthly_trend,
    outcome_breakdown,
    quarter_date_range,
)
from ipc_src.analytics.notifiable import format_patient_name
from ipc_src.models import NotifiableDiseaseCase


def case(disease, outcome=None, reported="2025-02-10", area="Medicine Ward", **extra):
    return {
        "disease": disease,
        "outcome": outcome,
        "dateReported": reported,
        "area": area,
        **extra,
    }


class TestIsActiveOutcome:
    """Tests for the active-case predicate."""

    @pytest.mark.parametrize("outcome", [None, "", "Admitted", "ER-level"])
    def test_active(self, outcome):
        assert is_active_outcome(outcome)

    @pytest.mark.parametrize("outcome", ["Recovered", "Discharged", "Died", "admitted"])
    def test_resolved(self, outcome):
        assert not is_active_outcome(outcome)


class TestComputeActiveCensus:
    """Tests for compute_active_census."""

    def test_empty(self):
        census = compute_active_census([])
        assert census.total_active == 0
        assert census.per_disease_counts == []

    def test_recovered_cases_excluded(self):
        census = compute_active_census([
            case("Dengue", "Admitted"),
            case("Dengue", "Recovered"),
        ])

        assert census.total_active == 1
        assert census.per_disease_counts == [("Dengue", 1)]

    def test_sorted_by_count_with_stable_ties(self):
        census = compute_active_census([
            case("Measles"),
            case("Dengue", "ER-level"),
            case("Leptospirosis", ""),
            case("Dengue", "Admitted"),
            case("Pertussis"),
        ])

        assert census.total_active == 5
        assert census.per_disease_counts == [
            ("Dengue", 2),
            ("Measles", 1),
            ("Leptospirosis", 1),
            ("Pertussis", 1),
        ]

    def test_blank_disease_counts_toward_total_only(self):
        census = compute_active_census([case(None), case(""), case("Dengue")])

        assert census.total_active == 3
        assert census.per_disease_counts == [("Dengue", 1)]

    def test_to_dict(self):
        census = compute_active_census([case("Dengue")])
        assert census.to_dict() == {"totalActive": 1, "perDiseaseCounts": [["Dengue", 1]]}


class TestQuarterDateRange:
    """Tests for quarter_date_range."""

    def test_quarters(self):
        assert quarter_date_range("Q1", 2025) == (date(2025, 1, 1), date(2025, 3, 31))
        assert quarter_date_range("Q4 (Oct-Dec)", "2024") == (date(2024, 10, 1), date(2024, 12, 31))

    def test_ytd(self):
        today = date(2025, 6, 15)
        assert quarter_date_range("YTD", None, today=today) == (date(2025, 1, 1), today)

    @pytest.mark.parametrize("quarter", [None, "", "Q5", "All"])
    def test_unknown_selector(self, quarter):
        assert quarter_date_range(quarter, 2025) is None


class TestFilterCases:
    """Tests for filter_cases."""

    @pytest.fixture
    def cases(self):
        return [
            case("Dengue", None, "2025-01-05", "ICU"),
            case("Dengue", "Recovered", "2025-02-10", "Medicine Ward"),
            case("Measles", "Admitted", "2025-04-01", "PICU"),
            case("Dengue", "Died", "2024-11-20", "ICU"),
        ]

    def test_default_is_active_only(self, cases):
        assert [c.disease for c in filter_cases(cases)] == ["Dengue", "Measles"]

    def test_all_outcomes(self, cases):
        assert len(filter_cases(cases, outcome="All")) == 4

    def test_exact_outcome(self, cases):
        result = filter_cases(cases, outcome="Recovered")
        assert [c.area for c in result] == ["Medicine Ward"]

    def test_disease_area_year(self, cases):
        result = filter_cases(cases, disease="Dengue", area="ICU", outcome="All", year=2025)
        assert [c.date_reported for c in result] == [date(2025, 1, 5)]

    def test_date_range(self, cases):
        start, end = quarter_date_range("Q1", 2025)
        result = filter_cases(cases, outcome="All", start_date=start, end_date=end)
        assert len(result) == 2


class TestSummaries:
    """Tests for monthly_trend and outcome_breakdown."""

    def test_monthly_trend(self):
        trend = monthly_trend([
            case("Dengue", reported="2025-02-01"),
            case("Measles", reported="2025-01-15"),
            case("Dengue", reported="2025-02-20"),
            case("Dengue", reported=None),
        ])

        assert trend == [
            {"name": "2025-01", "total": 1, "diseases": {"Measles": 1}},
            {"name": "2025-02", "total": 2, "diseases": {"Dengue": 2}},
        ]

    def test_monthly_trend_blank_disease_is_unknown(self):
        trend = monthly_trend([
            case("Dengue", reported="2025-03-01"),
            case(None, reported="2025-03-02"),
            case("", reported="2025-03-03"),
        ])

        assert trend == [
            {"name": "2025-03", "total": 3, "diseases": {"Dengue": 1, "Unknown": 2}},
        ]

    def test_monthly_trend_disease_names_do_not_clash_with_row_keys(self):
        trend = monthly_trend([
            case("total", reported="2025-03-01"),
            case("name", reported="2025-03-02"),
        ])

        assert trend[0]["name"] == "2025-03"
        assert trend[0]["total"] == 2
        assert trend[0]["diseases"] == {"total": 1, "name": 1}

    def test_outcome_breakdown(self):
        breakdown = outcome_breakdown([
            case("Dengue"),
            case("Dengue", "Recovered"),
            case("Dengue", ""),
        ])

        assert breakdown == [
            {"name": "Active", "value": 2},
            {"name": "Recovered", "value": 1},
        ]


class TestExportCasesCsv:
    """Tests for CSV export."""

    def test_empty_export(self):
        assert export_cases_csv([]) == ""

    def test_initials_when_not_signed_in(self):
        content = export_cases_csv([
            case("Dengue", lastName="Dela Cruz", firstName="Juan", hospitalNumber="H-1",
                 reporterName="Ana Reyes"),
        ])
        lines = content.splitlines()

        assert lines[0] == (
            '"Report_Date","Patient_Name","Hospital_Number","Disease",'
            '"Ward","Status","Admission_Date","Reporter"'
        )
        assert lines[1] == (
            '"2025-02-10","D.J.","H-1","Dengue","Medicine Ward","Admitted","","Ana Reyes"'
        )

    def test_full_names_when_signed_in(self):
        content = export_cases_csv(
            [NotifiableDiseaseCase(last_name="Dela Cruz", first_name="Juan", outcome="Recovered")],
            authenticated=True,
        )

        assert '"Dela Cruz, Juan"' in content
        assert '"Recovered"' in content

    def test_format_patient_name(self):
        assert format_patient_name("Santos", "Maria", authenticated=False) == "S.M."
        assert format_patient_name(None, None, authenticated=False) == ".."
        assert format_patient_name("Santos", "Maria", authenticated=True) == "Santos, Maria"
