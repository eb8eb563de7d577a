"""Tests for IPC data models."""

from datetime import date

import pytest

from ipc_src.exceptions import UnknownReportKindError
from ipc_src.models import (
    ALL_TABLES,
    AntibioticResult,
    AreaCensus,
    CensusLogEntry,
    CultureReport,
    HAIReport,
    HAIType,
    HandHygieneAudit,
    MonitoredArea,
    NotifiableDiseaseCase,
    ReportKind,
    ValidationStatus,
    as_number,
)


class TestEnums:
    """Test enum definitions."""

    def test_hai_type_values(self):
        assert HAIType.VAP.value == "Ventilator Associated Pneumonia"
        assert HAIType.HAP.value == "Healthcare-Associated Pneumonia"
        assert HAIType.CAUTI.value == "Catheter-Associated UTI"
        assert HAIType.CLABSI.value == "Catheter-Related Blood Stream Infections"

    def test_monitored_area_labels(self):
        assert [a.value for a in MonitoredArea] == [
            "overall", "icu", "picu", "nicu", "medicine", "cohort",
        ]
        assert MonitoredArea.MEDICINE.label == "Medicine Ward"
        assert MonitoredArea.ICU.census_prefix == "icu"
        assert MonitoredArea.OVERALL.is_overall
        assert not MonitoredArea.COHORT.is_overall


class TestReportKind:
    """Tests for the closed set of report kinds."""

    def test_tables(self):
        assert {k.slug: k.table for k in ReportKind} == {
            "hai": "reports_hai",
            "notifiable": "report_notif",
            "needlestick": "reports_needlestick",
            "isolation": "reports_isolation",
            "tb": "reports_tb",
            "culture": "reports_culture",
        }

    def test_every_table_is_known(self):
        assert all(kind.table in ALL_TABLES for kind in ReportKind)

    @pytest.mark.parametrize("value, expected", [
        ("hai", ReportKind.HAI),
        ("Notifiable Disease", ReportKind.NOTIFIABLE),
        (" tb ", ReportKind.TB),
        (ReportKind.CULTURE, ReportKind.CULTURE),
    ])
    def test_parse(self, value, expected):
        assert ReportKind.parse(value) is expected

    @pytest.mark.parametrize("value", ["surgery", "HAI Report", "", None, 3])
    def test_parse_unknown(self, value):
        with pytest.raises(UnknownReportKindError) as exc_info:
            ReportKind.parse(value)
        assert "Invalid form type" in str(exc_info.value)

    def test_unknown_kind_is_a_value_error(self):
        with pytest.raises(ValueError):
            ReportKind.parse("bogus")

    def test_backed_up_kinds(self):
        assert {k for k in ReportKind if k.backed_up_to_sheets} == {
            ReportKind.NOTIFIABLE, ReportKind.TB,
        }

    def test_to_model(self):
        model = ReportKind.HAI.to_model({"haiType": "Ventilator Associated Pneumonia"})
        assert isinstance(model, HAIReport)


class TestAsNumber:
    """Tests for census value coercion."""

    @pytest.mark.parametrize("value, expected", [
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("12", 12),
        (" 7.5 ", 7.5),
        (3.0, 3),
        (4, 4),
        (float("nan"), 0),
        (float("inf"), 0),
        ("inf", 0),
    ])
    def test_coercion(self, value, expected):
        assert as_number(value) == expected


class TestCensusLogEntry:
    """Tests for CensusLogEntry."""

    def test_from_record(self, census_row):
        entry = CensusLogEntry.from_record(census_row)

        assert entry.date == date(2025, 3, 1)
        assert entry.area(MonitoredArea.ICU) == AreaCensus(10, 5, 6, 7)
        assert entry.area(MonitoredArea.MEDICINE).catheter_days == 10

    def test_missing_area_is_zero(self):
        entry = CensusLogEntry(date=None)
        assert entry.area(MonitoredArea.PICU) == AreaCensus()

    def test_to_record(self, census_row):
        record = CensusLogEntry.from_record(census_row).to_record()

        assert record == census_row


class TestReportRecords:
    """Tests for typed report records."""

    def test_unknown_keys_kept_in_details(self):
        report = HAIReport.from_record({
            "id": "abc-123",
            "haiType": "Catheter-Associated UTI",
            "area": "ICU",
            "dateReported": "2025-03-04",
            "validationStatus": "validated",
            "createdAt": "2025-03-04T10:00:00",
        })

        assert report.id == "abc-123"
        assert report.date_reported == date(2025, 3, 4)
        assert report.validation_status is ValidationStatus.VALIDATED
        assert report.details == {"createdAt": "2025-03-04T10:00:00"}

        event = report.to_event()
        assert event.hai_type == "Catheter-Associated UTI"
        assert event.area == "ICU"

    def test_unknown_status_ignored(self):
        case = NotifiableDiseaseCase.from_record({"validationStatus": "archived"})
        assert case.validation_status is None

    def test_to_record(self):
        case = NotifiableDiseaseCase.from_record({
            "disease": "Dengue",
            "lastName": "Santos",
            "dateReported": "2025-01-02",
            "validationStatus": "pending",
            "customField": "kept",
        })
        record = case.to_record()

        assert record["disease"] == "Dengue"
        assert record["lastName"] == "Santos"
        assert record["dateReported"] == "2025-01-02"
        assert record["validationStatus"] == "pending"
        assert record["customField"] == "kept"

    def test_culture_antibiotics(self):
        report = CultureReport.from_record({
            "organism": "E. coli",
            "antibiotics": [{"name": "Ceftriaxone", "mic": "<=1", "interpretation": "S"}],
        })

        assert report.antibiotics == [AntibioticResult("Ceftriaxone", "<=1", "S")]
        assert report.to_record()["antibiotics"] == [
            {"name": "Ceftriaxone", "mic": "<=1", "interpretation": "S"},
        ]


class TestHandHygieneAudit:
    """Tests for HandHygieneAudit."""

    def test_from_record(self):
        audit = HandHygieneAudit.from_record({
            "date": "2025-05-01",
            "area": "ICU",
            "auditeeRole": "Nurse",
            "moments": [
                {"moment": "After body fluid exposure", "action": "Missed", "usedGloves": True},
                {"moment": "Before aseptic task", "action": "Hand Wash"},
            ],
        })

        assert audit.date == date(2025, 5, 1)
        assert [m.performed for m in audit.moments] == [False, True]
        assert audit.moments[0].used_gloves
        assert audit.to_record()["moments"][1] == {
            "moment": "Before aseptic task", "action": "Hand Wash", "usedGloves": False,
        }
