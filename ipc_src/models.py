"""Domain models for the IPC reporting portal.

All models use dataclasses. Records coming back from the record store are
plain dicts with camelCase keys; each model provides ``from_record`` /
``to_record`` to move between the two shapes. Keys a model does not know
about are kept in ``details`` so nothing submitted through a form is lost.
"""

import math
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

from .exceptions import UnknownReportKindError


def _to_camel(name: str) -> str:
    """Convert a snake_case field name to the store's camelCase key."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _parse_date(value: Any) -> date | None:
    """Parse an ISO date/datetime string (or date object) into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def as_number(value: Any) -> int | float:
    """Coerce a stored census value to a number; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return int(bool(value))
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip() or 0)
        except ValueError:
            return 0
    if not math.isfinite(number):
        return 0
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


# ============================================================
# Enumerations
# ============================================================

class ValidationStatus(Enum):
    """Coordinator validation lifecycle for submitted reports."""
    PENDING = "pending"
    VALIDATED = "validated"


class HAIType(Enum):
    """HAI categories that carry an incidence rate.

    Reports may carry other HAI types (SSI, free text); those are stored
    as-is and never contribute to a rate numerator.
    """
    VAP = "Ventilator Associated Pneumonia"
    HAP = "Healthcare-Associated Pneumonia"
    CAUTI = "Catheter-Associated UTI"
    CLABSI = "Catheter-Related Blood Stream Infections"


class HandHygieneAction(Enum):
    """Observed action for one hand-hygiene opportunity."""
    HAND_RUB = "Hand Rub"
    HAND_WASH = "Hand Wash"
    MISSED = "Missed"


class MonitoredArea(Enum):
    """Areas with their own census columns and infection rates.

    The value doubles as the census column prefix (``icu``, ``icuVent``,
    ``icuIfc``, ``icuCentral``) and the key in a rate report.
    """
    OVERALL = "overall"
    ICU = "icu"
    PICU = "picu"
    NICU = "nicu"
    MEDICINE = "medicine"
    COHORT = "cohort"

    @property
    def label(self) -> str:
        """Ward label used on infection reports."""
        return _AREA_LABELS[self]

    @property
    def census_prefix(self) -> str:
        return self.value

    @property
    def is_overall(self) -> bool:
        return self is MonitoredArea.OVERALL


_AREA_LABELS = {
    MonitoredArea.OVERALL: "Overall",
    MonitoredArea.ICU: "ICU",
    MonitoredArea.PICU: "PICU",
    MonitoredArea.NICU: "NICU",
    MonitoredArea.MEDICINE: "Medicine Ward",
    MonitoredArea.COHORT: "Cohort",
}


# ============================================================
# Census / Infection Event Models
# ============================================================

@dataclass(frozen=True)
class AreaCensus:
    """Patient-days and device-days for one area on one census day."""
    patient_days: int | float = 0
    ventilator_days: int | float = 0
    catheter_days: int | float = 0
    central_line_days: int | float = 0


@dataclass
class CensusLogEntry:
    """Daily facility census; ``date`` is the upsert key."""
    date: date | None
    areas: dict[MonitoredArea, AreaCensus] = field(default_factory=dict)
    id: str | None = None

    def area(self, area: MonitoredArea) -> AreaCensus:
        """Get the census for an area (zeros if not logged)."""
        return self.areas.get(area, AreaCensus())

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CensusLogEntry":
        areas = {}
        for area in MonitoredArea:
            prefix = area.census_prefix
            areas[area] = AreaCensus(
                patient_days=as_number(record.get(prefix)),
                ventilator_days=as_number(record.get(f"{prefix}Vent")),
                catheter_days=as_number(record.get(f"{prefix}Ifc")),
                central_line_days=as_number(record.get(f"{prefix}Central")),
            )
        return cls(
            date=_parse_date(record.get("date")),
            areas=areas,
            id=record.get("id"),
        )

    def to_record(self) -> dict:
        record: dict[str, Any] = {
            "date": self.date.isoformat() if self.date else None,
        }
        if self.id:
            record["id"] = self.id
        for area in MonitoredArea:
            census = self.area(area)
            prefix = area.census_prefix
            record[prefix] = census.patient_days
            record[f"{prefix}Vent"] = census.ventilator_days
            record[f"{prefix}Ifc"] = census.catheter_days
            record[f"{prefix}Central"] = census.central_line_days
        return record


@dataclass
class InfectionEvent:
    """A reported HAI attributed to a ward."""
    hai_type: str | None
    area: str | None = None
    event_date: date | None = None
    id: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "InfectionEvent":
        return cls(
            hai_type=record.get("haiType"),
            area=record.get("area"),
            event_date=_parse_date(record.get("dateReported")),
            id=record.get("id"),
        )


# ============================================================
# Hand Hygiene Models
# ============================================================

@dataclass
class HandHygieneMoment:
    """One observed hand-hygiene opportunity."""
    moment: str | None = None
    action: str | None = None
    used_gloves: bool = False  # Only meaningful when action is Missed

    @property
    def performed(self) -> bool:
        return self.action != HandHygieneAction.MISSED.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HandHygieneMoment":
        return cls(
            moment=data.get("moment"),
            action=data.get("action"),
            used_gloves=bool(data.get("usedGloves", False)),
        )

    def to_dict(self) -> dict:
        return {
            "moment": self.moment,
            "action": self.action,
            "usedGloves": self.used_gloves,
        }


@dataclass
class HandHygieneAudit:
    """A direct-observation session (WHO 5 Moments)."""
    date: date | None
    area: str | None = None
    auditee_role: str | None = None
    moments: list[HandHygieneMoment] = field(default_factory=list)
    area_other: str | None = None
    auditee_role_other: str | None = None
    id: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "HandHygieneAudit":
        return cls(
            date=_parse_date(record.get("date")),
            area=record.get("area"),
            auditee_role=record.get("auditeeRole"),
            moments=[
                HandHygieneMoment.from_dict(m) for m in (record.get("moments") or [])
            ],
            area_other=record.get("areaOther"),
            auditee_role_other=record.get("auditeeRoleOther"),
            id=record.get("id"),
        )

    def to_record(self) -> dict:
        record = {
            "date": self.date.isoformat() if self.date else None,
            "area": self.area,
            "areaOther": self.area_other,
            "auditeeRole": self.auditee_role,
            "auditeeRoleOther": self.auditee_role_other,
            "moments": [m.to_dict() for m in self.moments],
        }
        if self.id:
            record["id"] = self.id
        return record


# ============================================================
# Report Records (one typed shape per report kind)
# ============================================================

@dataclass
class AntibioticResult:
    """Antibiogram line: drug, MIC and S/I/R interpretation."""
    name: str
    mic: str | None = None
    interpretation: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AntibioticResult":
        return cls(
            name=data.get("name") or "",
            mic=data.get("mic") or None,
            interpretation=data.get("interpretation") or None,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mic": self.mic,
            "interpretation": self.interpretation,
        }


@dataclass
class ReportRecord:
    """Fields shared by every submitted report."""
    id: str | None = None
    date_reported: date | None = None
    validation_status: ValidationStatus | None = None
    validated_by: str | None = None
    reporter_name: str | None = None
    designation: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ReportRecord":
        """Build a typed report from a store row.

        Unknown keys are kept in ``details``.
        """
        by_key = {
            _to_camel(f.name): f.name for f in fields(cls) if f.name != "details"
        }
        values: dict[str, Any] = {}
        details: dict[str, Any] = {}
        for key, value in record.items():
            name = by_key.get(key)
            if name is None:
                details[key] = value
            else:
                values[name] = value
        return cls(**cls._coerce(values), details=details)

    @classmethod
    def _coerce(cls, values: dict[str, Any]) -> dict[str, Any]:
        if "date_reported" in values:
            values["date_reported"] = _parse_date(values["date_reported"])
        status = values.get("validation_status")
        if status is not None:
            try:
                values["validation_status"] = ValidationStatus(status)
            except ValueError:
                values["validation_status"] = None
        return values

    def to_record(self) -> dict:
        """Convert to a store row (camelCase keys)."""
        record = dict(self.details)
        for f in fields(self):
            if f.name == "details":
                continue
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, date):
                value = value.isoformat()
            elif isinstance(value, list):
                value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
            record[_to_camel(f.name)] = value
        return record


@dataclass
class PatientReport(ReportRecord):
    """Report about a single patient."""
    last_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    hospital_number: str | None = None
    dob: str | None = None
    age: str | int | None = None
    sex: str | None = None
    barangay: str | None = None
    city: str | None = None
    area: str | None = None
    area_other: str | None = None


@dataclass
class HAIReport(PatientReport):
    """Healthcare-associated infection case."""
    hai_type: str | None = None
    hai_type_other: str | None = None
    date_of_admission: str | None = None
    movement_history: list = field(default_factory=list)
    outcome: str | None = None
    crbsi_initiation_area: str | None = None
    ssi_procedure_type: str | None = None
    pneumonia_symptom_onset: str | None = None

    def to_event(self) -> InfectionEvent:
        return InfectionEvent(
            hai_type=self.hai_type,
            area=self.area,
            event_date=self.date_reported,
            id=self.id,
        )


@dataclass
class NotifiableDiseaseCase(PatientReport):
    """Notifiable disease report.

    ``outcome`` empty, "Admitted" or "ER-level" means the case is active.
    """
    disease: str | None = None
    disease_other: str | None = None
    date_of_admission: str | None = None
    outcome: str | None = None
    outcome_date: str | None = None


@dataclass
class NeedlestickReport(ReportRecord):
    """Sharps / needlestick injury to a healthcare worker."""
    hcw_name: str | None = None
    hospital_number: str | None = None
    job_title: str | None = None
    department: str | None = None
    work_location: str | None = None
    date_of_injury: str | None = None
    time_of_injury: str | None = None
    exposure_type: str | None = None
    device_involved: str | None = None
    activity: str | None = None
    narrative: str | None = None
    source_identified: str | None = None
    source_mrn: str | None = None
    pep_received: str | None = None
    vaccination_history: str | None = None
    supervisor_notified: str | None = None
    ipc_notified: str | None = None


@dataclass
class IsolationReport(PatientReport):
    """Admission to an isolation ward."""
    diagnosis: str | None = None
    transferred_from: str | None = None
    date_of_admission: str | None = None


@dataclass
class TBReport(PatientReport):
    """Tuberculosis case."""
    date_of_admission: str | None = None
    classification: str | None = None
    xpert_results: list = field(default_factory=list)
    smear_results: list = field(default_factory=list)
    comorbidities: list = field(default_factory=list)
    hiv_test_result: str | None = None
    treatment_started: str | None = None
    cxr_date: str | None = None


@dataclass
class CultureReport(PatientReport):
    """Culture and sensitivity (antibiogram) result."""
    organism: str | None = None
    specimen: str | None = None
    colony_count: str | None = None
    antibiotics: list[AntibioticResult] = field(default_factory=list)

    @classmethod
    def _coerce(cls, values: dict[str, Any]) -> dict[str, Any]:
        values = super()._coerce(values)
        values["antibiotics"] = [
            a if isinstance(a, AntibioticResult) else AntibioticResult.from_dict(a)
            for a in (values.get("antibiotics") or [])
        ]
        return values


class ReportKind(Enum):
    """Closed set of report categories accepted by the portal."""
    HAI = "hai"
    NOTIFIABLE = "notifiable"
    NEEDLESTICK = "needlestick"
    ISOLATION = "isolation"
    TB = "tb"
    CULTURE = "culture"

    @property
    def slug(self) -> str:
        return self.value

    @property
    def table(self) -> str:
        """Storage table backing this report kind."""
        return _REPORT_TABLES[self]

    @property
    def label(self) -> str:
        return _REPORT_LABELS[self]

    @property
    def record_class(self) -> type[ReportRecord]:
        return _REPORT_RECORD_CLASSES[self]

    @property
    def backed_up_to_sheets(self) -> bool:
        """Notifiable and TB reports are mirrored to the backup sheet."""
        return self in (ReportKind.NOTIFIABLE, ReportKind.TB)

    @classmethod
    def parse(cls, value: "ReportKind | str") -> "ReportKind":
        """Resolve a kind from a member, its slug, or its human label.

        Raises:
            UnknownReportKindError: If the value names no report kind.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for kind in cls:
                if key == kind.value or key == kind.label:
                    return kind
        raise UnknownReportKindError(value)

    def to_model(self, record: Mapping[str, Any]) -> ReportRecord:
        return self.record_class.from_record(record)


_REPORT_TABLES = {
    ReportKind.HAI: "reports_hai",
    ReportKind.NOTIFIABLE: "report_notif",
    ReportKind.NEEDLESTICK: "reports_needlestick",
    ReportKind.ISOLATION: "reports_isolation",
    ReportKind.TB: "reports_tb",
    ReportKind.CULTURE: "reports_culture",
}

_REPORT_LABELS = {
    ReportKind.HAI: "HAI",
    ReportKind.NOTIFIABLE: "Notifiable Disease",
    ReportKind.NEEDLESTICK: "Needlestick Injury",
    ReportKind.ISOLATION: "Isolation Admission",
    ReportKind.TB: "TB Report",
    ReportKind.CULTURE: "Culture Report",
}

_REPORT_RECORD_CLASSES = {
    ReportKind.HAI: HAIReport,
    ReportKind.NOTIFIABLE: NotifiableDiseaseCase,
    ReportKind.NEEDLESTICK: NeedlestickReport,
    ReportKind.ISOLATION: IsolationReport,
    ReportKind.TB: TBReport,
    ReportKind.CULTURE: CultureReport,
}

# Non-report tables
CENSUS_LOGS_TABLE = "census_logs"
HAND_HYGIENE_TABLE = "audit_hand_hygiene"
BUNDLE_AUDITS_TABLE = "audit_bundles"
AREA_AUDITS_TABLE = "audit_area"
ACTION_PLANS_TABLE = "action_plans"
AUDIT_SCHEDULES_TABLE = "audit_schedules"

ALL_TABLES = frozenset(
    [kind.table for kind in ReportKind]
    + [
        CENSUS_LOGS_TABLE,
        HAND_HYGIENE_TABLE,
        BUNDLE_AUDITS_TABLE,
        AREA_AUDITS_TABLE,
        ACTION_PLANS_TABLE,
        AUDIT_SCHEDULES_TABLE,
    ]
)


# ============================================================
# Derived View Models
# ============================================================

@dataclass(frozen=True)
class AreaRates:
    """Incidence rates for one area, per 1,000 patient- or device-days."""
    overall: float = 0.0
    vap: float = 0.0
    hap: float = 0.0
    cauti: float = 0.0
    clabsi: float = 0.0

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "vap": self.vap,
            "hap": self.hap,
            "cauti": self.cauti,
            "clabsi": self.clabsi,
        }


# Keyed by MonitoredArea value (overall, icu, picu, nicu, medicine, cohort)
RateReport = dict[str, AreaRates]


@dataclass
class ComplianceBucket:
    """Hand-hygiene opportunities for one role or area."""
    name: str
    total: int = 0
    performed: int = 0
    compliance: int = 0  # Percent, rounded

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "total": self.total,
            "performed": self.performed,
            "compliance": self.compliance,
        }


@dataclass
class ComplianceReport:
    """Hand-hygiene compliance by role and by area."""
    role_data: list[ComplianceBucket]
    area_data: list[ComplianceBucket]  # Ranked, highest score first
    overall: int
    grand_total: int = 0
    grand_performed: int = 0

    def to_dict(self) -> dict:
        return {
            "roleData": [b.to_dict() for b in self.role_data],
            "areaData": [b.to_dict() for b in self.area_data],
            "overall": self.overall,
            "grandTotal": self.grand_total,
            "grandPerformed": self.grand_performed,
        }


@dataclass
class ActiveCensus:
    """Active notifiable-disease cases, by disease."""
    total_active: int
    per_disease_counts: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalActive": self.total_active,
            "perDiseaseCounts": [list(pair) for pair in self.per_disease_counts],
        }
