"""Report submission and coordinator validation workflow.

Lifecycle of a case report:

1. Staff submit a form -> stored with ``validationStatus = "pending"``
2. A coordinator reviews the pending queue and either
   - validates it (optionally with corrections) -> ``"validated"``, or
   - deletes it
3. Only validated reports feed the dashboards.

Notifiable-disease and TB reports are also mirrored to the backup sheet on
submission and on validation.
"""

import logging
from datetime import date, datetime
from typing import Any, Mapping

from .analytics import (
    compute_active_census,
    compute_hand_hygiene_stats,
    compute_infection_rates,
    filter_audits_by_year,
)
from .data import BaseRecordStore
from .exceptions import IPCError, RecordNotFoundError, ValidationFailedError
from .models import (
    ACTION_PLANS_TABLE,
    AREA_AUDITS_TABLE,
    AUDIT_SCHEDULES_TABLE,
    BUNDLE_AUDITS_TABLE,
    CENSUS_LOGS_TABLE,
    HAND_HYGIENE_TABLE,
    ActiveCensus,
    CensusLogEntry,
    ComplianceReport,
    HandHygieneAudit,
    RateReport,
    ReportKind,
    ReportRecord,
    ValidationStatus,
)
from .sanitizer import calculate_age, sanitize_record
from .sheets_backup import SheetsBackup

logger = logging.getLogger(__name__)

ACTION_PLAN_PENDING = "pending"


class ReportWorkflow:
    """Coordinates the record store, backup sheet and dashboard analytics."""

    def __init__(self, store: BaseRecordStore, backup: SheetsBackup | None = None):
        """Initialize the workflow.

        Args:
            store: Record store backend.
            backup: Backup sheet channel. Created from config if None.
        """
        self.store = store
        self.backup = backup or SheetsBackup()

    # --- Case Reports ---

    def submit_report(self, kind: ReportKind | str, data: Mapping[str, Any]) -> dict:
        """Submit a new case report for coordinator validation.

        Returns:
            The stored row.

        Raises:
            UnknownReportKindError: If ``kind`` is not a report kind.
            DuplicateRecordError: If the store rejects the row as a duplicate.
        """
        kind = ReportKind.parse(kind)
        entry = {
            **sanitize_record(data),
            "dateReported": date.today().isoformat(),
            "validationStatus": ValidationStatus.PENDING.value,
        }
        if entry.get("dob") and not entry.get("age"):
            entry["age"] = calculate_age(entry["dob"]) or None
        stored = self.store.insert(kind, entry)
        logger.info(f"Submitted {kind.label} report {stored['id']} for validation")

        if kind.backed_up_to_sheets:
            self.backup.sync(stored)
        return stored

    def get_pending_reports(self) -> dict[str, list[dict]]:
        """Pending reports for every kind, keyed by kind slug."""
        return {
            kind.slug: self.store.get(
                kind, filters={"validationStatus": ValidationStatus.PENDING.value}
            )
            for kind in ReportKind
        }

    def get_report(self, kind: ReportKind | str, record_id: str) -> dict:
        """One report by id, whatever its validation status.

        Raises:
            RecordNotFoundError: If there is no such report.
        """
        kind = ReportKind.parse(kind)
        row = self.store.get_by_id(kind, record_id)
        if row is None:
            raise RecordNotFoundError(kind.table, record_id)
        return row

    def get_validated_reports(self, kind: ReportKind | str) -> list[dict]:
        """Validated rows for one report kind."""
        kind = ReportKind.parse(kind)
        return self.store.get(
            kind, filters={"validationStatus": ValidationStatus.VALIDATED.value}
        )

    def get_validated_records(self, kind: ReportKind | str) -> list[ReportRecord]:
        """Validated reports as typed records."""
        kind = ReportKind.parse(kind)
        return [kind.to_model(row) for row in self.get_validated_reports(kind)]

    def validate_report(
        self,
        kind: ReportKind | str,
        record_id: str,
        coordinator: str,
        updated_data: Mapping[str, Any] | None = None,
    ) -> dict:
        """Mark a pending report validated, applying coordinator corrections.

        Returns:
            The updated row.

        Raises:
            ValidationFailedError: If the report could not be updated.
        """
        kind = ReportKind.parse(kind)
        entry = {
            **sanitize_record(updated_data),
            "validationStatus": ValidationStatus.VALIDATED.value,
            "validatedBy": coordinator,
        }
        entry.pop("id", None)

        try:
            updated = self.store.update(kind, record_id, entry)
        except IPCError as e:
            logger.error(f"Validation of {kind.table}/{record_id} failed: {e}")
            raise ValidationFailedError(f"Validation failed: {e}") from e

        logger.info(f"{coordinator} validated {kind.label} report {record_id}")

        if kind.backed_up_to_sheets:
            self.backup.sync({**entry, "id": record_id})
        return updated

    def delete_pending_report(self, kind: ReportKind | str, record_id: str) -> dict:
        """Delete a report from the pending queue.

        Returns:
            The deleted row.

        Raises:
            RecordNotFoundError: If nothing was deleted.
        """
        kind = ReportKind.parse(kind)
        return self.store.delete(kind, record_id)

    def update_report(self, kind: ReportKind | str, record: Mapping[str, Any]) -> bool:
        """Save edits to an existing report (identified by ``record["id"]``).

        Returns:
            True if the report was updated.
        """
        kind = ReportKind.parse(kind)
        record_id = record.get("id")
        if not record_id:
            logger.warning(f"Update of {kind.table} called without an id")
            return False

        patch = sanitize_record(record)
        patch.pop("id", None)
        try:
            self.store.update(kind, record_id, patch)
        except RecordNotFoundError as e:
            logger.warning(str(e))
            return False
        return True

    # --- Census Logs ---

    def submit_census_log(self, entry: CensusLogEntry | Mapping[str, Any]) -> dict:
        """Save the daily census; a second entry for the same date replaces the first."""
        if isinstance(entry, CensusLogEntry):
            entry = entry.to_record()
        record = sanitize_record(entry)
        stored = self.store.upsert(CENSUS_LOGS_TABLE, record, key="date")
        logger.info(f"Census log saved for {stored.get('date')}")
        return stored

    def get_census_logs(self) -> list[CensusLogEntry]:
        """All census logs, newest first."""
        rows = self.store.get(CENSUS_LOGS_TABLE, order_by="date", descending=True)
        return [CensusLogEntry.from_record(row) for row in rows]

    # --- Audits ---

    def submit_hand_hygiene_audit(self, audit: HandHygieneAudit | Mapping[str, Any]) -> dict:
        if isinstance(audit, HandHygieneAudit):
            audit = audit.to_record()
        return self.store.insert(HAND_HYGIENE_TABLE, sanitize_record(audit))

    def get_hand_hygiene_audits(self) -> list[HandHygieneAudit]:
        return [
            HandHygieneAudit.from_record(row)
            for row in self.store.get(HAND_HYGIENE_TABLE)
        ]

    def submit_bundle_audit(self, data: Mapping[str, Any]) -> dict:
        entry = {**sanitize_record(data), "dateLogged": datetime.now().isoformat()}
        return self.store.insert(BUNDLE_AUDITS_TABLE, entry)

    def submit_area_audit(self, data: Mapping[str, Any]) -> dict:
        entry = {**sanitize_record(data), "dateLogged": datetime.now().isoformat()}
        return self.store.insert(AREA_AUDITS_TABLE, entry)

    # --- Action Plans ---

    def submit_action_plan(self, data: Mapping[str, Any]) -> dict:
        entry = {**sanitize_record(data), "status": ACTION_PLAN_PENDING}
        return self.store.insert(ACTION_PLANS_TABLE, entry)

    def update_action_plan_status(self, plan_id: str, status: str) -> dict:
        return self.store.update(ACTION_PLANS_TABLE, plan_id, {"status": status})

    def get_action_plans(self) -> list[dict]:
        """Action plans, newest first."""
        return self.store.get(ACTION_PLANS_TABLE, order_by="createdAt", descending=True)

    # --- Audit Schedules ---

    def submit_audit_schedule(self, data: Mapping[str, Any]) -> dict:
        return self.store.insert(AUDIT_SCHEDULES_TABLE, sanitize_record(data))

    def get_audit_schedules(self) -> list[dict]:
        """Scheduled audits, soonest first."""
        return self.store.get(AUDIT_SCHEDULES_TABLE, order_by="date")

    def delete_audit_schedule(self, schedule_id: str) -> dict:
        return self.store.delete(AUDIT_SCHEDULES_TABLE, schedule_id)

    # --- Dashboard Views ---

    def get_infection_rates(self) -> RateReport:
        """Rates from all census logs and validated HAI reports."""
        return compute_infection_rates(
            self.get_census_logs(),
            self.get_validated_reports(ReportKind.HAI),
        )

    def get_hand_hygiene_stats(self, year: int | str | None = None) -> ComplianceReport | None:
        """Hand-hygiene compliance, optionally for one calendar year."""
        audits = filter_audits_by_year(self.get_hand_hygiene_audits(), year)
        return compute_hand_hygiene_stats(audits)

    def get_active_census(self) -> ActiveCensus:
        """Active notifiable-disease census from validated reports."""
        return compute_active_census(self.get_validated_records(ReportKind.NOTIFIABLE))
