"""JSON API for report submission, validation and dashboards."""

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from ipc_src.analytics import (
    export_cases_csv,
    filter_cases,
    monthly_trend,
    outcome_breakdown,
    quarter_date_range,
)
from ipc_src.analytics.notifiable import OUTCOME_FILTER_ACTIVE
from ipc_src.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownReportKindError,
    ValidationFailedError,
)
from ipc_src.models import ReportKind

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def is_authenticated() -> bool:
    """Check the API key from query param or header.

    Without a configured key nobody is treated as signed in.
    """
    api_key = current_app.config.get("DASHBOARD_API_KEY")
    if not api_key:
        return False
    provided_key = request.args.get("key") or request.headers.get("X-API-Key")
    return provided_key == api_key


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object body")
    return data


# --- Error handlers ---

@api_bp.errorhandler(UnknownReportKindError)
@api_bp.errorhandler(ValidationFailedError)
@api_bp.errorhandler(ValueError)
def handle_bad_request(error):
    return jsonify({"error": str(error)}), 400


@api_bp.errorhandler(RecordNotFoundError)
def handle_not_found(error):
    return jsonify({"error": str(error)}), 404


@api_bp.errorhandler(DuplicateRecordError)
def handle_duplicate(error):
    return jsonify({"error": str(error)}), 409


# --- Dashboards ---

@api_bp.route("/rates")
def infection_rates():
    """HAI rates per monitored area."""
    rates = current_app.workflow.get_infection_rates()
    return jsonify({area: r.to_dict() for area, r in rates.items()})


@api_bp.route("/hand-hygiene/stats")
def hand_hygiene_stats():
    """Hand-hygiene compliance, optionally for ?year=YYYY."""
    year = request.args.get("year") or None
    stats = current_app.workflow.get_hand_hygiene_stats(year)
    return jsonify(stats.to_dict() if stats else None)


@api_bp.route("/notifiable/census")
def notifiable_census():
    census = current_app.workflow.get_active_census()
    return jsonify(census.to_dict())


@api_bp.route("/notifiable/cases")
def notifiable_cases():
    """Filtered notifiable cases with trend and outcome summaries.

    Query params: disease, area, outcome (default Active), year, quarter.
    """
    year = request.args.get("year") or None
    date_range = quarter_date_range(request.args.get("quarter"), year)
    start_date, end_date = date_range if date_range else (None, None)

    cases = filter_cases(
        current_app.workflow.get_validated_records(ReportKind.NOTIFIABLE),
        disease=request.args.get("disease") or None,
        area=request.args.get("area") or None,
        outcome=request.args.get("outcome") or OUTCOME_FILTER_ACTIVE,
        year=year,
        start_date=start_date,
        end_date=end_date,
    )
    return jsonify({
        "count": len(cases),
        "cases": [case.to_record() for case in cases],
        "trend": monthly_trend(cases),
        "outcomes": outcome_breakdown(cases),
    })


@api_bp.route("/notifiable/export.csv")
def export_notifiable_csv():
    """Validated notifiable cases as CSV; names are initials unless signed in."""
    cases = current_app.workflow.get_validated_records(ReportKind.NOTIFIABLE)
    content = export_cases_csv(cases, authenticated=is_authenticated())
    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=notifiable_cases.csv"},
    )


# --- Report Workflow ---

@api_bp.route("/reports/pending")
def pending_reports():
    """Coordinator validation queue, keyed by report kind."""
    return jsonify(current_app.workflow.get_pending_reports())


@api_bp.route("/reports/<kind>", methods=["POST"])
def submit_report(kind):
    stored = current_app.workflow.submit_report(kind, _json_body())
    return jsonify({"success": True, "report": stored}), 201


@api_bp.route("/reports/<kind>/<record_id>")
def get_report(kind, record_id):
    return jsonify({"report": current_app.workflow.get_report(kind, record_id)})


@api_bp.route("/reports/<kind>/<record_id>/validate", methods=["POST"])
def validate_report(kind, record_id):
    """Validate a pending report.

    Body: ``{"coordinator": "...", "data": {...corrections}}``. The
    coordinator can also be given in the X-User header.
    """
    body = request.get_json(silent=True) or {}
    coordinator = body.get("coordinator") or request.headers.get("X-User")
    if not coordinator:
        raise ValueError("A coordinator name is required to validate a report")

    updated = current_app.workflow.validate_report(
        kind, record_id, coordinator, body.get("data")
    )
    return jsonify({"success": True, "report": updated})


@api_bp.route("/reports/<kind>/<record_id>", methods=["DELETE"])
def delete_report(kind, record_id):
    deleted = current_app.workflow.delete_pending_report(kind, record_id)
    logger.info(f"Deleted {kind} report {record_id}")
    return jsonify({"success": True, "report": deleted})


@api_bp.route("/census", methods=["POST"])
def submit_census():
    """Save the daily census log (replaces any entry for the same date)."""
    stored = current_app.workflow.submit_census_log(_json_body())
    return jsonify({"success": True, "census": stored}), 201


# --- Extraction ---

@api_bp.route("/extract/patient", methods=["POST"])
def extract_patient():
    """Prefill patient fields from ``{"image": "<base64 or data URL>"}``.

    ``data`` is null when nothing could be extracted.
    """
    image = _json_body().get("image") or ""
    result = current_app.extractor.extract_patient_info(image)
    return jsonify({"data": result.to_record() if result else None})


@api_bp.route("/extract/culture", methods=["POST"])
def extract_culture():
    image = _json_body().get("image") or ""
    result = current_app.extractor.extract_culture_report(image)
    return jsonify({"data": result.to_record() if result else None})


@api_bp.route("/health")
def health():
    """Service status; ``extractionAvailable`` asks Ollama for the vision model."""
    extractor = current_app.extractor
    return jsonify({
        "status": "ok",
        "extraction": extractor.enabled,
        "extractionAvailable": extractor.enabled and extractor.client.is_available(),
        "sheetsBackup": current_app.workflow.backup.is_configured(),
        "reportKinds": [kind.slug for kind in ReportKind],
    })
