"""Work record listing, export, and CRUD endpoints."""
from datetime import date

from flask import Blueprint, Response, current_app, jsonify, request
from flask_login import login_required

from routes.responses import error_response, partial_errors_payload
from utils.csv_export import build_work_records_csv, export_filename
from utils.errors import ValidationError
from utils.pagination import paginate
from utils.record_filters import WorkRecordFilters
from utils.services import get_store

work_records_bp = Blueprint("work_records", __name__, url_prefix="/work-records")


def _request_payload() -> dict:
    """Record fields from a JSON body or a form post, minus the CSRF token."""
    csrf_field = current_app.config.get("WTF_CSRF_FIELD_NAME", "csrf_token")
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        payload = dict(payload)
        payload.pop(csrf_field, None)
        return payload

    payload = request.form.to_dict()
    payload.pop(csrf_field, None)
    names = request.form.getlist("referrer_name")
    contacts = request.form.getlist("referrer_contact")
    payload.pop("referrer_name", None)
    payload.pop("referrer_contact", None)
    if names:
        payload["referred_by"] = [
            {"name": name, "contact": contacts[idx] if idx < len(contacts) else ""}
            for idx, name in enumerate(names)
        ]
    return payload


def _filtered_records():
    """Return (filters, result) or (None, error response) for the current query string."""
    try:
        filters = WorkRecordFilters.from_mapping(request.args)
    except ValidationError as exc:
        return None, error_response(exc, "fetch")
    result = get_store().get_work_records(filters)
    if result.error:
        return None, error_response(result.error, "fetch")
    return filters, result


@work_records_bp.route("", methods=["GET"])
@login_required
def list_records():
    filters, outcome = _filtered_records()
    if filters is None:
        return outcome

    page = paginate(outcome.data, request.args.get("page", 1), current_app.config.get("RECORDS_PER_PAGE", 10))
    return jsonify(
        {
            "records": page.items,
            "pagination": page.to_dict(),
            "filters": filters.to_query_args(),
        }
    )


@work_records_bp.route("/export", methods=["GET"])
@login_required
def export_records():
    filters, outcome = _filtered_records()
    if filters is None:
        return outcome

    csv_content = build_work_records_csv(outcome.data)
    current_app.logger.info("Work records exported", extra={"rows": len(outcome.data)})
    return Response(
        csv_content,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_filename(date.today())}"},
    )


@work_records_bp.route("", methods=["POST"])
@login_required
def create_record():
    result = get_store().create_work_record(_request_payload())
    if result.error:
        return error_response(result.error, "save")

    body = {"record": result.data}
    if result.partial_errors:
        body["warnings"] = partial_errors_payload(result.partial_errors)
    return jsonify(body), 201


@work_records_bp.route("/<record_id>", methods=["GET"])
@login_required
def record_detail(record_id):
    result = get_store().get_work_record_by_id(record_id)
    if result.error:
        return error_response(result.error, "fetch")
    return jsonify({"record": result.data})


@work_records_bp.route("/<record_id>", methods=["PATCH", "PUT"])
@login_required
def update_record(record_id):
    result = get_store().update_work_record(record_id, _request_payload())
    if result.error:
        return error_response(result.error, "save")
    return jsonify({"record": result.data})


@work_records_bp.route("/<record_id>", methods=["DELETE"])
@login_required
def delete_record(record_id):
    result = get_store().delete_work_record(record_id)
    if result.error:
        return error_response(result.error, "save")
    return jsonify(result.data)
