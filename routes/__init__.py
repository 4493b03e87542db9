"""Blueprint registration, health check, and dashboard."""
from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from utils.services import get_store
from .auth import auth_bp
from .responses import error_response, partial_errors_payload
from .work_records import work_records_bp

main_bp = Blueprint("main", __name__)


@main_bp.route("/", methods=["GET"])
def index():
    return jsonify({"service": "work-tracker", "status": "ok"})


@main_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard():
    store = get_store()
    stats = store.get_work_record_stats()
    if stats.error:
        return error_response(stats.error, "fetch")

    recent = store.get_work_records()
    limit = int(current_app.config.get("RECENT_ENTRIES_LIMIT", 5))
    body = {
        "stats": stats.data.to_dict(),
        "recent_entries": (recent.data or [])[:limit],
    }
    warnings = partial_errors_payload(stats.partial_errors)
    if recent.error:
        current_app.logger.warning("Recent entries unavailable", extra={"reason": recent.error.message})
        warnings["recent_entries"] = recent.error.to_dict()
    if warnings:
        body["warnings"] = warnings
    return jsonify(body)


__all__ = ["main_bp", "auth_bp", "work_records_bp"]
