"""JSON response helpers shared by the blueprints."""
from flask import jsonify

from utils.error_messages import user_message
from utils.errors import ServiceError


def error_response(error: ServiceError, context: str = "", status: int | None = None):
    payload = error.to_dict()
    payload["user_message"] = user_message(error, context)
    return jsonify({"error": payload}), status or error.http_status


def partial_errors_payload(partial_errors: dict) -> dict:
    return {name: exc.to_dict() for name, exc in partial_errors.items()}
