"""Authentication blueprint backed by the identity gateway."""
from flask import Blueprint, current_app, jsonify, request
from flask_wtf import FlaskForm
from flask_wtf.csrf import generate_csrf
from wtforms import PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional

from models import USER_ROLES
from routes.responses import error_response
from utils.decorators import roles_required
from utils.security import reset_attempts, track_attempt
from utils.services import get_gateway

auth_bp = Blueprint("auth", __name__)


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired()])


class RegistrationForm(FlaskForm):
    full_name = StringField("Full Name", validators=[Optional(), Length(max=150)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    role = SelectField("Role", choices=[(r, r.title()) for r in USER_ROLES], default="staff")
    password = PasswordField("Password", validators=[DataRequired(), Length(min=12)])


@auth_bp.route("/csrf", methods=["GET"])
def csrf_token():
    return jsonify({"csrf_token": generate_csrf()})


@auth_bp.route("/login", methods=["POST"])
def login():
    attempt_key = f"login:{request.remote_addr}"
    allowed = track_attempt(
        attempt_key,
        limit=int(current_app.config.get("LOGIN_ATTEMPT_LIMIT", 10)),
        window=int(current_app.config.get("LOGIN_ATTEMPT_WINDOW_SECONDS", 900)),
    )
    if not allowed:
        current_app.logger.warning("Login rate limit hit", extra={"ip": request.remote_addr})
        return jsonify({"error": {"code": "rate_limited", "message": "Too many login attempts. Please try again later."}}), 429

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"error": {"code": "validation_error", "message": "Invalid login form", "details": form.errors}}), 400

    result = get_gateway().sign_in(form.email.data, form.password.data)
    if result.error:
        return error_response(result.error, "login")

    reset_attempts(attempt_key)
    return jsonify(result.data.to_dict())


@auth_bp.route("/logout", methods=["POST"])
def logout():
    # Local teardown happens even when the upstream revoke fails.
    result = get_gateway().sign_out()
    payload = {"signed_out": True}
    if result.error:
        payload["warning"] = result.error.to_dict()
    return jsonify(payload)


@auth_bp.route("/session", methods=["GET"])
def current_session():
    result = get_gateway().get_session()
    if result.error:
        return error_response(result.error, "login")
    return jsonify({"session": result.data.to_dict() if result.data else None})


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    result = get_gateway().refresh_session()
    if result.error:
        return error_response(result.error, "login")
    return jsonify({"session": result.data.to_dict()})


@auth_bp.route("/register", methods=["POST"])
@roles_required("admin")
def register():
    form = RegistrationForm()
    if not form.validate_on_submit():
        return jsonify({"error": {"code": "validation_error", "message": "Invalid registration form", "details": form.errors}}), 400

    profile = {"name": (form.full_name.data or "").strip(), "role": form.role.data}
    result = get_gateway().sign_up(form.email.data, form.password.data, profile)
    if result.error:
        return error_response(result.error, "save")
    current_app.logger.info("User registered", extra={"user_id": result.data.user.id})
    return jsonify(result.data.to_dict()), 201
