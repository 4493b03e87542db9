"""Work-record store: authorization, boundary validation, persistence and stats.

Every public operation resolves the acting user through the identity gateway
before touching the repository, on every call. Nothing raises across this
boundary: callers always get a :class:`utils.results.Result`.
"""
from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Callable, Iterable, List, Mapping, Optional

from flask import current_app

from models import DEFAULT_WORK_STATUS, NATURE_OF_WORK_VALUES, WORK_STATUS_VALUES, WorkRecord
from utils.errors import NotFound, PersistenceError, ServiceError, TransportError, Unauthenticated, ValidationError
from utils.identity_gateway import IdentityGateway
from utils.identity_provider import AuthIdentity
from utils.record_filters import WorkRecordFilters, first_day_of_month, parse_entry_date, validate_record_id
from utils.results import Result, WorkRecordStats
from utils.work_record_repository import WorkRecordRepository

REQUIRED_FIELDS: tuple[str, ...] = (
    "full_name",
    "phone_number",
    "place_address",
    "village_city",
    "constituency_origin",
    "constituency_work",
)

OPTIONAL_TEXT_FIELDS: tuple[str, ...] = (
    "nature_of_work_details",
    "action_taken",
    "concerned_person_contact",
    "work_allocated_to",
)

CREATE_ONLY_FIELDS: tuple[str, ...] = ("referred_by",)

FIELD_LABELS: dict[str, str] = {
    "full_name": "Full name",
    "phone_number": "Phone number",
    "place_address": "Place/Address",
    "village_city": "Village/City",
    "constituency_origin": "Constituency of Origin",
    "constituency_work": "Constituency of Work",
    "nature_of_work": "Nature of Work",
}


def _requires_actor(operation: Callable) -> Callable:
    """Resolve the actor first; fail with Unauthenticated before any repository I/O."""

    @wraps(operation)
    def wrapped(self: "WorkRecordStore", *args, **kwargs) -> Result:
        name = operation.__name__
        auth = self.gateway.get_current_user()
        if auth.error is not None or auth.data is None:
            if isinstance(auth.error, TransportError):
                return Result.failure(auth.error)
            current_app.logger.warning(
                "Unauthenticated store access",
                extra={"operation": name, "reason": auth.error.message if auth.error else None},
            )
            return Result.failure(Unauthenticated("User not authenticated"))

        try:
            return operation(self, auth.data, *args, **kwargs)
        except ServiceError as exc:
            current_app.logger.warning("Work record operation failed", extra={"operation": name, "reason": exc.message})
            return Result.failure(exc)
        except Exception as exc:
            current_app.logger.exception("Unexpected work record failure", extra={"operation": name})
            return Result.failure(PersistenceError(f"Unexpected error during {name}: {exc}"))

    return wrapped


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _check_choice(value: Any, allowed: tuple[str, ...], field_name: str, errors: dict) -> Optional[str]:
    text = _text(value)
    if text is not None and text not in allowed:
        errors[field_name] = f"Must be one of: {', '.join(allowed)}"
    return text


def clean_referrers(entries: Optional[Iterable[Mapping[str, Any]]]) -> List[dict]:
    """Drop blank-named referrers and normalise the rest for insertion.

    Accepts the form shape (``name``/``contact``) as well as the column names.
    """
    cleaned = []
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            continue
        name = _text(entry.get("name", entry.get("referrer_name")))
        if not name:
            continue
        contact = _text(entry.get("contact", entry.get("referrer_contact")))
        cleaned.append({"referrer_name": name, "referrer_contact": contact, "is_self": False})
    return cleaned


class WorkRecordStore:
    def __init__(
        self,
        gateway: IdentityGateway,
        repository: WorkRecordRepository,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.gateway = gateway
        self.repository = repository
        self.today = today

    @_requires_actor
    def create_work_record(self, actor: AuthIdentity, record: Mapping[str, Any]) -> Result:
        values = self._validate_new_record(record or {})
        values["created_by"] = actor.id
        created = self.repository.insert(values)
        current_app.logger.info("Work record created", extra={"record_id": created["id"], "user_id": actor.id})

        partial_errors = {}
        referrers = clean_referrers((record or {}).get("referred_by"))
        if referrers:
            try:
                self.repository.insert_referrers(created["id"], referrers)
            except ServiceError as exc:
                current_app.logger.warning(
                    "Error inserting referred_by", extra={"record_id": created["id"], "reason": exc.message}
                )
                partial_errors["referred_by"] = exc
        return Result.success(created, partial_errors)

    @_requires_actor
    def get_work_records(self, actor: AuthIdentity, filters: Any = None) -> Result:
        criteria = WorkRecordFilters.coerce(filters)
        return Result.success(self.repository.find_all(criteria))

    @_requires_actor
    def get_work_record_by_id(self, actor: AuthIdentity, record_id: Any) -> Result:
        record_id = validate_record_id(record_id)
        record = self.repository.find_by_id(record_id)
        if record is None:
            return Result.failure(NotFound("No rows returned", details={"id": record_id}))
        return Result.success(record)

    @_requires_actor
    def update_work_record(self, actor: AuthIdentity, record_id: Any, updates: Mapping[str, Any]) -> Result:
        record_id = validate_record_id(record_id)
        values = self._validate_updates(updates or {})
        values["updated_by"] = actor.id
        updated = self.repository.update(record_id, values)
        if updated is None:
            return Result.failure(NotFound("No rows returned", details={"id": record_id}))
        current_app.logger.info("Work record updated", extra={"record_id": record_id, "user_id": actor.id})
        return Result.success(updated)

    @_requires_actor
    def delete_work_record(self, actor: AuthIdentity, record_id: Any) -> Result:
        record_id = validate_record_id(record_id)
        deleted = self.repository.delete(record_id)
        current_app.logger.info(
            "Work record delete", extra={"record_id": record_id, "user_id": actor.id, "deleted": deleted}
        )
        return Result.success({"id": record_id, "deleted": deleted})

    @_requires_actor
    def get_work_record_stats(self, actor: AuthIdentity) -> Result:
        queries = {
            "total": WorkRecordFilters(),
            "pending": WorkRecordFilters(status="in_progress"),
            "completed": WorkRecordFilters(status="done"),
            "this_month": WorkRecordFilters(date_from=first_day_of_month(self.today())),
        }
        counts = {}
        partial_errors = {}
        for name, criteria in queries.items():
            try:
                counts[name] = self.repository.count(criteria)
            except ServiceError as exc:
                current_app.logger.warning("Statistic query failed", extra={"statistic": name, "reason": exc.message})
                counts[name] = 0
                partial_errors[name] = exc
        return Result.success(WorkRecordStats(**counts), partial_errors)

    def _validate_new_record(self, record: Mapping[str, Any]) -> dict:
        errors = {}
        values = {}
        for field_name in REQUIRED_FIELDS:
            values[field_name] = _text(record.get(field_name))
            if not values[field_name]:
                errors[field_name] = f"{FIELD_LABELS[field_name]} is required"

        values["nature_of_work"] = _check_choice(record.get("nature_of_work"), NATURE_OF_WORK_VALUES, "nature_of_work", errors)
        if not values["nature_of_work"] and "nature_of_work" not in errors:
            errors["nature_of_work"] = "Nature of Work is required"
        values["status"] = _check_choice(record.get("status"), WORK_STATUS_VALUES, "status", errors) or DEFAULT_WORK_STATUS

        for field_name in OPTIONAL_TEXT_FIELDS:
            values[field_name] = _text(record.get(field_name))
        values["is_draft"] = _flag(record.get("is_draft", False))

        try:
            values["date_of_entry"] = parse_entry_date(record.get("date_of_entry")) or self.today()
        except ValidationError as exc:
            errors.update(exc.details)

        if errors:
            raise ValidationError("Invalid work record", details=errors)
        return values

    def _validate_updates(self, updates: Mapping[str, Any]) -> dict:
        # Referrers are captured at creation only; edit forms may echo them back.
        updates = {key: value for key, value in updates.items() if key not in CREATE_ONLY_FIELDS}
        unknown = sorted(set(updates) - set(WorkRecord.MUTABLE_FIELDS))
        if unknown:
            raise ValidationError(
                "Unknown or read-only fields", details={name: "Cannot be updated" for name in unknown}
            )

        errors = {}
        values = {}
        for field_name, raw in updates.items():
            if field_name in REQUIRED_FIELDS:
                values[field_name] = _text(raw)
                if not values[field_name]:
                    errors[field_name] = f"{FIELD_LABELS[field_name]} is required"
            elif field_name == "nature_of_work":
                values[field_name] = _check_choice(raw, NATURE_OF_WORK_VALUES, field_name, errors)
                if not values[field_name] and field_name not in errors:
                    errors[field_name] = "Nature of Work is required"
            elif field_name == "status":
                values[field_name] = _check_choice(raw, WORK_STATUS_VALUES, field_name, errors) or DEFAULT_WORK_STATUS
            elif field_name == "date_of_entry":
                try:
                    values[field_name] = parse_entry_date(raw)
                except ValidationError as exc:
                    errors.update(exc.details)
                    continue
                if values[field_name] is None:
                    errors[field_name] = "Date of entry cannot be cleared"
            elif field_name == "is_draft":
                values[field_name] = _flag(raw)
            else:
                values[field_name] = _text(raw)

        if errors:
            raise ValidationError("Invalid work record update", details=errors)
        return values
