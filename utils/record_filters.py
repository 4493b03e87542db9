"""Filter value object and boundary parsing for work-record queries."""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Mapping, Optional

from models import NATURE_OF_WORK_VALUES, WORK_STATUS_VALUES
from utils.errors import ValidationError

ALL_VALUES = "all"

# Canonical 8-4-4-4-12 layout; separators optional, version 1-5, RFC 4122 variant.
_RECORD_ID_RE = re.compile(
    r"^[0-9a-f]{8}-?[0-9a-f]{4}-?[1-5][0-9a-f]{3}-?[89ab][0-9a-f]{3}-?[0-9a-f]{12}$",
    re.IGNORECASE,
)

_CAMEL_KEYS = {
    "dateFrom": "date_from",
    "dateTo": "date_to",
    "constituencyOrigin": "constituency_origin",
    "constituencyWork": "constituency_work",
    "natureOfWork": "nature_of_work",
}


def validate_record_id(value: Any) -> str:
    """Return the canonical lowercase hyphenated form of a record id."""
    text = str(value or "").strip()
    if not _RECORD_ID_RE.match(text):
        raise ValidationError("Invalid record ID format", details={"id": text})
    return str(uuid.UUID(hex=text.replace("-", "")))


def parse_entry_date(value: Any, field_name: str = "date_of_entry") -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(
            f"Invalid date for {field_name}",
            details={field_name: "Use the YYYY-MM-DD format"},
        ) from None


def first_day_of_month(today: date) -> date:
    return today.replace(day=1)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _choice(value: Any, allowed: tuple[str, ...], field_name: str) -> Optional[str]:
    text = _clean_text(value)
    if text is None or text.lower() == ALL_VALUES:
        return None
    if text not in allowed:
        raise ValidationError(
            f"Invalid {field_name} filter",
            details={field_name: f"Must be one of: {', '.join(allowed)} or {ALL_VALUES}"},
        )
    return text


@dataclass(frozen=True)
class WorkRecordFilters:
    """AND-combined predicates over work records; ``None`` means "not filtered"."""

    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    constituency_origin: Optional[str] = None
    constituency_work: Optional[str] = None
    nature_of_work: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "WorkRecordFilters":
        """Build filters from request args or a plain dict (snake or camel case keys)."""
        if not data:
            return cls()
        normalized = {_CAMEL_KEYS.get(key, key): value for key, value in data.items()}
        return cls(
            search=_clean_text(normalized.get("search")),
            date_from=parse_entry_date(normalized.get("date_from"), "date_from"),
            date_to=parse_entry_date(normalized.get("date_to"), "date_to"),
            constituency_origin=_clean_text(normalized.get("constituency_origin")),
            constituency_work=_clean_text(normalized.get("constituency_work")),
            nature_of_work=_choice(normalized.get("nature_of_work"), NATURE_OF_WORK_VALUES, "nature_of_work"),
            status=_choice(normalized.get("status"), WORK_STATUS_VALUES, "status"),
        )

    @classmethod
    def coerce(cls, value: Any) -> "WorkRecordFilters":
        if isinstance(value, cls):
            return value
        return cls.from_mapping(value)

    def to_query_args(self) -> dict:
        """Active filters as string query parameters, e.g. for building export links."""
        args = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                args[f.name] = value.isoformat() if isinstance(value, date) else value
        return args
