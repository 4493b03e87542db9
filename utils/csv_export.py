"""CSV export of the current filtered work-record set."""
from datetime import date, datetime
from typing import Iterable, Mapping, Optional

from models import DEFAULT_WORK_STATUS

EXPORT_HEADERS: tuple[str, ...] = (
    "ID",
    "Full Name",
    "Phone Number",
    "Place Address",
    "Village/City",
    "Constituency Origin",
    "Constituency Work",
    "Nature of Work",
    "Status",
    "Work Allocated To",
    "Created Date",
)


def _quoted(value) -> str:
    return '"' + str(value or "").replace('"', '""') + '"'


def _plain(value) -> str:
    return "" if value is None else str(value)


def _created_date(value) -> str:
    if not value:
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    try:
        return datetime.fromisoformat(str(value)).strftime("%Y-%m-%d")
    except ValueError:
        return str(value)


def export_row(record: Mapping) -> str:
    # Only the free-text name and address columns are quoted.
    return ",".join(
        [
            _plain(record.get("id")),
            _quoted(record.get("full_name")),
            _plain(record.get("phone_number")),
            _quoted(record.get("place_address")),
            _plain(record.get("village_city")),
            _plain(record.get("constituency_origin")),
            _plain(record.get("constituency_work")),
            _plain(record.get("nature_of_work")),
            record.get("status") or DEFAULT_WORK_STATUS,
            record.get("work_allocated_to") or "",
            _created_date(record.get("created_at")),
        ]
    )


def build_work_records_csv(records: Iterable[Mapping]) -> str:
    lines = [",".join(EXPORT_HEADERS)]
    lines.extend(export_row(record) for record in records)
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    return f"work-records-{(today or date.today()).isoformat()}.csv"
