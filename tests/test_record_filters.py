"""
Tests for utils/record_filters.py: record id format, entry dates and the filter object.
"""
from datetime import date

import pytest

from utils.errors import ValidationError
from utils.record_filters import WorkRecordFilters, first_day_of_month, parse_entry_date, validate_record_id

CANONICAL = "5f0c6b7e-3d4a-4c2b-9e1f-0a1b2c3d4e5f"


class TestValidateRecordId:
    @pytest.mark.parametrize(
        "value",
        [
            CANONICAL,
            CANONICAL.upper(),
            CANONICAL.replace("-", ""),
            "5f0c6b7e3d4a-4c2b-9e1f0a1b2c3d4e5f",
            f"  {CANONICAL}  ",
        ],
    )
    def test_accepts_and_normalises(self, value):
        assert validate_record_id(value) == CANONICAL

    @pytest.mark.parametrize(
        "value",
        [
            "",
            None,
            "42",
            "not-a-uuid",
            "5f0c6b7e-3d4a-6c2b-9e1f-0a1b2c3d4e5f",  # version nibble out of range
            "5f0c6b7e-3d4a-4c2b-7e1f-0a1b2c3d4e5f",  # variant nibble
            "5f0c6b7e-3d4a-4c2b-9e1f-0a1b2c3d4e5",  # too short
            "5f0c6b7e-3d4a-4c2b-9e1f-0a1b2c3d4e5g",
        ],
    )
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError, match="Invalid record ID format"):
            validate_record_id(value)


class TestParseEntryDate:
    def test_iso_string(self):
        assert parse_entry_date("2024-02-29") == date(2024, 2, 29)

    def test_blank_is_none(self):
        assert parse_entry_date("") is None
        assert parse_entry_date(None) is None

    def test_date_passthrough(self):
        assert parse_entry_date(date(2024, 1, 1)) == date(2024, 1, 1)

    def test_invalid(self):
        with pytest.raises(ValidationError) as excinfo:
            parse_entry_date("2024-02-30", "date_to")
        assert "date_to" in excinfo.value.details


def test_first_day_of_month():
    assert first_day_of_month(date(2024, 3, 31)) == date(2024, 3, 1)
    assert first_day_of_month(date(2024, 1, 1)) == date(2024, 1, 1)


class TestWorkRecordFilters:
    def test_empty_mapping(self):
        assert WorkRecordFilters.from_mapping(None) == WorkRecordFilters()
        assert WorkRecordFilters.from_mapping({}) == WorkRecordFilters()

    def test_camel_case_keys(self):
        filters = WorkRecordFilters.from_mapping(
            {
                "search": " asha ",
                "dateFrom": "2024-03-01",
                "dateTo": "2024-03-31",
                "constituencyOrigin": "Rampur",
                "constituencyWork": "",
                "natureOfWork": "jan_kalyan",
                "status": "done",
            }
        )
        assert filters == WorkRecordFilters(
            search="asha",
            date_from=date(2024, 3, 1),
            date_to=date(2024, 3, 31),
            constituency_origin="Rampur",
            nature_of_work="jan_kalyan",
            status="done",
        )

    @pytest.mark.parametrize("value", ["all", "ALL", "", None])
    def test_all_disables_enum_filters(self, value):
        filters = WorkRecordFilters.from_mapping({"status": value, "nature_of_work": value})
        assert filters.status is None
        assert filters.nature_of_work is None

    def test_unknown_enum_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            WorkRecordFilters.from_mapping({"nature_of_work": "roads"})
        assert "nature_of_work" in excinfo.value.details

    def test_coerce_keeps_instances(self):
        filters = WorkRecordFilters(status="done")
        assert WorkRecordFilters.coerce(filters) is filters
        assert WorkRecordFilters.coerce({"status": "done"}) == filters

    def test_query_args_round_trip(self):
        filters = WorkRecordFilters(search="asha", date_from=date(2024, 3, 1))
        assert filters.to_query_args() == {"search": "asha", "date_from": "2024-03-01"}
        assert WorkRecordFilters.from_mapping(filters.to_query_args()) == filters
