"""Form parsing for the manager pages."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from churchhub.exceptions import MissingFieldsError, ValidationError
from churchhub.validators import (
    parse_amount,
    parse_datetime,
    parse_event,
    parse_financial_record,
    parse_mission,
    parse_song_list,
    selected_church,
)


class TestParsers:
    def test_amount_is_quantized(self):
        assert parse_amount("12.345", "amount") == Decimal("12.34")
        assert parse_amount(" 10 ", "amount") == Decimal("10.00")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
    def test_amount_rejects_garbage(self, value):
        with pytest.raises(ValidationError):
            parse_amount(value, "amount")

    def test_naive_datetime_is_utc(self):
        assert parse_datetime("2030-01-01T09:30:00", "event_date") == datetime(2030, 1, 1, 9, 30, tzinfo=timezone.utc)

    def test_offset_is_converted_to_utc(self):
        assert parse_datetime("2030-01-01T09:30:00+02:00", "event_date").hour == 7

    def test_selected_church(self):
        assert selected_church({"church_id": "3"}) == 3
        assert selected_church({"church_id": ""}) is None
        assert selected_church(None) is None


class TestEntityParsers:
    def test_event_requires_title_and_date(self):
        with pytest.raises(MissingFieldsError) as exc:
            parse_event({"title": "Only a title"})
        assert exc.value.fields == ["event_date"]

    def test_partial_update_keeps_absent_fields_out(self):
        assert parse_event({"location": "Hall"}, partial=True) == {"location": "Hall"}

    def test_financial_record_defaults(self):
        attrs = parse_financial_record({"category": "Utilities", "amount": "40", "record_type": "Expense"})
        assert attrs["record_type"] == "expense"
        assert attrs["is_public"] is True
        assert attrs["record_date"] == date.today()

    def test_mission_status_default(self):
        assert parse_mission({"title": "Well"})["status"] == "active"

    def test_song_list_items_need_song(self):
        with pytest.raises(MissingFieldsError):
            parse_song_list({"name": "Set", "service_date": "2030-01-01", "items": [{"position": 0}]})

    def test_song_list_item_positions_default_to_order(self):
        attrs = parse_song_list({"name": "Set", "service_date": "2030-01-01", "items": [{"song_id": 4}, {"song_id": "9"}]})
        assert [(i["song_id"], i["position"]) for i in attrs["items"]] == [(4, 0), (9, 1)]
