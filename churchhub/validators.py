"""
Form parsing for the manager pages. Each parser returns the attributes to
write, or raises before any statement is sent to the database.
"""
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from churchhub.exceptions import MissingFieldsError, ValidationError
from churchhub.models import EventType, MissionStatus, RecordType
from churchhub.models.enums import values_of
from churchhub.models.financial_record import CATEGORIES


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value):
    if _blank(value):
        return None
    return str(value).strip()


def _require(data, fields, partial):
    if partial:
        missing = [field for field in fields if field in data and _blank(data[field])]
    else:
        missing = [field for field in fields if _blank(data.get(field))]
    if missing:
        raise MissingFieldsError(missing)


def parse_date(value, field):
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")


def parse_datetime(value, field):
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO 8601 date and time")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_amount(value, field, allow_negative=False):
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Please enter a valid {field.replace('_', ' ')}")
    if not amount.is_finite():
        raise ValidationError(f"Please enter a valid {field.replace('_', ' ')}")
    if amount < 0 and not allow_negative:
        raise ValidationError(f"{field} cannot be negative")
    return amount.quantize(Decimal("0.01"))


def parse_int(value, field):
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field} must be a whole number")


def parse_choice(value, choices, field):
    value = str(value).strip().lower()
    if value not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
    return value


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "t", "yes", "on")


def _optional_text(data, attrs, fields):
    for field in fields:
        if field in data:
            attrs[field] = _text(data[field])


def parse_sermon(data, partial=False):
    _require(data, ["title"], partial)
    attrs = {}
    if "title" in data:
        attrs["title"] = _text(data["title"])
    if not _blank(data.get("sermon_date")):
        attrs["sermon_date"] = parse_date(data["sermon_date"], "sermon_date")
    elif not partial:
        attrs["sermon_date"] = date.today()
    _optional_text(
        data,
        attrs,
        ["description", "pastor_name", "video_url", "thumbnail_url", "audio_url", "document_url", "presentation_url"],
    )
    return attrs


def parse_song(data, partial=False):
    _require(data, ["title"], partial)
    attrs = {}
    if "title" in data:
        attrs["title"] = _text(data["title"])
    if "tempo" in data:
        attrs["tempo"] = None if _blank(data["tempo"]) else parse_int(data["tempo"], "tempo")
    _optional_text(data, attrs, ["artist", "lyrics", "key_signature", "audio_url"])
    return attrs


def parse_song_list(data, partial=False):
    _require(data, ["name", "service_date"], partial)
    attrs = {}
    if "name" in data:
        attrs["name"] = _text(data["name"])
    if not _blank(data.get("service_date")):
        attrs["service_date"] = parse_date(data["service_date"], "service_date")
    _optional_text(data, attrs, ["notes"])

    if "items" in data:
        items = []
        for index, item in enumerate(data.get("items") or []):
            if _blank(item.get("song_id")):
                raise MissingFieldsError([f"items[{index}].song_id"])
            items.append(
                {
                    "song_id": parse_int(item["song_id"], "song_id"),
                    "position": parse_int(item.get("position", index), "position"),
                    "notes": _text(item.get("notes")),
                }
            )
        attrs["items"] = items
    return attrs


def parse_event(data, partial=False):
    _require(data, ["title", "event_date"], partial)
    attrs = {}
    if "title" in data:
        attrs["title"] = _text(data["title"])
    if not _blank(data.get("event_date")):
        attrs["event_date"] = parse_datetime(data["event_date"], "event_date")
    if not _blank(data.get("event_type")):
        attrs["event_type"] = parse_choice(data["event_type"], values_of(EventType), "event_type")
    elif not partial:
        attrs["event_type"] = EventType.SERVICE.value
    _optional_text(data, attrs, ["description", "location", "image_url"])
    return attrs


def parse_mission(data, partial=False):
    _require(data, ["title"], partial)
    attrs = {}
    if "title" in data:
        attrs["title"] = _text(data["title"])
    for field in ("goal_amount", "raised_amount"):
        if field in data:
            attrs[field] = None if _blank(data[field]) else parse_amount(data[field], field)
    for field in ("start_date", "end_date"):
        if field in data:
            attrs[field] = None if _blank(data[field]) else parse_date(data[field], field)
    if attrs.get("start_date") and attrs.get("end_date") and attrs["end_date"] < attrs["start_date"]:
        raise ValidationError("end_date cannot be before start_date")
    if not _blank(data.get("status")):
        attrs["status"] = parse_choice(data["status"], values_of(MissionStatus), "status")
    elif not partial:
        attrs["status"] = MissionStatus.ACTIVE.value
    _optional_text(data, attrs, ["description", "location", "image_url"])
    return attrs


def parse_financial_record(data, partial=False):
    _require(data, ["category", "amount", "record_type"], partial)
    attrs = {}
    if "category" in data:
        category = _text(data["category"])
        if category not in CATEGORIES:
            raise ValidationError(f"category must be one of: {', '.join(CATEGORIES)}")
        attrs["category"] = category
    if "amount" in data:
        attrs["amount"] = parse_amount(data["amount"], "amount")
    if "record_type" in data:
        attrs["record_type"] = parse_choice(data["record_type"], values_of(RecordType), "record_type")
    if not _blank(data.get("record_date")):
        attrs["record_date"] = parse_date(data["record_date"], "record_date")
    elif not partial:
        attrs["record_date"] = date.today()
    if "is_public" in data:
        attrs["is_public"] = parse_bool(data["is_public"])
    elif not partial:
        attrs["is_public"] = True
    _optional_text(data, attrs, ["description"])
    return attrs


def parse_church(data, partial=False):
    _require(data, ["name"], partial)
    attrs = {}
    if "name" in data:
        attrs["name"] = _text(data["name"])
    if not _blank(data.get("slug")):
        attrs["slug"] = _text(data["slug"]).lower()
    _optional_text(data, attrs, ["address"])
    return attrs


def selected_church(data):
    """The church the writer explicitly picked, if any."""
    value = data.get("church_id") if data else None
    return None if _blank(value) else parse_int(value, "church_id")
