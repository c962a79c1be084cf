"""
Conversion between stored date/time values and the part mappings used by
date-group, time-group and datetime-group widgets.

Parts use the keys day/month/year and hour/minute/second (plus microsecond
when the value has one).
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DATE_PARTS = ("day", "month", "year")
TIME_PARTS = ("hour", "minute")


def is_date_parts(value: Any) -> bool:
    return isinstance(value, Mapping) and all(k in value for k in DATE_PARTS)


def is_time_parts(value: Any) -> bool:
    return isinstance(value, Mapping) and all(k in value for k in TIME_PARTS)


def is_composite(value: Any) -> bool:
    return is_date_parts(value) or is_time_parts(value)


def is_blank_parts(parts: Mapping[str, Any]) -> bool:
    """Every part left empty, i.e. no value was entered."""
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in parts.values())


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, time):
        return datetime.combine(date.today(), value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str) and value.strip():
        s = value.strip()
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            pass
        try:
            return datetime.combine(date.today(), time.fromisoformat(s))
        except ValueError:
            logger.warning("Cannot read %r as a date/time value", value)
    return None


def date_to_parts(value: Any) -> dict[str, int] | None:
    """date, datetime, ISO string or unix timestamp -> {"day","month","year"}."""
    dt = _to_datetime(value)
    if dt is None:
        return None
    return {"day": dt.day, "month": dt.month, "year": dt.year}


def time_to_parts(value: Any) -> dict[str, int] | None:
    dt = _to_datetime(value)
    if dt is None:
        return None
    parts = {"hour": dt.hour, "minute": dt.minute, "second": dt.second}
    if dt.microsecond:
        parts["microsecond"] = dt.microsecond
    return parts


def datetime_to_parts(value: Any) -> dict[str, int] | None:
    d = date_to_parts(value)
    if d is None:
        return None
    return {**d, **time_to_parts(value)}


def _int_part(parts: Mapping[str, Any], key: str, default: int | None = None) -> int:
    raw = parts.get(key, default)
    if raw is None or raw == "":
        if default is None:
            raise ValueError(f"missing {key}")
        return default
    return int(raw)


def parts_to_date(parts: Mapping[str, Any]) -> date:
    """Raises ValueError when the parts are not a calendar-valid date."""
    return date(_int_part(parts, "year"), _int_part(parts, "month"), _int_part(parts, "day"))


def parts_to_time(parts: Mapping[str, Any]) -> time:
    return time(
        _int_part(parts, "hour"),
        _int_part(parts, "minute"),
        _int_part(parts, "second", 0),
        _int_part(parts, "microsecond", 0),
    )


def parts_to_datetime(parts: Mapping[str, Any]) -> datetime:
    d = parts_to_date(parts)
    if is_time_parts(parts):
        return datetime.combine(d, parts_to_time(parts))
    return datetime(d.year, d.month, d.day)


def parts_to_value(parts: Mapping[str, Any]) -> date | time | datetime:
    """Pick the reconstruction from the structure of the parts."""
    if is_date_parts(parts) and is_time_parts(parts):
        return parts_to_datetime(parts)
    if is_date_parts(parts):
        return parts_to_date(parts)
    return parts_to_time(parts)


def fallback_value(parts: Mapping[str, Any]) -> date | time | datetime:
    """Value of last resort for unreadable parts: the current date/time."""
    now = datetime.now()
    if is_date_parts(parts) and is_time_parts(parts):
        return now.replace(microsecond=0)
    if is_date_parts(parts):
        return now.date()
    return now.time().replace(microsecond=0)


def to_storage(value: date | time | datetime, output: str) -> Any:
    """
    output:
      native    -> value unchanged
      iso       -> "YYYY-MM-DD" for dates, ISO 8601 otherwise
      timestamp -> unix timestamp (int) for dates and datetimes
    """
    if output == "iso":
        return value.isoformat()
    if output == "timestamp" and not isinstance(value, time):
        dt = value if isinstance(value, datetime) else datetime(value.year, value.month, value.day)
        return int(dt.timestamp())
    return value
