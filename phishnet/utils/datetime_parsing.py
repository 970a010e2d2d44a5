"""Datetime parsing helpers for API payloads and imports."""

from __future__ import annotations

import re
from datetime import datetime, timezone

DATETIME_FORMATS: list[str] = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M %p",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
]


def parse_optional_datetime(raw_value: object) -> datetime | None:
    """
    Parse a datetime from an API value.

    Accepts datetimes, ISO 8601 strings (including a trailing ``Z``), epoch
    seconds/milliseconds and a few common formats. Naive values are taken as
    UTC. ``None`` and blank strings yield ``None``.

    Raises:
        ValueError: The value is present but not a recognizable datetime.
    """
    if raw_value is None:
        return None
    if isinstance(raw_value, datetime):
        return _as_utc(raw_value)
    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        return _from_epoch(raw_value)
    if not isinstance(raw_value, str):
        raise ValueError(f"Unsupported datetime value: {raw_value!r}")

    value = raw_value.strip()
    if not value:
        return None

    # Epoch timestamps (seconds or milliseconds)
    if re.fullmatch(r"\d{10,13}", value):
        ts = int(value)
        if len(value) == 13:
            ts = ts / 1000
        return _from_epoch(ts)

    # ISO 8601 timestamps
    iso_value = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        return _as_utc(datetime.fromisoformat(iso_value))
    except ValueError:
        pass

    for fmt in DATETIME_FORMATS:
        try:
            return _as_utc(datetime.strptime(value, fmt))
        except ValueError:
            continue

    raise ValueError(f"Invalid datetime: {value}")


def _from_epoch(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
