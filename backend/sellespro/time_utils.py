"""
Timestamp helpers.

Stored timestamps (sales, shifts, snapshots) are aware UTC datetimes and
travel as ISO-8601 strings with a trailing "Z". Reporting windows are cut
on the terminal's local wall clock; naive datetimes mean local time.
"""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Naive datetimes are taken as local wall-clock time."""
    return dt if dt.tzinfo is not None else dt.astimezone()


def parse_iso_datetime(value: str | None) -> datetime | None:
    """
    Read a stored timestamp back as aware UTC.

    Blank values give None. Naive strings are assumed to already be UTC,
    since every timestamp this application writes is.
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_utc_z(dt: datetime | None) -> str | None:
    """Millisecond-precision UTC string, e.g. 2026-03-18T12:06:00.000Z."""
    if dt is None:
        return None
    aware = dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)
    stamp = aware.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")
