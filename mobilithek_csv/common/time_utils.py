"""UTC-focused helpers for run metadata and export timestamps."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def iso_timestamp_z(moment: datetime | None = None) -> str:
    """Format as ``2024-01-31T12:00:00.000Z``, the form used in export documents."""
    value = (moment or utc_now()).astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def generate_run_id() -> str:
    return utc_now().strftime("run-%Y%m%dT%H%M%S%fZ")
