"""UTC helpers shared by the snapshot, store and assembler layers."""

from __future__ import annotations

from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Treat naive values as UTC; convert aware ones."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_unix_seconds(value: datetime) -> int:
    """Whole seconds since the epoch, as the upstream `timestamp` field expects."""

    return int(ensure_utc(value).timestamp())
