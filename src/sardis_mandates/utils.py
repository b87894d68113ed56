"""Identifier and timestamp helpers."""
from __future__ import annotations

import itertools
import time
import uuid
from datetime import datetime, timezone

from .constants import MANDATE_ID_PREFIX


_sequence = itertools.count()


def new_mandate_id() -> str:
    """Generate a time-ordered unique mandate id.

    Layout: prefix, 48-bit millisecond timestamp, 32-bit process sequence,
    random suffix. Ids from one process sort in creation order.
    """
    millis = time.time_ns() // 1_000_000
    seq = next(_sequence) & 0xFFFFFFFF
    return f"{MANDATE_ID_PREFIX}{millis:012x}{seq:08x}{uuid.uuid4().hex[:12]}"


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        raise ValueError("timestamp must be timezone-aware")
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
