"""UTC-focused helpers for log timestamps and durations."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)
