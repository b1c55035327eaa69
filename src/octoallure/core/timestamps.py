"""Epoch-millisecond helpers shared by the translators."""

from __future__ import annotations

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], int]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


def now_ms() -> int:
    return int(time.time() * 1000)


def to_epoch_ms(value: str | None, default: int) -> int:
    """Convert an ISO-8601 timestamp to epoch milliseconds.

    Missing or unparseable values return ``default``. Naive timestamps are
    read as UTC.
    """
    if not value or not isinstance(value, str):
        return default
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return default
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - _EPOCH) // timedelta(milliseconds=1)
