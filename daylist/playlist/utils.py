"""
Shared helpers for the playlist engine.

Last-played strings become "days ago" relative to the injected clock here,
for preference scoring and cooldown constraints alike.
"""
from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Optional

# Days assumed for a timestamp that cannot be parsed
UNPARSEABLE_DAYS = 0.5

_FALLBACK_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%d %H:%M:%S",
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a library timestamp into an aware UTC datetime.

    Accepts ISO-8601 with or without an offset (a trailing "Z" included) and
    the space-separated "YYYY-MM-DD HH:MM:SS" form. Naive values are taken
    as UTC. Returns None when nothing matches.
    """
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def parse_days_since_played(value: Optional[str], now: datetime) -> Optional[float]:
    """
    Fractional days between ``value`` and ``now``.

    Args:
        value: Raw last-played string from the library
        now: Injected current time (naive values are taken as UTC)

    Returns:
        None when the track has no last-played value, UNPARSEABLE_DAYS when it
        has one that cannot be parsed, otherwise days elapsed clamped at 0.
    """
    if value is None or not str(value).strip():
        return None
    played = parse_timestamp(value)
    if played is None:
        return UNPARSEABLE_DAYS
    elapsed = (_as_utc(now) - played).total_seconds() / 86400.0
    return max(elapsed, 0.0)


def stable_hash(text: str) -> int:
    """Process-independent non-negative 64-bit hash of ``text``."""
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")
