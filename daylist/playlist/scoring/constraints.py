"""
Hard Sequencing Constraints
===========================

Binary gates checked before a candidate is scored for a position:
- artist repeated within the artist window
- album repeated within the album window
- tempo jump above max_bpm_jump (only when both tempos are known)
- played more recently than the configured cooldown

A violation only disqualifies the candidate for the current position; once
the windows move on it may be placed later.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ...models import Track
from ...string_utils import normalize_key
from ..config import TransitionRules
from ..utils import parse_days_since_played

VIOLATION_ARTIST = "artist_repeat"
VIOLATION_ALBUM = "album_repeat"
VIOLATION_TEMPO = "tempo_jump"
VIOLATION_COOLDOWN = "cooldown"


def _recent(placed: Sequence[Track], window: int) -> Sequence[Track]:
    if window <= 0 or not placed:
        return ()
    return placed[-window:]


def violates_artist_window(placed: Sequence[Track], candidate: Track, window: int) -> bool:
    key = normalize_key(candidate.artist)
    if not key:
        return False
    return any(normalize_key(t.artist) == key for t in _recent(placed, window))


def violates_album_window(placed: Sequence[Track], candidate: Track, window: int) -> bool:
    key = normalize_key(candidate.album)
    if not key:
        return False
    return any(normalize_key(t.album) == key for t in _recent(placed, window))


def violates_tempo_jump(placed: Sequence[Track], candidate: Track, max_jump: float) -> bool:
    if not placed:
        return False
    last = placed[-1]
    if last.tempo is None or candidate.tempo is None:
        return False
    return abs(candidate.tempo - last.tempo) > max_jump


def violates_cooldown(candidate: Track, min_days: Optional[float], now: datetime) -> bool:
    """Unparseable timestamps count as half a day ago."""
    if min_days is None:
        return False
    days = parse_days_since_played(candidate.last_played, now)
    return days is not None and days < min_days


def find_violation(
    placed: Sequence[Track],
    candidate: Track,
    rules: TransitionRules,
    *,
    now: datetime,
) -> Optional[str]:
    """
    First constraint ``candidate`` breaks at the next position, or None.

    Args:
        placed: Tracks placed so far, in order
        candidate: Track under consideration
        rules: Profile transition rules
        now: Injected current time for the cooldown check
    """
    if violates_artist_window(placed, candidate, rules.avoid_artist_repeats_within):
        return VIOLATION_ARTIST
    if violates_album_window(placed, candidate, rules.avoid_album_repeats_within):
        return VIOLATION_ALBUM
    if violates_tempo_jump(placed, candidate, rules.max_bpm_jump):
        return VIOLATION_TEMPO
    if violates_cooldown(candidate, rules.min_days_since_last_play, now):
        return VIOLATION_COOLDOWN
    return None
