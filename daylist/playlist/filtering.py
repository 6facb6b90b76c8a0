"""
Track filtering for playlist generation.

Decides whether a library record is an eligible candidate at all:
- Non-song detection (interludes, skits, spoken word, test tones, ...)
- Genre allow/deny lists (substring match, deny wins)
- Tempo range (unknown tempo passes)
- Optional play-count rule, percentiles taken over the whole pool

The non-song keyword table is plain data (NonSongRules); pass a different
instance to filter with a domain-specific exclusion list.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..models import Track
from ..string_utils import normalize_text
from .config import PlayCountFilter, TasteProfile

logger = logging.getLogger(__name__)

REASON_NON_SONG = "non_song"
REASON_GENRE_NOT_ALLOWED = "genre_not_allowed"
REASON_GENRE_DENIED = "genre_denied"
REASON_TEMPO = "tempo_out_of_range"
REASON_PLAY_COUNT = "play_count"

DEFAULT_NON_SONG_PATTERNS: Tuple[str, ...] = (
    # interludes and transitions
    "interlude", "intro", "outro", "prelude", "postlude", "bridge", "transition", "segue",
    # sketches and fragments
    "sketch", "fragment", "snippet", "bits", "piece",
    # spoken word
    "monologue", "dialogue", "speech", "interview", "conversation", "discussion",
    # ambient / field recordings
    "atmosphere", "soundscape", "field recording", "rain", "ocean", "wind", "nature sounds",
    # meditation
    "meditation", "mantra", "prayer", "chant",
    # other non-musical content
    "silence", "pause", "break", "intermission", "announcement", "commercial", "ad",
    "test", "testing", "tuning",
    # abbreviations
    "int.", "intro.", "outro.", "interl.",
    "untitled",
)

DEFAULT_PARENTHETICAL_MARKERS: Tuple[str, ...] = ("(interlude)", "(intro)", "(outro)", "(sketch)")


@dataclass(frozen=True)
class NonSongRules:
    """
    Exclusion table for non-song detection.

    Attributes:
        patterns: Words/phrases that mark a non-song when they appear as a
            whole word, at either end of the title, or as a "pattern:" prefix
        parenthetical_markers: Substrings such as "(interlude)"
        short_marker: Parenthetical that only disqualifies short tracks
        short_marker_max_duration: Duration below which short_marker applies
        min_duration: Shorter tracks are rejected (seconds)
        max_duration: Longer tracks are rejected (seconds)
    """
    patterns: Tuple[str, ...] = DEFAULT_NON_SONG_PATTERNS
    parenthetical_markers: Tuple[str, ...] = DEFAULT_PARENTHETICAL_MARKERS
    short_marker: str = "(instrumental)"
    short_marker_max_duration: int = 90
    min_duration: int = 60
    max_duration: int = 600


DEFAULT_NON_SONG_RULES = NonSongRules()


@dataclass(frozen=True)
class FilterResult:
    """
    Result of filtering a pool with diagnostics.

    Attributes:
        filtered_tracks: Tracks that passed every check, in input order
        stats: Counts per rejection reason plus totals
    """
    filtered_tracks: List[Track]
    stats: Dict[str, Any] = field(default_factory=dict)


def _matches_pattern(title: str, words: Sequence[str], pattern: str) -> bool:
    return (
        title == pattern
        or title.startswith(pattern + " ")
        or title.endswith(" " + pattern)
        or f" {pattern} " in title
        or pattern in words
        or title.startswith(pattern + ":")
    )


def _is_numeric_title(title: str) -> bool:
    return all(ch.isdigit() or ch in ".-" for ch in title)


def _is_track_number_title(title: str) -> bool:
    if not title.startswith("track "):
        return False
    return all(ch.isdigit() or ch.isspace() for ch in title[6:])


def is_actual_song(track: Track, rules: NonSongRules = DEFAULT_NON_SONG_RULES) -> bool:
    """
    Return False for interludes, skits, spoken word and other non-songs.

    Unknown duration skips the duration checks. A short-only marker such as
    "(Instrumental)" rejects only tracks under ``short_marker_max_duration``.
    """
    title = normalize_text(track.title, strip=False)
    stripped = title.strip()
    words = title.split()
    duration = track.duration

    if any(_matches_pattern(title, words, pattern) for pattern in rules.patterns):
        return False
    if duration is not None and (duration < rules.min_duration or duration > rules.max_duration):
        return False
    if len(stripped) <= 2 or _is_numeric_title(stripped):
        return False
    if any(marker in title for marker in rules.parenthetical_markers):
        return False
    if (
        rules.short_marker
        and rules.short_marker in title
        and duration is not None
        and duration < rules.short_marker_max_duration
    ):
        return False
    if _is_track_number_title(title):
        return False
    return True


def matches_genre_patterns(track: Track, patterns: Sequence[str]) -> bool:
    """True when any genre tag contains any pattern (case-insensitive)."""
    genres = track.all_genres()
    lowered = [p.lower() for p in patterns]
    return any(p in genre for genre in genres for p in lowered)


def play_count_threshold(play_filter: Optional[PlayCountFilter], pool: Sequence[Track]) -> Optional[int]:
    """
    Percentile cut-off over the whole pool.

    Counts are sorted ascending (absent counts as 0). Bottom uses index
    ``int(percent * N)``, top uses ``int((1 - percent) * N)``, both clamped
    to the last element. Returns None for non-percentile filters or an
    empty pool.
    """
    if play_filter is None or play_filter.mode != "percentile" or not pool:
        return None
    counts = np.sort(np.array([t.play_count or 0 for t in pool], dtype=np.int64))
    n = len(counts)
    if play_filter.direction == "bottom":
        idx = int(play_filter.percent * n)
    else:
        idx = int((1.0 - play_filter.percent) * n)
    idx = min(max(idx, 0), n - 1)
    return int(counts[idx])


def matches_play_count(
    track: Track,
    play_filter: Optional[PlayCountFilter],
    threshold: Optional[int] = None,
) -> bool:
    """Apply a play-count rule; ``threshold`` is required for percentile mode."""
    if play_filter is None:
        return True
    count = track.play_count or 0
    mode = play_filter.mode
    if mode == "exact":
        return count == play_filter.count
    if mode == "range":
        if play_filter.min_count is not None and count < play_filter.min_count:
            return False
        if play_filter.max_count is not None and count > play_filter.max_count:
            return False
        return True
    if mode == "compare":
        op = play_filter.operator
        if op == "above":
            return count > play_filter.threshold
        if op == "below":
            return count < play_filter.threshold
        if op == "at_least":
            return count >= play_filter.threshold
        return count <= play_filter.threshold
    # percentile
    if threshold is None:
        return False
    if play_filter.direction == "bottom":
        return count <= threshold
    return count >= threshold


def rejection_reason(
    track: Track,
    profile: TasteProfile,
    *,
    play_count_cutoff: Optional[int] = None,
    rules: NonSongRules = DEFAULT_NON_SONG_RULES,
) -> Optional[str]:
    """First failed check for ``track`` or None when it is eligible."""
    if not is_actual_song(track, rules):
        return REASON_NON_SONG
    if profile.unacceptable_genres and matches_genre_patterns(track, profile.unacceptable_genres):
        return REASON_GENRE_DENIED
    if profile.acceptable_genres is not None and not matches_genre_patterns(track, profile.acceptable_genres):
        return REASON_GENRE_NOT_ALLOWED
    if (
        profile.tempo_range is not None
        and track.tempo is not None
        and not profile.tempo_range.contains(track.tempo)
    ):
        return REASON_TEMPO
    if not matches_play_count(track, profile.play_count_filter, play_count_cutoff):
        return REASON_PLAY_COUNT
    return None


def is_eligible(
    track: Track,
    profile: TasteProfile,
    full_pool: Sequence[Track],
    *,
    rules: NonSongRules = DEFAULT_NON_SONG_RULES,
) -> bool:
    """
    Whether ``track`` may be considered for ``profile``.

    ``full_pool`` only matters for percentile play-count filters, whose
    thresholds are computed over the entire candidate pool.
    """
    cutoff = play_count_threshold(profile.play_count_filter, full_pool)
    return rejection_reason(track, profile, play_count_cutoff=cutoff, rules=rules) is None


def filter_candidates(
    *,
    tracks: Sequence[Track],
    profile: TasteProfile,
    rules: NonSongRules = DEFAULT_NON_SONG_RULES,
) -> FilterResult:
    """
    Keep the eligible tracks of a pool.

    Args:
        tracks: Full candidate pool
        profile: Taste profile providing genre/tempo/play-count rules
        rules: Non-song exclusion table

    Returns:
        FilterResult with eligible tracks (input order) and rejection counts
    """
    cutoff = play_count_threshold(profile.play_count_filter, tracks)
    stats: Dict[str, Any] = {
        "input": len(tracks),
        REASON_NON_SONG: 0,
        REASON_GENRE_DENIED: 0,
        REASON_GENRE_NOT_ALLOWED: 0,
        REASON_TEMPO: 0,
        REASON_PLAY_COUNT: 0,
        "play_count_threshold": cutoff,
    }

    kept: List[Track] = []
    for track in tracks:
        reason = rejection_reason(track, profile, play_count_cutoff=cutoff, rules=rules)
        if reason is None:
            kept.append(track)
        else:
            stats[reason] += 1

    stats["kept"] = len(kept)
    logger.info(
        "Filter [%s]: %d -> %d tracks (non_song=%d denied=%d not_allowed=%d tempo=%d play_count=%d)",
        profile.name,
        len(tracks),
        len(kept),
        stats[REASON_NON_SONG],
        stats[REASON_GENRE_DENIED],
        stats[REASON_GENRE_NOT_ALLOWED],
        stats[REASON_TEMPO],
        stats[REASON_PLAY_COUNT],
    )
    return FilterResult(filtered_tracks=kept, stats=stats)
