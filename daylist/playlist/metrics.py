"""
Aggregate statistics for a set of tracks.

compute_metrics() is a pure O(n) aggregation; the builder calls it for every
hypothetical prefix, so it never caches.
"""
from __future__ import annotations

from collections import Counter
from typing import Sequence

import numpy as np

from ..models import PlaylistMetrics, Track
from ..string_utils import normalize_key


def distinct_artist_count(tracks: Sequence[Track]) -> int:
    """Distinct non-blank artists, compared by normalized key."""
    return len({key for key in (normalize_key(t.artist) for t in tracks) if key})


def compute_metrics(tracks: Sequence[Track]) -> PlaylistMetrics:
    """
    Summarize ``tracks``.

    Empty input yields the all-zero metrics. Each track contributes a genre
    at most once to the histogram. The year span is None when no track has
    a year; the mean play count divides known counts by the track count.
    """
    if not tracks:
        return PlaylistMetrics()

    tempos = np.array([t.tempo for t in tracks if t.tempo is not None], dtype=float)
    years = [t.year for t in tracks if t.year is not None]
    play_total = sum(t.play_count for t in tracks if t.play_count is not None)

    genre_counts: Counter = Counter()
    for track in tracks:
        genre_counts.update(track.all_genres())

    return PlaylistMetrics(
        total_duration=int(sum(t.duration for t in tracks if t.duration is not None)),
        average_tempo=float(tempos.mean()) if tempos.size else 0.0,
        tempo_min=float(tempos.min()) if tempos.size else None,
        tempo_max=float(tempos.max()) if tempos.size else None,
        genre_counts=dict(genre_counts),
        artist_count=distinct_artist_count(tracks),
        year_span=(min(years), max(years)) if years else None,
        average_play_count=play_total / len(tracks),
        track_count=len(tracks),
    )
