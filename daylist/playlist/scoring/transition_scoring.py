"""
Transition Scoring
==================

How well a candidate follows the sequence built so far.

Two components, averaged:
- Tempo direction: the candidate's BPM change from the last placed track
  against the profile's preferred signed change
- Genre compatibility: overlap with the genre histogram of the sequence so
  far, rewarded or penalized according to the genre-coherence weight
"""
from __future__ import annotations

import math
from collections import Counter
from typing import Optional, Sequence

from ...models import Track
from ..config import TasteProfile, TransitionRules

NEUTRAL = 0.5


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def tempo_direction_score(last: Track, candidate: Track, rules: TransitionRules) -> float:
    """
    Score the tempo change ``candidate.tempo - last.tempo``.

    - exact preferred change: 1.0
    - same direction as preferred: 0.5 to 0.9 by closeness to the preferred
      change, measured against max_bpm_jump
    - opposite direction: 0.4 down to 0.1 by magnitude
    - any other change with no preferred direction, or no change while a
      direction is preferred: 0.4
    - unknown tempo on either side: 0.5
    """
    if last.tempo is None or candidate.tempo is None:
        return NEUTRAL

    actual = candidate.tempo - last.tempo
    ideal = rules.preferred_bpm_change
    if math.isclose(actual, ideal, abs_tol=1e-9):
        return 1.0

    max_jump = rules.max_bpm_jump if rules.max_bpm_jump > 0 else 1.0

    if (ideal > 0 and actual > 0) or (ideal < 0 and actual < 0):
        closeness = _clamp01(1.0 - abs(actual - ideal) / max_jump)
        return 0.5 + min(closeness * 0.4, 0.4)

    if ideal == 0 or actual == 0:
        return 0.4

    return 0.4 - min(0.3 * abs(actual) / max_jump, 0.3)


def genre_compatibility_score(
    placed: Sequence[Track],
    candidate: Track,
    coherence_weight: float,
) -> float:
    """
    Score genre overlap between ``candidate`` and the sequence so far.

    Shared genre: 0.5 + 0.5 * best frequency ratio * coherence_weight, where
    the ratio is the matching genre's count over the sequence length.
    No shared genre: 0.9 - 0.8 * coherence_weight. Neutral when either side
    has no genres.
    """
    candidate_genres = candidate.all_genres()
    if not placed or not candidate_genres:
        return NEUTRAL

    histogram: Counter = Counter()
    for track in placed:
        histogram.update(track.all_genres())
    if not histogram:
        return NEUTRAL

    best: Optional[float] = None
    for genre in candidate_genres:
        if genre in histogram:
            ratio = min(histogram[genre] / len(placed), 1.0)
            best = ratio if best is None else max(best, ratio)

    if best is None:
        return 0.9 - 0.8 * coherence_weight
    return 0.5 + 0.5 * best * coherence_weight


def score_transition(placed: Sequence[Track], candidate: Track, profile: TasteProfile) -> float:
    """
    Transition fit of ``candidate`` after ``placed``, in [0, 1].

    The first track of a playlist is unconstrained and scores 0.5.
    """
    if not placed:
        return NEUTRAL
    tempo = tempo_direction_score(placed[-1], candidate, profile.transition_rules)
    genre = genre_compatibility_score(placed, candidate, profile.quality_weights.genre_coherence)
    return (tempo + genre) / 2.0
