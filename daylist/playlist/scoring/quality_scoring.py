"""
Playlist Quality Scoring
========================

Turns PlaylistMetrics into one number in [0, 1].

Five sub-scores each describe how strongly a track set exhibits a
characteristic (artist diversity, tempo smoothness, genre coherence,
popularity balance, era cohesion). The profile's QualityWeights decide how
much each characteristic is wanted; the final score is their weighted mean.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

import numpy as np

from ...models import PlaylistMetrics, Track
from ..config import QualityWeights

NEUTRAL = 0.5


@dataclass(frozen=True)
class QualityBreakdown:
    """Unweighted sub-scores, each in [0, 1]."""
    artist_diversity: float
    tempo_smoothness: float
    genre_coherence: float
    popularity_balance: float
    era_cohesion: float

    def weighted_mean(self, weights: QualityWeights) -> float:
        total_weight = weights.total
        if total_weight <= 0:
            return NEUTRAL
        total = (
            weights.artist_diversity * self.artist_diversity
            + weights.tempo_smoothness * self.tempo_smoothness
            + weights.genre_coherence * self.genre_coherence
            + weights.popularity_balance * self.popularity_balance
            + weights.era_cohesion * self.era_cohesion
        )
        return total / total_weight


def artist_diversity_score(metrics: PlaylistMetrics) -> float:
    """Distinct artists over track count."""
    if metrics.track_count == 0:
        return 0.0
    return metrics.artist_count / metrics.track_count


def genre_coherence_score(genre_counts: Mapping[str, int]) -> float:
    """
    1 - normalized Shannon entropy of the genre histogram.

    One genre scores 1.0; an even n-way split scores 0. Neutral without data.
    """
    counts = [c for c in genre_counts.values() if c > 0]
    if not counts:
        return NEUTRAL
    if len(counts) == 1:
        return 1.0

    probs = np.array(counts, dtype=float)
    probs /= probs.sum()
    entropy = float(-(probs * np.log2(probs)).sum())
    normalized = entropy / math.log2(len(counts))
    return min(max(1.0 - normalized, 0.0), 1.0)


def era_cohesion_score(year_span: Optional[Tuple[int, int]]) -> float:
    """Piecewise score of the release-year span."""
    if year_span is None:
        return NEUTRAL
    span = year_span[1] - year_span[0]
    if span <= 2:
        return 1.0
    if span <= 10:
        return 0.8 - (span - 2) / 8.0 * 0.3
    if span <= 20:
        return 0.5 - (span - 10) / 10.0 * 0.3
    return max(0.0, 0.2 - (span - 20) / 50.0 * 0.2)


def popularity_balance_score(tracks: Sequence[Track]) -> float:
    """
    Score the coefficient of variation of known play counts.

    Uniform popularity scores low, a moderate spread (CV 0.3 to 1.0) scores
    highest and extreme spreads fall off again. Fewer than two counts, or a
    zero mean, is neutral.
    """
    counts = np.array([t.play_count for t in tracks if t.play_count is not None], dtype=float)
    if counts.size < 2:
        return NEUTRAL
    mean = float(counts.mean())
    if mean <= 0:
        return NEUTRAL
    cv = float(counts.std()) / mean
    if cv <= 0.3:
        return cv / 0.3 * 0.5
    if cv <= 1.0:
        return 0.5 + (cv - 0.3) / 0.7 * 0.5
    return min(max(2.0 - cv, 0.0), 1.0)


def tempo_step_smoothness(delta: float) -> float:
    """Smoothness of a single tempo change (absolute BPM difference)."""
    delta = abs(delta)
    if delta <= 5:
        return 1.0
    if delta <= 15:
        return 1.0 - (delta - 5) / 10.0 * 0.3
    if delta <= 30:
        return 0.7 - (delta - 15) / 15.0 * 0.4
    return max(0.0, 0.3 - (delta - 30) / 70.0 * 0.3)


def tempo_smoothness_score(tracks: Sequence[Track]) -> float:
    """
    Mean step smoothness over adjacent tracks whose tempos are both known.

    A pair with an unknown tempo on either side is not scored. Neutral when
    no pair qualifies.
    """
    steps = [
        tempo_step_smoothness(b.tempo - a.tempo)
        for a, b in zip(tracks, tracks[1:])
        if a.tempo is not None and b.tempo is not None
    ]
    if not steps:
        return NEUTRAL
    return float(np.mean(steps))


def quality_breakdown(tracks: Sequence[Track], metrics: PlaylistMetrics) -> QualityBreakdown:
    return QualityBreakdown(
        artist_diversity=artist_diversity_score(metrics),
        tempo_smoothness=tempo_smoothness_score(tracks),
        genre_coherence=genre_coherence_score(metrics.genre_counts),
        popularity_balance=popularity_balance_score(tracks),
        era_cohesion=era_cohesion_score(metrics.year_span),
    )


def score_quality(tracks: Sequence[Track], metrics: PlaylistMetrics, weights: QualityWeights) -> float:
    """
    Weighted mean of the sub-scores.

    Args:
        tracks: Ordered tracks (order matters for tempo smoothness)
        metrics: compute_metrics(tracks)
        weights: Profile quality weights

    Returns:
        Score in [0, 1]; 0.0 for an empty set, 0.5 when every weight is zero
    """
    if not tracks:
        return 0.0
    return quality_breakdown(tracks, metrics).weighted_mean(weights)
