"""
Standalone preference scoring.

A track's preference score ignores playlist context entirely: it only looks at
favorite status, play count, how recently the track was played and a small
per-track jitter. The builder scans candidates in descending preference order.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import List, Sequence

from ..models import ScoredCandidate, Track
from .config import PreferenceWeights
from .utils import parse_days_since_played, stable_hash

logger = logging.getLogger(__name__)

# Discovery-mode play-count bonuses
DISCOVERY_UNPLAYED_BONUS = 50.0
DISCOVERY_UNKNOWN_BONUS = 25.0
DISCOVERY_LOW_PLAY_BASE = 30.0
DISCOVERY_LOW_PLAY_STEP = 5.0
DISCOVERY_LOW_PLAY_MAX = 2
DISCOVERY_DECAY_BASE = 10.0

RECENCY_DAYS_NORMAL = 7.0
RECENCY_DAYS_DISCOVERY = 3.0
DISCOVERY_RECENCY_MULTIPLIER = 2.0

JITTER_MODULUS_NORMAL = 10
JITTER_MODULUS_DISCOVERY = 20


def play_count_component(play_count, weights: PreferenceWeights) -> float:
    """Play-count contribution for either mode."""
    if weights.discovery_mode:
        if play_count is None:
            return DISCOVERY_UNKNOWN_BONUS
        if play_count <= 0:
            return DISCOVERY_UNPLAYED_BONUS
        if play_count <= DISCOVERY_LOW_PLAY_MAX:
            return DISCOVERY_LOW_PLAY_BASE - DISCOVERY_LOW_PLAY_STEP * play_count
        return DISCOVERY_DECAY_BASE - min(math.log10(play_count), 10.0) * 2.0

    if play_count is None:
        return 0.0
    return math.log10(max(play_count, 1)) * weights.play_count_weight


def recency_penalty(days_since_played, weights: PreferenceWeights) -> float:
    """Penalty (positive number) for a track played within the mode's window."""
    if days_since_played is None:
        return 0.0
    if weights.discovery_mode:
        threshold, multiplier = RECENCY_DAYS_DISCOVERY, DISCOVERY_RECENCY_MULTIPLIER
    else:
        threshold, multiplier = RECENCY_DAYS_NORMAL, weights.recency_penalty_weight
    if days_since_played >= threshold:
        return 0.0
    return (threshold - days_since_played) * multiplier


def jitter(track_id: str, weights: PreferenceWeights) -> float:
    """Deterministic per-track tie breaker."""
    modulus = JITTER_MODULUS_DISCOVERY if weights.discovery_mode else JITTER_MODULUS_NORMAL
    return (stable_hash(track_id) % modulus) * weights.randomness_factor


def score_preference(track: Track, weights: PreferenceWeights, *, now: datetime) -> float:
    """
    Preference score for one track.

    Args:
        track: Candidate track
        weights: Profile preference weights
        now: Injected current time used for the recency penalty

    Returns:
        Unbounded score; only the ordering between tracks matters
    """
    score = 0.0
    if track.favorite:
        score += weights.favorite_boost
    score += play_count_component(track.play_count, weights)
    score -= recency_penalty(parse_days_since_played(track.last_played, now), weights)
    score += jitter(track.id, weights)
    return score


def rank_candidates(
    tracks: Sequence[Track],
    weights: PreferenceWeights,
    *,
    now: datetime,
) -> List[ScoredCandidate]:
    """Score every track and sort descending; equal scores keep input order."""
    scored = [ScoredCandidate(track=t, preference=score_preference(t, weights, now=now)) for t in tracks]
    scored.sort(key=lambda c: c.preference, reverse=True)
    if scored:
        logger.debug(
            "Preference range: top=%.2f (%s) bottom=%.2f",
            scored[0].preference,
            scored[0].track.id,
            scored[-1].preference,
        )
    return scored
