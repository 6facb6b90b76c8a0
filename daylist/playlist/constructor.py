from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..models import PICK_BEST, PICK_FALLBACK, PlaylistTrack, ScoredCandidate, Track
from .config import SequenceConfig, TasteProfile
from .metrics import compute_metrics
from .scoring.constraints import find_violation
from .scoring.quality_scoring import score_quality
from .scoring.transition_scoring import score_transition

logger = logging.getLogger(__name__)

TERMINATION_TARGET = "target_reached"
TERMINATION_POOL_EXHAUSTED = "pool_exhausted"
TERMINATION_NO_ELIGIBLE = "no_eligible_candidate"
TERMINATION_ITERATION_CAP = "iteration_cap"


@dataclass(frozen=True)
class SequenceResult:
    """Ordered placements plus construction diagnostics."""
    tracks: List[PlaylistTrack]
    stats: Dict[str, Any] = field(default_factory=dict)


def _prefix_quality(tracks: Sequence[Track], profile: TasteProfile) -> float:
    if not tracks:
        return 0.0
    return score_quality(tracks, compute_metrics(tracks), profile.quality_weights)


def _step_score(
    placed: List[Track],
    candidate: Track,
    profile: TasteProfile,
    cfg: SequenceConfig,
) -> tuple:
    transition = score_transition(placed, candidate, profile)
    hypothetical = _prefix_quality(placed + [candidate], profile)
    combined = cfg.quality_share * hypothetical + cfg.transition_share * transition
    return combined, transition


def construct_playlist(
    *,
    candidates: Sequence[ScoredCandidate],
    profile: TasteProfile,
    now: datetime,
    cfg: Optional[SequenceConfig] = None,
    target_length: Optional[int] = None,
) -> SequenceResult:
    """
    Greedy constrained sequencing over a preference-sorted pool.

    Each position scans the remaining candidates in preference order. Hard
    constraint violators are skipped without scoring; the first
    ``cfg.scan_limit`` eligible candidates are scored by
    ``quality_share * hypothetical_quality + (1 - quality_share) * transition``
    and the highest wins (ties go to the earlier, higher-preference candidate).

    When no remaining candidate is eligible, the "strict" policy stops and the
    "fallback" policy places the top-preference remaining candidate tagged
    PICK_FALLBACK, ignoring constraints for that one position.

    Args:
        candidates: Eligible tracks sorted by descending preference
        profile: Taste profile (rules and weights)
        now: Injected current time for cooldown checks
        cfg: Builder configuration (defaults to SequenceConfig())
        target_length: Overrides the profile's target length

    Returns:
        SequenceResult; fewer tracks than requested is a normal outcome
    """
    cfg = cfg or SequenceConfig()
    target = profile.effective_target_length if target_length is None else max(target_length, 0)
    rules = profile.transition_rules

    remaining: List[ScoredCandidate] = list(candidates)
    placed: List[PlaylistTrack] = []
    placed_tracks: List[Track] = []
    rejections: Counter = Counter()
    max_iterations = max(1, cfg.max_iterations_factor * target)
    iterations = 0
    termination = TERMINATION_TARGET

    while len(placed) < target and remaining:
        if iterations >= max_iterations:
            termination = TERMINATION_ITERATION_CAP
            break
        iterations += 1

        current_quality = _prefix_quality(placed_tracks, profile)
        best_idx: Optional[int] = None
        best_combined = 0.0
        best_transition = 0.0
        scored = 0

        for idx, candidate in enumerate(remaining):
            if cfg.scan_limit is not None and scored >= cfg.scan_limit:
                break
            violation = find_violation(placed_tracks, candidate.track, rules, now=now)
            if violation is not None:
                rejections[violation] += 1
                continue
            scored += 1
            combined, transition = _step_score(placed_tracks, candidate.track, profile, cfg)
            if best_idx is None or combined > best_combined:
                best_idx = idx
                best_combined = combined
                best_transition = transition

        if best_idx is None:
            if cfg.exhaustion_policy != "fallback":
                termination = TERMINATION_NO_ELIGIBLE
                logger.debug(
                    "Position %d: no eligible candidate among %d remaining, stopping",
                    len(placed) + 1,
                    len(remaining),
                )
                break
            best_idx = 0
            best_combined, best_transition = _step_score(placed_tracks, remaining[0].track, profile, cfg)
            reason = PICK_FALLBACK
        else:
            reason = PICK_BEST

        chosen = remaining.pop(best_idx)
        placed.append(PlaylistTrack(
            track=chosen.track,
            transition_score=best_transition,
            quality_contribution=best_combined - current_quality,
            reason=reason,
            preference=chosen.preference,
        ))
        placed_tracks.append(chosen.track)
        logger.debug(
            "Position %d: %s - %s (combined=%.3f transition=%.3f scanned=%d reason=%s)",
            len(placed),
            chosen.track.artist,
            chosen.track.title,
            best_combined,
            best_transition,
            scored,
            reason,
        )
    else:
        termination = TERMINATION_TARGET if len(placed) >= target else TERMINATION_POOL_EXHAUSTED

    stats: Dict[str, Any] = {
        "target_length": target,
        "placed": len(placed),
        "pool_size": len(candidates),
        "iterations": iterations,
        "fallbacks": sum(1 for pt in placed if pt.reason == PICK_FALLBACK),
        "constraint_rejections": dict(rejections),
        "termination": termination,
        "exhaustion_policy": cfg.exhaustion_policy,
    }
    return SequenceResult(tracks=placed, stats=stats)
