from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..logging_utils import format_count, stage_timer
from ..models import Playlist, Track
from .config import NamingConfig, SequenceConfig, TasteProfile, profile_summary
from .constructor import construct_playlist
from .filtering import DEFAULT_NON_SONG_RULES, NonSongRules, filter_candidates
from .metrics import compute_metrics
from .naming import generate_name
from .preference import rank_candidates
from .scoring.quality_scoring import score_quality

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    playlist: Playlist
    stats: Dict[str, Any]


def run_generation(
    tracks: Sequence[Track],
    profile: TasteProfile,
    *,
    now: datetime,
    sequence_cfg: Optional[SequenceConfig] = None,
    naming_cfg: Optional[NamingConfig] = None,
    rules: NonSongRules = DEFAULT_NON_SONG_RULES,
    target_length: Optional[int] = None,
    name: Optional[str] = None,
) -> GenerationResult:
    """
    Filter, rank, sequence, measure and name one playlist.

    Args:
        tracks: Full candidate pool (never mutated)
        profile: Taste profile
        now: Injected current time (recency, cooldown, weekday in the name)
        sequence_cfg: Builder configuration
        naming_cfg: Title configuration
        rules: Non-song exclusion table
        target_length: Overrides the profile's target length
        name: Use this title instead of generating one

    Returns:
        GenerationResult with the Playlist and per-stage stats
    """
    logger.debug("Profile '%s' settings: %s", profile.name, profile_summary(profile))

    with stage_timer(f"Filtering [{profile.name}]", logger):
        filtered = filter_candidates(tracks=tracks, profile=profile, rules=rules)

    with stage_timer(f"Preference ranking [{profile.name}]", logger):
        ranked = rank_candidates(filtered.filtered_tracks, profile.preference_weights, now=now)

    with stage_timer(f"Sequencing [{profile.name}]", logger):
        sequence = construct_playlist(
            candidates=ranked,
            profile=profile,
            now=now,
            cfg=sequence_cfg,
            target_length=target_length,
        )

    ordered = [pt.track for pt in sequence.tracks]
    metrics = compute_metrics(ordered)
    quality = score_quality(ordered, metrics, profile.quality_weights)
    title = name or generate_name(profile.name, metrics, now=now, cfg=naming_cfg)

    playlist = Playlist(
        name=title,
        tracks=tuple(sequence.tracks),
        quality_score=quality,
        metrics=metrics,
        profile_name=profile.name,
    )

    target = sequence.stats["target_length"]
    if len(playlist) < target:
        logger.warning(
            "Playlist '%s' has %s of %d requested (%s)",
            title,
            format_count(len(playlist), "track"),
            target,
            sequence.stats["termination"],
        )
    else:
        logger.info("Playlist '%s': %s, quality=%.3f", title, format_count(len(playlist), "track"), quality)

    stats = {
        "filter": filtered.stats,
        "sequence": sequence.stats,
        "quality": quality,
    }
    return GenerationResult(playlist=playlist, stats=stats)


def generate_playlist(
    tracks: Sequence[Track],
    profile: TasteProfile,
    *,
    now: datetime,
    sequence_cfg: Optional[SequenceConfig] = None,
    naming_cfg: Optional[NamingConfig] = None,
    rules: NonSongRules = DEFAULT_NON_SONG_RULES,
    target_length: Optional[int] = None,
) -> Playlist:
    """Generate one playlist; see run_generation for the arguments."""
    return run_generation(
        tracks,
        profile,
        now=now,
        sequence_cfg=sequence_cfg,
        naming_cfg=naming_cfg,
        rules=rules,
        target_length=target_length,
    ).playlist
