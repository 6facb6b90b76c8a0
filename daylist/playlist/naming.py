"""Playlist title composition from final metrics."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from ..models import PlaylistMetrics
from ..string_utils import title_case
from .config import NamingConfig
from .utils import stable_hash

# (upper bound exclusive, mood word) by mean tempo
_TEMPO_MOODS: Tuple[Tuple[float, str], ...] = (
    (90.0, "mellow"),
    (110.0, "laid-back"),
    (130.0, "groovy"),
    (150.0, "upbeat"),
)
_FASTEST_MOOD = "high-energy"

# Decades before this tolerate a wider year span when naming an era
_OLD_ERA_CUTOFF = 1980
_MAX_SPAN_OLD = 20
_MAX_SPAN_RECENT = 10


def tempo_mood(metrics: PlaylistMetrics) -> Optional[str]:
    if metrics.tempo_min is None:
        return None
    for bound, mood in _TEMPO_MOODS:
        if metrics.average_tempo < bound:
            return mood
    return _FASTEST_MOOD


def era_label(year_span: Optional[Tuple[int, int]]) -> Optional[str]:
    """
    Decade label such as "80s" or "2010s", or None when the span is too wide
    for one era to describe it.
    """
    if year_span is None:
        return None
    low, high = year_span
    decade = ((low + high) // 2) // 10 * 10
    max_span = _MAX_SPAN_OLD if decade < _OLD_ERA_CUTOFF else _MAX_SPAN_RECENT
    if high - low > max_span:
        return None
    if decade < 2000:
        return f"{decade % 100:02d}s"
    return f"{decade}s"


def dominant_genre_label(metrics: PlaylistMetrics, threshold: float) -> Optional[str]:
    dominant = metrics.dominant_genre()
    if dominant is None or metrics.track_count == 0:
        return None
    genre, count = dominant
    if count / metrics.track_count < threshold:
        return None
    return title_case(genre)


def generate_name(
    base_name: str,
    metrics: PlaylistMetrics,
    *,
    now: datetime,
    cfg: Optional[NamingConfig] = None,
) -> str:
    """
    Compose "<base> <mood> <genre or descriptor> <era> <weekday>", lowercased.

    The descriptor is chosen deterministically from the base name and the
    weekday so reruns on the same day produce the same title.
    """
    cfg = cfg or NamingConfig()
    day = now.strftime("%A")
    parts: List[str] = [base_name.strip()]

    if cfg.include_mood:
        mood = tempo_mood(metrics)
        if mood:
            parts.append(mood)

    genre = dominant_genre_label(metrics, cfg.dominance_threshold)
    if genre:
        parts.append(genre)
    else:
        parts.append(cfg.descriptors[stable_hash(f"{base_name}|{day}") % len(cfg.descriptors)])

    if cfg.include_era:
        era = era_label(metrics.year_span)
        if era:
            parts.append(era)

    if cfg.include_day:
        parts.append(day)

    return " ".join(p for p in parts if p).lower()
