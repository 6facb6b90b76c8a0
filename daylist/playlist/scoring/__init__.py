"""
Scoring Module for Daylist Playlists
====================================

Public API:
-----------
Quality Scoring:
    score_quality()
    quality_breakdown()

Transition Scoring:
    score_transition()

Constraints:
    find_violation()
"""

from .quality_scoring import (
    QualityBreakdown,
    quality_breakdown,
    score_quality,
)
from .transition_scoring import (
    score_transition,
)
from .constraints import (
    VIOLATION_ALBUM,
    VIOLATION_ARTIST,
    VIOLATION_COOLDOWN,
    VIOLATION_TEMPO,
    find_violation,
)

__all__ = [
    # Quality scoring
    "QualityBreakdown",
    "quality_breakdown",
    "score_quality",
    # Transition scoring
    "score_transition",
    # Constraints
    "VIOLATION_ALBUM",
    "VIOLATION_ARTIST",
    "VIOLATION_COOLDOWN",
    "VIOLATION_TEMPO",
    "find_violation",
]
