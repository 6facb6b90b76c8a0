from .config import (
    DEFAULT_TARGET_LENGTH,
    NamingConfig,
    PlayCountFilter,
    PreferenceWeights,
    QualityWeights,
    SequenceConfig,
    TasteProfile,
    TempoRange,
    TransitionRules,
)
from .constructor import SequenceResult, construct_playlist
from .pipeline import GenerationResult, generate_playlist, run_generation

from . import filtering
from . import preference
from . import metrics
from . import naming
from . import scoring
from . import reporter
from . import utils

__all__ = [
    # Configuration
    "DEFAULT_TARGET_LENGTH",
    "NamingConfig",
    "PlayCountFilter",
    "PreferenceWeights",
    "QualityWeights",
    "SequenceConfig",
    "TasteProfile",
    "TempoRange",
    "TransitionRules",
    # Engine
    "SequenceResult",
    "construct_playlist",
    "GenerationResult",
    "generate_playlist",
    "run_generation",
    # Modules
    "filtering",
    "preference",
    "metrics",
    "naming",
    "scoring",
    "reporter",
    "utils",
]
