"""
Taste profile and engine configuration types.

Profiles are loaded once per run (see daylist.config_loader) and are immutable
afterwards. ``from_dict`` constructors accept the field names used in profile
files and fill anything missing from the module defaults below.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

PlayCountMode = Literal["exact", "range", "compare", "percentile"]
CompareOperator = Literal["above", "below", "at_least", "at_most"]
PercentileDirection = Literal["top", "bottom"]
ExhaustionPolicy = Literal["strict", "fallback"]

DEFAULT_TARGET_LENGTH = 20

_OPERATOR_ALIASES = {
    ">": "above",
    "gt": "above",
    "above": "above",
    "<": "below",
    "lt": "below",
    "below": "below",
    ">=": "at_least",
    "gte": "at_least",
    "at_least": "at_least",
    "<=": "at_most",
    "lte": "at_most",
    "at_most": "at_most",
}


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _unit_interval(name: str, value: Any) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")
    return value


def _non_negative(name: str, value: Any, cast=float):
    value = cast(value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def _genre_list(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    genres = tuple(str(v).strip().lower() for v in value if str(v).strip())
    return genres or None


@dataclass(frozen=True)
class QualityWeights:
    """
    How much a profile wants each playlist characteristic (0 = not at all).

    Weights need not sum to 1; the quality scorer takes a weighted mean.
    """
    artist_diversity: float = 0.30
    tempo_smoothness: float = 0.25
    genre_coherence: float = 0.20
    popularity_balance: float = 0.25
    era_cohesion: float = 0.20

    @property
    def total(self) -> float:
        return (
            self.artist_diversity
            + self.tempo_smoothness
            + self.genre_coherence
            + self.popularity_balance
            + self.era_cohesion
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QualityWeights":
        defaults = cls()
        return cls(
            artist_diversity=_unit_interval(
                "artist_diversity", data.get("artist_diversity", defaults.artist_diversity)),
            tempo_smoothness=_unit_interval(
                "bpm_transition_smoothness",
                data.get("bpm_transition_smoothness", data.get("tempo_smoothness", defaults.tempo_smoothness))),
            genre_coherence=_unit_interval(
                "genre_coherence", data.get("genre_coherence", defaults.genre_coherence)),
            popularity_balance=_unit_interval(
                "popularity_balance", data.get("popularity_balance", defaults.popularity_balance)),
            era_cohesion=_unit_interval(
                "era_cohesion", data.get("era_cohesion", defaults.era_cohesion)),
        )


@dataclass(frozen=True)
class TransitionRules:
    """
    Hard sequencing rules plus the preferred tempo direction.

    Attributes:
        max_bpm_jump: Largest allowed tempo change between neighbours
        preferred_bpm_change: Signed preferred change (negative slows down)
        avoid_artist_repeats_within: Artist repeat window, in tracks
        avoid_album_repeats_within: Album repeat window, in tracks
        min_days_since_last_play: Cooldown in days, None to disable
    """
    max_bpm_jump: float = 20.0
    preferred_bpm_change: float = 0.0
    avoid_artist_repeats_within: int = 3
    avoid_album_repeats_within: int = 1
    min_days_since_last_play: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransitionRules":
        defaults = cls()
        min_days = data.get("min_days_since_last_play")
        return cls(
            max_bpm_jump=_non_negative("max_bpm_jump", data.get("max_bpm_jump", defaults.max_bpm_jump)),
            preferred_bpm_change=float(data.get("preferred_bpm_change", defaults.preferred_bpm_change)),
            avoid_artist_repeats_within=_non_negative(
                "avoid_artist_repeats_within",
                data.get("avoid_artist_repeats_within", defaults.avoid_artist_repeats_within),
                int,
            ),
            avoid_album_repeats_within=_non_negative(
                "avoid_album_repeats_within",
                data.get("avoid_album_repeats_within", defaults.avoid_album_repeats_within),
                int,
            ),
            min_days_since_last_play=(
                None if min_days is None else _non_negative("min_days_since_last_play", min_days)
            ),
        )


@dataclass(frozen=True)
class PreferenceWeights:
    """Weights for the standalone preference score."""
    favorite_boost: float = 100.0
    play_count_weight: float = 20.0
    recency_penalty_weight: float = 5.0
    randomness_factor: float = 0.2
    discovery_mode: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PreferenceWeights":
        defaults = cls()
        return cls(
            favorite_boost=float(data.get("starred_boost", data.get("favorite_boost", defaults.favorite_boost))),
            play_count_weight=float(data.get("play_count_weight", defaults.play_count_weight)),
            recency_penalty_weight=float(data.get("recency_penalty_weight", defaults.recency_penalty_weight)),
            randomness_factor=_non_negative(
                "randomness_factor", data.get("randomness_factor", defaults.randomness_factor)),
            discovery_mode=bool(data.get("discovery_mode", defaults.discovery_mode)),
        )


@dataclass(frozen=True)
class TempoRange:
    """Inclusive BPM range."""
    min_bpm: float
    max_bpm: float

    def __post_init__(self) -> None:
        if self.min_bpm > self.max_bpm:
            raise ValueError(f"min_bpm {self.min_bpm} exceeds max_bpm {self.max_bpm}")

    def contains(self, tempo: float) -> bool:
        return self.min_bpm <= tempo <= self.max_bpm

    @classmethod
    def from_value(cls, value: Any) -> Optional["TempoRange"]:
        """Accept ``{min_bpm, max_bpm}`` or a two-element ``[min, max]``."""
        if value is None:
            return None
        if isinstance(value, Mapping):
            return cls(float(value["min_bpm"]), float(value["max_bpm"]))
        low, high = value
        return cls(float(low), float(high))


@dataclass(frozen=True)
class PlayCountFilter:
    """
    Optional play-count inclusion rule.

    Exactly one mode applies:
    - exact: ``count`` matches (0 also matches tracks with no count)
    - range: inclusive ``min_count``/``max_count``, either side optional
    - compare: ``operator`` against ``threshold``
    - percentile: ``direction`` top/bottom ``percent`` of the whole pool
    """
    mode: PlayCountMode
    count: Optional[int] = None
    min_count: Optional[int] = None
    max_count: Optional[int] = None
    operator: Optional[CompareOperator] = None
    threshold: Optional[int] = None
    direction: Optional[PercentileDirection] = None
    percent: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["PlayCountFilter"]:
        if not data:
            return None
        mode = str(data.get("mode", "")).lower()
        if mode == "exact":
            if data.get("count") is None:
                raise ValueError("play_count_filter mode 'exact' requires 'count'")
            return cls(mode="exact", count=_non_negative("count", data["count"], int))
        if mode == "range":
            low = data.get("min", data.get("min_count"))
            high = data.get("max", data.get("max_count"))
            if low is None and high is None:
                raise ValueError("play_count_filter mode 'range' requires 'min' and/or 'max'")
            if low is not None and high is not None and int(low) > int(high):
                raise ValueError(f"play_count_filter range min {low} exceeds max {high}")
            return cls(
                mode="range",
                min_count=None if low is None else int(low),
                max_count=None if high is None else int(high),
            )
        if mode == "compare":
            operator = _OPERATOR_ALIASES.get(str(data.get("operator", "")).lower())
            if operator is None or data.get("threshold") is None:
                raise ValueError(
                    "play_count_filter mode 'compare' requires 'operator' (>, <, >=, <=) and 'threshold'"
                )
            return cls(mode="compare", operator=operator, threshold=int(data["threshold"]))
        if mode == "percentile":
            direction = str(data.get("direction", "")).lower()
            if direction not in ("top", "bottom"):
                raise ValueError("play_count_filter mode 'percentile' requires direction 'top' or 'bottom'")
            percent = float(data.get("percent", 0))
            # 10 means 10%
            if percent > 1.0:
                percent /= 100.0
            if not 0.0 < percent <= 1.0:
                raise ValueError(f"play_count_filter percent must be in (0, 1], got {data.get('percent')}")
            return cls(mode="percentile", direction=direction, percent=percent)
        raise ValueError(f"Unknown play_count_filter mode: {data.get('mode')!r}")


@dataclass(frozen=True)
class TasteProfile:
    """A named playlist recipe."""
    name: str
    acceptable_genres: Optional[Tuple[str, ...]] = None
    unacceptable_genres: Optional[Tuple[str, ...]] = None
    tempo_range: Optional[TempoRange] = None
    quality_weights: QualityWeights = field(default_factory=QualityWeights)
    transition_rules: TransitionRules = field(default_factory=TransitionRules)
    preference_weights: PreferenceWeights = field(default_factory=PreferenceWeights)
    play_count_filter: Optional[PlayCountFilter] = None
    target_length: Optional[int] = None

    @property
    def effective_target_length(self) -> int:
        return DEFAULT_TARGET_LENGTH if self.target_length is None else self.target_length

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TasteProfile":
        if not isinstance(data, Mapping):
            raise ValueError(f"Profile entry must be a mapping, got {type(data).__name__}")
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Profile is missing 'name'")

        target_length = data.get("target_length")
        if target_length is not None:
            target_length = _non_negative("target_length", target_length, int)

        return cls(
            name=name,
            acceptable_genres=_genre_list(data.get("acceptable_genres")),
            unacceptable_genres=_genre_list(data.get("unacceptable_genres")),
            tempo_range=TempoRange.from_value(data.get("bpm_thresholds", data.get("tempo_range"))),
            quality_weights=QualityWeights.from_dict(_section(data, "quality_weights")),
            transition_rules=TransitionRules.from_dict(_section(data, "transition_rules")),
            preference_weights=PreferenceWeights.from_dict(_section(data, "preference_weights")),
            play_count_filter=PlayCountFilter.from_dict(data.get("play_count_filter")),
            target_length=target_length,
        )


@dataclass(frozen=True)
class SequenceConfig:
    """
    Knobs of the greedy sequence builder.

    Attributes:
        scan_limit: Constraint-eligible candidates examined per position
            (None scans the whole remaining pool)
        quality_share: Weight of hypothetical quality in the step score; the
            transition score gets the rest
        exhaustion_policy: "strict" stops when nothing eligible remains,
            "fallback" places the top-preference remaining track anyway
        max_iterations_factor: Loop cap as a multiple of the target length
    """
    scan_limit: Optional[int] = 10
    quality_share: float = 0.7
    exhaustion_policy: ExhaustionPolicy = "strict"
    max_iterations_factor: int = 4

    def __post_init__(self) -> None:
        if self.scan_limit is not None and self.scan_limit < 1:
            raise ValueError(f"scan_limit must be >= 1 or None, got {self.scan_limit}")
        if not 0.0 <= self.quality_share <= 1.0:
            raise ValueError(f"quality_share must be within [0, 1], got {self.quality_share}")
        if self.exhaustion_policy not in ("strict", "fallback"):
            raise ValueError(f"Unknown exhaustion_policy: {self.exhaustion_policy!r}")
        if self.max_iterations_factor < 1:
            raise ValueError("max_iterations_factor must be >= 1")

    @property
    def transition_share(self) -> float:
        return 1.0 - self.quality_share


@dataclass(frozen=True)
class NamingConfig:
    """
    Title composition settings.

    Attributes:
        dominance_threshold: Share of tracks a genre needs to be named
        include_mood: Add a tempo mood word
        include_era: Add an era word when the year span is plausible
        include_day: Add the weekday of the generation time
        descriptors: Pool used when no genre dominates
    """
    dominance_threshold: float = 0.4
    include_mood: bool = True
    include_era: bool = True
    include_day: bool = True
    descriptors: Tuple[str, ...] = ("mix", "blend", "selection", "rotation", "medley")

    def __post_init__(self) -> None:
        if not 0.0 < self.dominance_threshold <= 1.0:
            raise ValueError(f"dominance_threshold must be in (0, 1], got {self.dominance_threshold}")
        if not self.descriptors:
            raise ValueError("descriptors must not be empty")


def profile_summary(profile: TasteProfile) -> Dict[str, Any]:
    """Compact dict of the settings worth logging."""
    rules = profile.transition_rules
    return {
        "target_length": profile.effective_target_length,
        "genres_allowed": list(profile.acceptable_genres or ()),
        "genres_denied": list(profile.unacceptable_genres or ()),
        "tempo_range": (
            None if profile.tempo_range is None
            else [profile.tempo_range.min_bpm, profile.tempo_range.max_bpm]
        ),
        "max_bpm_jump": rules.max_bpm_jump,
        "artist_window": rules.avoid_artist_repeats_within,
        "album_window": rules.avoid_album_repeats_within,
        "discovery": profile.preference_weights.discovery_mode,
    }
