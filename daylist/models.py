"""
Core value types shared by the selection and sequencing engine.

Tracks are immutable snapshots of library metadata. Everything the engine
derives from them (scored candidates, placed tracks, metrics, the final
playlist) is a new value; nothing here is mutated after construction.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

PICK_BEST = "best candidate"
PICK_FALLBACK = "fallback"


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Track:
    """
    One library track.

    Attributes:
        id: Stable library identifier
        title: Track title as tagged
        artist: Artist display name
        album: Album display name
        genres: Genre tags in library order (may repeat or differ in case)
        tempo: Beats per minute, None when unknown
        duration: Length in seconds, None when unknown
        year: Release year, None when unknown
        play_count: Library play count, None when the library did not report one
        last_played: Raw last-played timestamp string, None when never played
        favorite: Whether the listener starred the track
    """
    id: str
    title: str
    artist: str = ""
    album: str = ""
    genres: Tuple[str, ...] = ()
    tempo: Optional[float] = None
    duration: Optional[int] = None
    year: Optional[int] = None
    play_count: Optional[int] = None
    last_played: Optional[str] = None
    favorite: bool = False

    def all_genres(self) -> List[str]:
        """Lowercased, de-duplicated and sorted genre tags."""
        return sorted({g.strip().lower() for g in self.genres if g and g.strip()})

    @classmethod
    def from_subsonic(cls, record: Dict[str, Any]) -> "Track":
        """
        Build a Track from a Subsonic/OpenSubsonic ``song`` entry.

        The single ``genre`` field and the ``genres`` list are merged. A bpm of
        0 is how servers report "not analysed", so it maps to an unknown tempo.
        ``starred`` is a timestamp when present; any value marks a favorite.
        """
        genres: List[str] = []
        if record.get("genre"):
            genres.append(str(record["genre"]))
        for entry in record.get("genres") or []:
            name = entry.get("name") if isinstance(entry, dict) else entry
            if name:
                genres.append(str(name))

        tempo = _optional_int(record.get("bpm"))
        return cls(
            id=str(record["id"]),
            title=str(record.get("title") or ""),
            artist=str(record.get("artist") or ""),
            album=str(record.get("album") or ""),
            genres=tuple(genres),
            tempo=float(tempo) if tempo else None,
            duration=_optional_int(record.get("duration")),
            year=_optional_int(record.get("year")) or None,
            play_count=_optional_int(record.get("playCount")),
            last_played=record.get("played") or None,
            favorite=bool(record.get("starred")),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """A track paired with its standalone preference score."""
    track: Track
    preference: float


@dataclass(frozen=True)
class PlaylistTrack:
    """
    A placed track with the diagnostics recorded when it was appended.

    Attributes:
        track: The placed track
        transition_score: Fit against the sequence placed before it
        quality_contribution: Combined step score minus the prefix quality
        reason: PICK_BEST or PICK_FALLBACK
        preference: Standalone preference score of the track
    """
    track: Track
    transition_score: float
    quality_contribution: float
    reason: str = PICK_BEST
    preference: float = 0.0


@dataclass(frozen=True)
class PlaylistMetrics:
    """Aggregate description of a set of tracks."""
    total_duration: int = 0
    average_tempo: float = 0.0
    tempo_min: Optional[float] = None
    tempo_max: Optional[float] = None
    genre_counts: Dict[str, int] = field(default_factory=dict)
    artist_count: int = 0
    year_span: Optional[Tuple[int, int]] = None
    average_play_count: float = 0.0
    track_count: int = 0

    def dominant_genre(self) -> Optional[Tuple[str, int]]:
        """Most frequent genre; ties go to the alphabetically first name."""
        if not self.genre_counts:
            return None
        return min(self.genre_counts.items(), key=lambda item: (-item[1], item[0]))


@dataclass(frozen=True)
class Playlist:
    """Result of one generation call."""
    name: str
    tracks: Tuple[PlaylistTrack, ...]
    quality_score: float
    metrics: PlaylistMetrics
    profile_name: str

    def __len__(self) -> int:
        return len(self.tracks)

    @property
    def track_ids(self) -> List[str]:
        """Ordered track identifiers, the contract handed to publishers."""
        return [pt.track.id for pt in self.tracks]

    @property
    def fallback_count(self) -> int:
        return sum(1 for pt in self.tracks if pt.reason == PICK_FALLBACK)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready rendering."""
        metrics = asdict(self.metrics)
        if self.metrics.year_span is not None:
            metrics["year_span"] = list(self.metrics.year_span)
        return {
            "name": self.name,
            "profile": self.profile_name,
            "track_ids": self.track_ids,
            "quality_score": round(self.quality_score, 6),
            "metrics": metrics,
            "tracks": [
                {
                    "id": pt.track.id,
                    "title": pt.track.title,
                    "artist": pt.track.artist,
                    "album": pt.track.album,
                    "tempo": pt.track.tempo,
                    "genres": pt.track.all_genres(),
                    "transition_score": round(pt.transition_score, 6),
                    "quality_contribution": round(pt.quality_contribution, 6),
                    "preference": round(pt.preference, 6),
                    "reason": pt.reason,
                }
                for pt in self.tracks
            ],
        }
