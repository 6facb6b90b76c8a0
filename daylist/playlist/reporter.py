"""
Playlist reporting module.

Renders a generated Playlist as plain text: a summary block (length,
duration, tempo, artists, era, top genres, quality sub-scores) followed by
one entry per track with the diagnostics recorded during sequencing. Used by
the CLI dry-run mode.
"""
from __future__ import annotations

from typing import List, Optional

from ..models import PICK_FALLBACK, Playlist
from .config import QualityWeights
from .scoring.quality_scoring import quality_breakdown


def format_duration(seconds: int) -> str:
    """
    Render a duration in seconds.

    Returns:
        Strings like "3m25s" or "1h02m"
    """
    seconds = max(int(seconds), 0)
    minutes, sec = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m{sec:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h{minutes:02d}m"


def _fmt_tempo(tempo: Optional[float]) -> str:
    return "?" if tempo is None else f"{tempo:.0f}"


def top_genres(playlist: Playlist, limit: int = 3) -> List[str]:
    counts = playlist.metrics.genre_counts
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [f"{genre} ({count})" for genre, count in ranked[:limit]]


def build_report(
    playlist: Playlist,
    *,
    weights: Optional[QualityWeights] = None,
    cleanup_pattern: Optional[str] = None,
) -> str:
    """
    Build the text report for one playlist.

    Args:
        playlist: Generated playlist
        weights: Quality weights; when given, weighted sub-scores are listed
        cleanup_pattern: Base-name pattern the publisher would clean up

    Returns:
        Multi-line report string
    """
    metrics = playlist.metrics
    lines: List[str] = [
        playlist.name,
        "=" * len(playlist.name),
        f"Profile: {playlist.profile_name}",
        f"Quality Score: {playlist.quality_score * 100:.1f}/100",
    ]

    if not playlist.tracks:
        lines.append("No tracks matched this profile.")
        return "\n".join(lines)

    tempo_range = (
        f"{_fmt_tempo(metrics.tempo_min)}-{_fmt_tempo(metrics.tempo_max)}"
        if metrics.tempo_min is not None else "n/a"
    )
    lines.append(
        f"Tracks: {metrics.track_count} | Duration: {format_duration(metrics.total_duration)} "
        f"| Avg BPM: {metrics.average_tempo:.1f} | BPM Range: {tempo_range}"
    )
    lines.append(f"Unique Artists: {metrics.artist_count} | Avg Plays: {metrics.average_play_count:.1f}")
    if metrics.year_span is not None:
        low, high = metrics.year_span
        lines.append(f"Era: {low}" if low == high else f"Era: {low} - {high}")
    genres = top_genres(playlist)
    if genres:
        lines.append(f"Top Genres: {', '.join(genres)}")

    if weights is not None:
        breakdown = quality_breakdown([pt.track for pt in playlist.tracks], metrics)
        lines.append(
            "Sub-scores: "
            f"artists={breakdown.artist_diversity:.2f}x{weights.artist_diversity:.2f} "
            f"tempo={breakdown.tempo_smoothness:.2f}x{weights.tempo_smoothness:.2f} "
            f"genre={breakdown.genre_coherence:.2f}x{weights.genre_coherence:.2f} "
            f"popularity={breakdown.popularity_balance:.2f}x{weights.popularity_balance:.2f} "
            f"era={breakdown.era_cohesion:.2f}x{weights.era_cohesion:.2f}"
        )

    if cleanup_pattern:
        lines.append(f"Would replace playlists matching: '{cleanup_pattern}'")

    lines.append("")
    for position, pt in enumerate(playlist.tracks, start=1):
        track = pt.track
        marker = " [fallback]" if pt.reason == PICK_FALLBACK else ""
        favorite = " *" if track.favorite else ""
        lines.append(f"{position:>3}. \"{track.title}\" by {track.artist}{favorite}{marker}")
        lines.append(
            f"     Album: {track.album or '-'} | Genres: {', '.join(track.all_genres()) or '-'} "
            f"| BPM: {_fmt_tempo(track.tempo)} | Duration: {track.duration if track.duration is not None else '?'}s "
            f"| ID: {track.id}"
        )
        lines.append(
            f"     transition={pt.transition_score:.3f} contribution={pt.quality_contribution:+.3f} "
            f"preference={pt.preference:.2f} plays={track.play_count if track.play_count is not None else '-'}"
        )
    return "\n".join(lines)
