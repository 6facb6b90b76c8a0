"""Test configuration and fixtures."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from daylist.models import Track
from daylist.playlist.config import (
    PreferenceWeights,
    QualityWeights,
    TasteProfile,
    TransitionRules,
)

FIXED_NOW = datetime(2025, 8, 3, 12, 0, 0, tzinfo=timezone.utc)  # a Sunday


def make_track(
    track_id: str,
    title: str = "Some Song",
    artist: str = "Artist",
    album: str = "Album",
    genres=("Rock",),
    tempo=120.0,
    year=2020,
    duration=200,
    play_count=1,
    favorite: bool = False,
    last_played=None,
) -> Track:
    """Build a Track with sensible defaults for tests."""
    return Track(
        id=track_id,
        title=title,
        artist=artist,
        album=album,
        genres=tuple(genres),
        tempo=None if tempo is None else float(tempo),
        duration=duration,
        year=year,
        play_count=play_count,
        last_played=last_played,
        favorite=favorite,
    )


def _library_pool():
    rows = [
        ("1", "Song 1", "Artist A", "Album 1", "Rock", 120, 2020, 200, 5, False, None),
        ("2", "Song 2", "Artist A", "Album 2", "Rock", 125, 2021, 210, 3, False, None),
        ("3", "Song 3", "Artist B", "Album 3", "Pop", 130, 2019, 180, 7, True, None),
        ("4", "Song 4", "Artist C", "Album 4", "Jazz", 90, 2022, 240, 1, False, None),
        ("5", "Slow Song", "Artist D", "Album 5", "Ambient", 60, 2020, 300, 2, False, None),
        ("6", "Medium Song", "Artist E", "Album 6", "Indie", 120, 2021, 220, 4, False, None),
        ("7", "Fast Song", "Artist F", "Album 7", "Electronic", 180, 2019, 190, 6, False, None),
        ("8", "Rock Song 1", "Artist G", "Album 8", "Rock", 140, 2020, 200, 3, False, None),
        ("9", "Rock Song 2", "Artist H", "Album 9", "Rock", 135, 2021, 195, 4, False, None),
        ("10", "Classical", "Artist I", "Album 10", "Classical", 80, 1990, 400, 1, False, None),
        ("11", "80s Song", "Artist J", "Album 11", "Synthpop", 125, 1985, 210, 2, False, None),
        ("12", "90s Song", "Artist K", "Album 12", "Grunge", 130, 1995, 220, 3, False, None),
        ("13", "2020s Song", "Artist L", "Album 13", "Hyperpop", 160, 2023, 150, 8, False, None),
        ("14", "Hit Song", "Artist M", "Album 14", "Pop", 128, 2022, 200, 50, True, None),
        ("15", "Deep Cut", "Artist N", "Album 15", "Indie", 110, 2021, 250, 1, False, None),
        ("16", "Moderate Hit", "Artist O", "Album 16", "Rock", 140, 2020, 230, 10, False, None),
        ("17", "Recent Song", "Artist P", "Album 17", "Pop", 120, 2023, 180, 5, False, "2025-08-01T12:00:00Z"),
        ("18", "Old Song", "Artist Q", "Album 18", "Rock", 125, 2022, 200, 3, False, "2025-06-01T12:00:00Z"),
    ]
    return [
        make_track(
            track_id,
            title=title,
            artist=artist,
            album=album,
            genres=(genre,),
            tempo=tempo,
            year=year,
            duration=duration,
            play_count=plays,
            favorite=favorite,
            last_played=played,
        )
        for track_id, title, artist, album, genre, tempo, year, duration, plays, favorite, played in rows
    ]


@pytest.fixture()
def now():
    """Fixed generation time."""
    return FIXED_NOW


@pytest.fixture()
def library_pool():
    """Eighteen varied tracks covering genres, tempos, eras and play counts."""
    return _library_pool()


@pytest.fixture()
def balanced_profile():
    """Balanced profile used across engine tests."""
    return TasteProfile(
        name="Test Playlist",
        quality_weights=QualityWeights(
            artist_diversity=0.5,
            tempo_smoothness=0.5,
            genre_coherence=0.5,
            popularity_balance=0.5,
            era_cohesion=0.5,
        ),
        transition_rules=TransitionRules(
            max_bpm_jump=20,
            preferred_bpm_change=0,
            avoid_artist_repeats_within=5,
        ),
        preference_weights=PreferenceWeights(
            favorite_boost=50,
            play_count_weight=10,
            recency_penalty_weight=5,
            randomness_factor=0.1,
        ),
        target_length=10,
    )


@pytest.fixture()
def track_factory():
    """Factory building Tracks with test defaults."""
    return make_track
