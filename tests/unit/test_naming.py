"""Tests for playlist title generation."""
import pytest

from daylist.models import PlaylistMetrics
from daylist.playlist.config import NamingConfig
from daylist.playlist.metrics import compute_metrics
from daylist.playlist.naming import era_label, generate_name, tempo_mood


class TestTempoMood:
    """Tests for tempo_mood."""

    @pytest.mark.parametrize("tempo,mood", [
        (70, "mellow"),
        (100, "laid-back"),
        (120, "groovy"),
        (140, "upbeat"),
        (170, "high-energy"),
    ])
    def test_bands(self, track_factory, tempo, mood):
        assert tempo_mood(compute_metrics([track_factory("1", tempo=tempo)])) == mood

    def test_unknown_tempo(self):
        assert tempo_mood(PlaylistMetrics()) is None


class TestEraLabel:
    """Tests for era_label."""

    @pytest.mark.parametrize("span,label", [
        ((1985, 1989), "80s"),
        ((1965, 1983), "70s"),
        ((2001, 2005), "2000s"),
        ((2020, 2021), "2020s"),
        ((1995, 2010), None),
        (None, None),
    ])
    def test_labels(self, span, label):
        assert era_label(span) == label


class TestGenerateName:
    """Tests for generate_name."""

    def test_full_title(self, track_factory, now):
        tracks = [track_factory(str(i), tempo=120, year=2020 + i % 2) for i in range(4)]
        name = generate_name("Daylist: Chill", compute_metrics(tracks), now=now)
        assert name == "daylist: chill groovy rock 2020s sunday"

    def test_descriptor_when_no_genre_dominates(self, track_factory, now):
        genres = ("Rock", "Jazz", "Pop", "Folk", "Soul")
        tracks = [track_factory(str(i), genres=(g,), year=None) for i, g in enumerate(genres)]
        cfg = NamingConfig()
        name = generate_name("Mix", compute_metrics(tracks), now=now, cfg=cfg)
        words = name.split()
        assert words[0] == "mix"
        assert words[-1] == "sunday"
        assert any(d in words[1:] for d in cfg.descriptors)
        assert not any(g.lower() in words for g in genres)
        assert name == generate_name("Mix", compute_metrics(tracks), now=now, cfg=cfg)

    def test_empty_metrics(self, now):
        name = generate_name("Empty", PlaylistMetrics(), now=now)
        words = name.split()
        assert words[0] == "empty"
        assert words[-1] == "sunday"
        assert len(words) == 3

    def test_sections_can_be_disabled(self, track_factory, now):
        tracks = [track_factory("1", tempo=120, year=2020)]
        cfg = NamingConfig(include_mood=False, include_era=False, include_day=False)
        assert generate_name("Plain", compute_metrics(tracks), now=now, cfg=cfg) == "plain rock"

    def test_always_lowercase(self, library_pool, now):
        name = generate_name("Workout MIX", compute_metrics(library_pool), now=now)
        assert name == name.lower()
        assert name.startswith("workout mix")
