"""Tests for track eligibility filtering."""
import pytest

from daylist.playlist.config import PlayCountFilter, TasteProfile, TempoRange
from daylist.playlist.filtering import (
    DEFAULT_NON_SONG_RULES,
    NonSongRules,
    REASON_GENRE_DENIED,
    REASON_NON_SONG,
    REASON_TEMPO,
    filter_candidates,
    is_actual_song,
    is_eligible,
    play_count_threshold,
)


class TestNonSongDetection:
    """Tests for is_actual_song."""

    @pytest.mark.parametrize("title,duration", [
        ("Interlude", 60),
        ("Intro", 30),
        ("Outro (Extended)", 45),
        ("Comedy Sketch #3", 90),
        ("Song Fragment", 25),
        ("Artist Interview", 300),
        ("Opening Monologue", 120),
        ("Spoken Word Piece", 180),
        ("Song Title (Interlude)", 60),
        ("Album Opener (Intro)", 45),
        ("Brief (Instrumental)", 60),
        ("Interlude: Night Drive", 200),
        ("Track 7", 200),
        ("12", 200),
        ("1.2-3", 200),
        ("Untitled", 200),
    ])
    def test_rejects_non_songs(self, track_factory, title, duration):
        """Known non-song titles and markers are rejected."""
        assert not is_actual_song(track_factory("x", title=title, duration=duration))

    @pytest.mark.parametrize("title,duration", [
        ("Beautiful Song", 180),
        ("Real Song Title", 210),
        ("Normal Song", 240),
        ("Song About Speaking", 180),
        ("Epic Journey (Instrumental)", 420),
    ])
    def test_accepts_real_songs(self, track_factory, title, duration):
        """Ordinary titles of normal length pass."""
        assert is_actual_song(track_factory("x", title=title, duration=duration))

    def test_interlude_rejected_at_any_duration(self, track_factory):
        for duration in (None, 45, 240, 599):
            assert not is_actual_song(track_factory("x", title="Interlude", duration=duration))

    def test_duration_bounds(self, track_factory):
        """Under 60s and over 600s are rejected; the bounds themselves pass."""
        assert not is_actual_song(track_factory("x", title="Short One", duration=15))
        assert not is_actual_song(track_factory("x", title="Long One", duration=1200))
        assert is_actual_song(track_factory("x", title="Edge Case", duration=60))
        assert is_actual_song(track_factory("x", title="Edge Case", duration=600))

    def test_unknown_duration_skips_duration_checks(self, track_factory):
        assert is_actual_song(track_factory("x", title="Mystery Length", duration=None))

    def test_rules_are_overridable(self, track_factory):
        """A custom table replaces the default patterns."""
        rules = NonSongRules(patterns=("remix",))
        assert not is_actual_song(track_factory("x", title="Club Remix", duration=200), rules)
        assert is_actual_song(track_factory("x", title="Interlude", duration=200), rules)
        assert "interlude" in DEFAULT_NON_SONG_RULES.patterns


class TestGenreAndTempoRules:
    """Tests for genre allow/deny lists and tempo range."""

    def test_allow_list_substring_match(self, track_factory):
        profile = TasteProfile(name="p", acceptable_genres=("rock",))
        pool = [track_factory("1", genres=("Indie Rock",)), track_factory("2", genres=("Jazz",))]
        assert is_eligible(pool[0], profile, pool)
        assert not is_eligible(pool[1], profile, pool)

    def test_allow_list_rejects_untagged(self, track_factory):
        profile = TasteProfile(name="p", acceptable_genres=("rock",))
        track = track_factory("1", genres=())
        assert not is_eligible(track, profile, [track])

    def test_deny_wins_over_allow(self, track_factory):
        profile = TasteProfile(name="p", acceptable_genres=("rock",), unacceptable_genres=("metal",))
        track = track_factory("1", genres=("Rock", "Metal"))
        assert not is_eligible(track, profile, [track])

    def test_genre_match_is_case_insensitive(self, track_factory):
        profile = TasteProfile(name="p", acceptable_genres=("POP",))
        track = track_factory("1", genres=("Synthpop",))
        assert is_eligible(track, profile, [track])

    def test_empty_allow_list_from_profile_file_admits_everything(self, track_factory):
        profile = TasteProfile.from_dict({"name": "p", "acceptable_genres": [], "unacceptable_genres": []})
        pool = [track_factory("1", genres=("Jazz",)), track_factory("2", genres=())]
        assert all(is_eligible(track, profile, pool) for track in pool)

    def test_tempo_range(self, track_factory):
        profile = TasteProfile(name="p", tempo_range=TempoRange(100, 150))
        slow = track_factory("1", tempo=60)
        medium = track_factory("2", tempo=120)
        fast = track_factory("3", tempo=180)
        unknown = track_factory("4", tempo=None)
        pool = [slow, medium, fast, unknown]
        assert not is_eligible(slow, profile, pool)
        assert is_eligible(medium, profile, pool)
        assert not is_eligible(fast, profile, pool)
        assert is_eligible(unknown, profile, pool)

    def test_no_rules_accepts_normal_track(self, track_factory):
        profile = TasteProfile(name="p")
        track = track_factory("1", title="Four Minutes", duration=240)
        assert is_eligible(track, profile, [track])

    def test_eligibility_is_deterministic(self, library_pool, balanced_profile):
        first = [is_eligible(t, balanced_profile, library_pool) for t in library_pool]
        second = [is_eligible(t, balanced_profile, library_pool) for t in library_pool]
        assert first == second


class TestPlayCountFilter:
    """Tests for play-count modes."""

    def _pool(self, track_factory, counts):
        return [track_factory(str(i), play_count=c) for i, c in enumerate(counts)]

    def test_exact_zero_matches_absent(self, track_factory):
        profile = TasteProfile(name="p", play_count_filter=PlayCountFilter(mode="exact", count=0))
        pool = self._pool(track_factory, [None, 0, 3])
        assert [is_eligible(t, profile, pool) for t in pool] == [True, True, False]

    def test_range_inclusive(self, track_factory):
        profile = TasteProfile(name="p", play_count_filter=PlayCountFilter(mode="range", min_count=2, max_count=5))
        pool = self._pool(track_factory, [1, 2, 5, 6])
        assert [is_eligible(t, profile, pool) for t in pool] == [False, True, True, False]

    @pytest.mark.parametrize("operator,expected", [
        ("above", [False, False, True]),
        ("below", [True, False, False]),
        ("at_least", [False, True, True]),
        ("at_most", [True, True, False]),
    ])
    def test_compare_operators(self, track_factory, operator, expected):
        play_filter = PlayCountFilter(mode="compare", operator=operator, threshold=5)
        profile = TasteProfile(name="p", play_count_filter=play_filter)
        pool = self._pool(track_factory, [4, 5, 6])
        assert [is_eligible(t, profile, pool) for t in pool] == expected

    def test_percentile_uses_whole_pool(self, track_factory):
        """Top 20% of ten counts 1..10 keeps counts >= the value at index 8."""
        pool = self._pool(track_factory, list(range(1, 11)))
        play_filter = PlayCountFilter(mode="percentile", direction="top", percent=0.2)
        assert play_count_threshold(play_filter, pool) == 9

        profile = TasteProfile(name="p", play_count_filter=play_filter)
        result = filter_candidates(tracks=pool, profile=profile)
        assert sorted(t.play_count for t in result.filtered_tracks) == [9, 10]

    def test_bottom_percentile(self, track_factory):
        pool = self._pool(track_factory, list(range(1, 11)))
        play_filter = PlayCountFilter(mode="percentile", direction="bottom", percent=0.2)
        assert play_count_threshold(play_filter, pool) == 3
        profile = TasteProfile(name="p", play_count_filter=play_filter)
        kept = filter_candidates(tracks=pool, profile=profile).filtered_tracks
        assert sorted(t.play_count for t in kept) == [1, 2, 3]

    def test_percentile_threshold_not_affected_by_other_filters(self, track_factory):
        """Tracks removed by genre rules still count toward the percentile."""
        pool = [track_factory(str(i), play_count=i, genres=("Jazz",) if i > 5 else ("Rock",)) for i in range(1, 11)]
        play_filter = PlayCountFilter(mode="percentile", direction="top", percent=0.5)
        profile = TasteProfile(name="p", acceptable_genres=("rock",), play_count_filter=play_filter)
        kept = filter_candidates(tracks=pool, profile=profile).filtered_tracks
        # threshold from all ten counts is 6, no rock track reaches it
        assert kept == []


class TestFilterCandidates:
    """Tests for filter_candidates statistics."""

    def test_stats_count_reasons(self, track_factory):
        profile = TasteProfile(name="p", unacceptable_genres=("metal",), tempo_range=TempoRange(100, 150))
        pool = [
            track_factory("1", title="Interlude"),
            track_factory("2", genres=("Metal",)),
            track_factory("3", tempo=200),
            track_factory("4"),
        ]
        result = filter_candidates(tracks=pool, profile=profile)
        assert [t.id for t in result.filtered_tracks] == ["4"]
        assert result.stats[REASON_NON_SONG] == 1
        assert result.stats[REASON_GENRE_DENIED] == 1
        assert result.stats[REASON_TEMPO] == 1
        assert result.stats["kept"] == 1
        assert result.stats["input"] == 4

    def test_input_pool_not_mutated(self, library_pool, balanced_profile):
        snapshot = list(library_pool)
        filter_candidates(tracks=library_pool, profile=balanced_profile)
        assert library_pool == snapshot
