"""Tests for the YAML config, profile and snapshot loaders."""
import json

import pytest
import yaml

from daylist.config_loader import Config, load_profiles, load_tracks


def _write_config(tmp_path, **sections):
    data = {
        "library": {"tracks_path": "library.json"},
        "profiles": {"path": "profiles.yaml"},
    }
    data.update(sections)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestConfig:
    """Tests for Config."""

    def test_relative_paths_resolve_against_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DAYLIST_TRACKS_PATH", raising=False)
        monkeypatch.delenv("DAYLIST_PROFILES_PATH", raising=False)
        config = Config(str(_write_config(tmp_path)))
        assert config.tracks_path == str(tmp_path.resolve() / "library.json")
        assert config.profiles_path == str(tmp_path.resolve() / "profiles.yaml")
        assert config.max_candidates == 500
        assert config.cleanup_existing is True

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DAYLIST_TRACKS_PATH", "/data/other.json")
        config = Config(str(_write_config(tmp_path)))
        assert config.tracks_path == "/data/other.json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config(str(tmp_path / "absent.yaml"))

    def test_missing_required_field(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"library": {}}), encoding="utf-8")
        with pytest.raises(ValueError, match="library"):
            Config(str(path))

    def test_generation_section(self, tmp_path):
        config = Config(str(_write_config(
            tmp_path,
            generation={"scan_limit": "all", "quality_share": 0.5, "exhaustion_policy": "Fallback"},
        )))
        cfg = config.sequence_config()
        assert cfg.scan_limit is None
        assert cfg.quality_share == 0.5
        assert cfg.exhaustion_policy == "fallback"

    def test_bad_generation_value_fails_at_load(self, tmp_path):
        with pytest.raises(ValueError):
            Config(str(_write_config(tmp_path, generation={"exhaustion_policy": "lenient"})))

    def test_naming_section(self, tmp_path):
        config = Config(str(_write_config(tmp_path, naming={"include_day": False, "descriptors": ["set"]})))
        naming = config.naming_config()
        assert naming.include_day is False
        assert naming.descriptors == ("set",)


class TestLoadProfiles:
    """Tests for load_profiles."""

    def test_json_list(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps([{"name": "One"}, {"name": "Two"}]), encoding="utf-8")
        assert [p.name for p in load_profiles(str(path))] == ["One", "Two"]

    def test_yaml_playlists_key(self, tmp_path):
        path = tmp_path / "profiles.yaml"
        path.write_text(yaml.safe_dump({"playlists": [{"name": "Only", "target_length": 5}]}), encoding="utf-8")
        profiles = load_profiles(str(path))
        assert profiles[0].target_length == 5

    def test_duplicate_names(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps([{"name": "Same"}, {"name": "same"}]), encoding="utf-8")
        with pytest.raises(ValueError, match="Duplicate"):
            load_profiles(str(path))

    def test_invalid_entry_reports_position(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps([{"name": "Ok"}, {"name": "Bad", "target_length": -1}]), encoding="utf-8")
        with pytest.raises(ValueError, match="#2"):
            load_profiles(str(path))

    def test_example_file_loads(self):
        from pathlib import Path
        example = Path(__file__).resolve().parents[2] / "profiles.example.json"
        names = [p.name for p in load_profiles(str(example))]
        assert "Workout Mix" in names


class TestLoadTracks:
    """Tests for load_tracks."""

    def _songs(self):
        return [
            {"id": "1", "title": "One", "artist": "A", "bpm": 120, "playCount": 3},
            {"id": "2", "title": "Two", "artist": "B"},
            {"title": "No id"},
            {"id": "1", "title": "Duplicate"},
        ]

    def test_plain_list(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps(self._songs()), encoding="utf-8")
        tracks = load_tracks(str(path))
        assert [t.id for t in tracks] == ["1", "2"]
        assert tracks[0].title == "One"

    def test_subsonic_envelope(self, tmp_path):
        path = tmp_path / "library.json"
        envelope = {"subsonic-response": {"status": "ok", "randomSongs": {"song": self._songs()}}}
        path.write_text(json.dumps(envelope), encoding="utf-8")
        assert len(load_tracks(str(path))) == 2

    def test_limit(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps(self._songs()), encoding="utf-8")
        assert [t.id for t in load_tracks(str(path), limit=1)] == ["1"]

    def test_unknown_layout(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps({"albums": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_tracks(str(path))
