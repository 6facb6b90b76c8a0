"""
Configuration Loader - application YAML config, taste profiles and track snapshots
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models import Track
from .playlist.config import NamingConfig, SequenceConfig, TasteProfile

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager for Daylist"""

    REQUIRED_FIELDS = (
        ('library', 'tracks_path'),
        ('profiles', 'path'),
    )

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = config_path
        self.config = self._load_config()
        self._validate_config()

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_path}")
        return data

    def _validate_config(self):
        """Validate required configuration fields"""
        for section, field in self.REQUIRED_FIELDS:
            if section not in self.config or not isinstance(self.config[section], dict):
                raise ValueError(f"Missing configuration section: {section}")
            if not self.config[section].get(field):
                raise ValueError(f"Missing configuration field: {section}.{field}")

        # bad generation/naming values raise here
        self.sequence_config()
        self.naming_config()

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        values = self.config.get(section)
        if not isinstance(values, dict):
            return default
        return values.get(key, default)

    def _resolve_path(self, value: str) -> str:
        """Relative paths are taken relative to the config file."""
        path = Path(value)
        if path.is_absolute():
            return str(path)
        return str(Path(self.config_path).resolve().parent / path)

    @property
    def tracks_path(self) -> str:
        """Library track snapshot (env DAYLIST_TRACKS_PATH overrides)"""
        return os.getenv('DAYLIST_TRACKS_PATH') or self._resolve_path(self.config['library']['tracks_path'])

    @property
    def max_candidates(self) -> int:
        """Maximum tracks taken from the snapshot"""
        return int(self.get('library', 'max_candidates', 500))

    @property
    def profiles_path(self) -> str:
        """Taste profile file (env DAYLIST_PROFILES_PATH overrides)"""
        return os.getenv('DAYLIST_PROFILES_PATH') or self._resolve_path(self.config['profiles']['path'])

    @property
    def output_directory(self) -> str:
        """Directory the exporter writes playlists to"""
        return self._resolve_path(self.get('output', 'directory', 'playlists'))

    @property
    def cleanup_existing(self) -> bool:
        """Replace previously published playlists of the same profile"""
        return bool(self.get('output', 'cleanup_existing', True))

    @property
    def log_level(self) -> str:
        return str(self.get('logging', 'level', 'INFO')).upper()

    @property
    def log_file(self) -> Optional[str]:
        value = self.get('logging', 'file')
        return self._resolve_path(value) if value else None

    def sequence_config(self) -> SequenceConfig:
        """Builder settings from the ``generation`` section"""
        scan_limit = self.get('generation', 'scan_limit', 10)
        return SequenceConfig(
            scan_limit=None if scan_limit in (None, 0, 'all') else int(scan_limit),
            quality_share=float(self.get('generation', 'quality_share', 0.7)),
            exhaustion_policy=str(self.get('generation', 'exhaustion_policy', 'strict')).lower(),
            max_iterations_factor=int(self.get('generation', 'max_iterations_factor', 4)),
        )

    def naming_config(self) -> NamingConfig:
        """Title settings from the ``naming`` section"""
        defaults = NamingConfig()
        descriptors = self.get('naming', 'descriptors')
        return NamingConfig(
            dominance_threshold=float(self.get('naming', 'dominance_threshold', defaults.dominance_threshold)),
            include_mood=bool(self.get('naming', 'include_mood', defaults.include_mood)),
            include_era=bool(self.get('naming', 'include_era', defaults.include_era)),
            include_day=bool(self.get('naming', 'include_day', defaults.include_day)),
            descriptors=tuple(descriptors) if descriptors else defaults.descriptors,
        )

    def __repr__(self) -> str:
        return f"Config(path={self.config_path}, tracks={self.get('library', 'tracks_path')})"


def _read_structured(path: str) -> Any:
    """Read JSON or YAML by extension; YAML is a superset, so unknown extensions use it."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        if path.lower().endswith('.json'):
            return json.load(f)
        return yaml.safe_load(f)


def load_profiles(path: str) -> List[TasteProfile]:
    """
    Load taste profiles.

    Accepts a JSON/YAML list of profile mappings or a mapping with a
    ``playlists`` list. Profile names must be unique.

    Raises:
        FileNotFoundError: path does not exist
        ValueError: malformed file or invalid profile values
    """
    data = _read_structured(path)
    if isinstance(data, dict):
        data = data.get('playlists')
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of profiles in {path}")

    profiles: List[TasteProfile] = []
    seen = set()
    for index, entry in enumerate(data):
        try:
            profile = TasteProfile.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid profile #{index + 1} in {path}: {e}") from e
        if profile.name.lower() in seen:
            raise ValueError(f"Duplicate profile name in {path}: {profile.name}")
        seen.add(profile.name.lower())
        profiles.append(profile)

    logger.info(f"Loaded {len(profiles)} playlist profiles from {path}")
    return profiles


def _song_records(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        body = data.get('subsonic-response', data)
        for key in ('randomSongs', 'songsByGenre', 'starred2', 'searchResult3'):
            if isinstance(body.get(key), dict):
                return body[key].get('song') or []
        if isinstance(body.get('song'), list):
            return body['song']
        if isinstance(body.get('tracks'), list):
            return body['tracks']
    raise ValueError("Unrecognized track snapshot layout")


def load_tracks(path: str, limit: Optional[int] = None) -> List[Track]:
    """
    Load a library snapshot as Tracks.

    Records without an id are skipped; duplicate ids keep the first record.

    Args:
        path: JSON/YAML file with a list of song dicts or a Subsonic envelope
        limit: Keep at most this many tracks
    """
    records = _song_records(_read_structured(path))

    tracks: List[Track] = []
    seen = set()
    skipped = 0
    for record in records:
        if not isinstance(record, dict) or not record.get('id'):
            skipped += 1
            continue
        track = Track.from_subsonic(record)
        if track.id in seen:
            continue
        seen.add(track.id)
        tracks.append(track)
        if limit is not None and len(tracks) >= limit:
            break

    if skipped:
        logger.warning(f"Skipped {skipped} track records without an id")
    logger.info(f"Loaded {len(tracks)} tracks from {path}")
    return tracks
