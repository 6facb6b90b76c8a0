"""
Playlist Exporter - publishes generated playlists as JSON documents
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .logging_utils import get_run_id
from .models import Playlist

logger = logging.getLogger(__name__)

# Profiles whose names start with one of these use that prefix as their
# cleanup pattern ("Daylist: Chill Evening" -> "daylist: chill").
CLEANUP_PREFIXES: Sequence[str] = (
    "daylist: chill",
    "daylist: upbeat",
    "workout mix",
    "discovery mix",
)


def cleanup_pattern_for(profile_name: str) -> str:
    """
    Base-name pattern identifying earlier playlists of a profile.

    Generated titles start with the lowercased profile name, so the pattern is
    a case-insensitive prefix.
    """
    base = " ".join(profile_name.lower().split())
    for prefix in CLEANUP_PREFIXES:
        if base.startswith(prefix):
            return prefix
    return base


def matches_pattern(name: str, pattern: str) -> bool:
    return name.lower().startswith(pattern.lower())


class PlaylistPublisher(Protocol):
    """Contract of the collaborator that stores playlists."""

    def publish(self, playlist: Playlist, *, cleanup_pattern: Optional[str] = None) -> str:
        """Store ``playlist`` (replacing matches of ``cleanup_pattern``); return its identifier."""
        ...

    def delete_matching(self, pattern: str) -> int:
        """Delete stored playlists whose name starts with ``pattern``; return the count."""
        ...


class JsonPlaylistExporter:
    """Writes one JSON document per playlist into a directory"""

    def __init__(self, export_path: str, now: Optional[datetime] = None):
        """
        Initialize JSON exporter

        Args:
            export_path: Directory to save playlist files
            now: Timestamp recorded in exported documents
        """
        self.export_path = Path(export_path)
        self.now = now
        self._ensure_export_directory()
        logger.info(f"Initialized playlist exporter: {self.export_path}")

    def _ensure_export_directory(self):
        """Create export directory if it doesn't exist"""
        try:
            self.export_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create export directory: {e}")
            raise

    def _sanitize_filename(self, filename: str) -> str:
        """
        Sanitize filename by removing invalid characters

        Args:
            filename: Original filename

        Returns:
            Safe filename
        """
        for char in '<>:"/\\|?*':
            filename = filename.replace(char, '_')
        filename = filename.strip('. ')
        return filename or "playlist"

    def _stored_name(self, path: Path) -> str:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return str(data.get('name') or path.stem)
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Unreadable playlist file {path.name}: {e}")
            return path.stem

    def list_playlists(self) -> List[str]:
        """Names of stored playlists"""
        return sorted(self._stored_name(p) for p in self.export_path.glob('*.json'))

    def delete_matching(self, pattern: str) -> int:
        """
        Delete stored playlists whose name starts with pattern

        Args:
            pattern: Case-insensitive name prefix

        Returns:
            Number of deleted files
        """
        if not pattern:
            logger.debug("No cleanup - empty pattern")
            return 0

        deleted = 0
        for path in sorted(self.export_path.glob('*.json')):
            name = self._stored_name(path)
            if matches_pattern(name, pattern):
                path.unlink()
                logger.info(f"Deleted existing playlist '{name}' matching pattern '{pattern}'")
                deleted += 1
        return deleted

    def publish(self, playlist: Playlist, *, cleanup_pattern: Optional[str] = None) -> str:
        """
        Export a playlist to JSON

        Args:
            playlist: Generated playlist
            cleanup_pattern: Replace stored playlists matching this prefix first

        Returns:
            Path to the created file
        """
        if cleanup_pattern:
            self.delete_matching(cleanup_pattern)

        path = self.export_path / f"{self._sanitize_filename(playlist.name)}.json"
        document = playlist.to_dict()
        document['created_at'] = (self.now or datetime.now().astimezone()).isoformat()
        document['run_id'] = get_run_id()

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write playlist file {path}: {e}")
            raise

        logger.info(f"Exported {len(playlist)} tracks to: {path}")
        return str(path)
