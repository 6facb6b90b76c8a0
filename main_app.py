# -*- coding: utf-8 -*-
"""
Daylist - Main Application
Generates the daily playlists defined in the taste-profile file
"""
import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from daylist.config_loader import Config, load_profiles, load_tracks
from daylist.logging_utils import (
    RunSummary,
    add_logging_args,
    configure_logging,
    format_count,
    new_run_id,
    resolve_log_level,
    truncate_list,
)
from daylist.models import Playlist, Track
from daylist.playlist.config import TasteProfile
from daylist.playlist.filtering import is_actual_song
from daylist.playlist.pipeline import run_generation
from daylist.playlist.reporter import build_report
from daylist.playlist_exporter import JsonPlaylistExporter, PlaylistPublisher, cleanup_pattern_for

logger = logging.getLogger(__name__)


def parse_now(value: Optional[str]) -> datetime:
    """--now value as an aware datetime (naive input is UTC); current time when absent"""
    if not value:
        return datetime.now(timezone.utc)
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class DaylistApp:
    """Main application orchestrator"""

    def __init__(
        self,
        config_path: str = "config.yaml",
        now: Optional[datetime] = None,
        publisher: Optional[PlaylistPublisher] = None,
    ):
        self.config = Config(config_path)
        self.now = now or datetime.now(timezone.utc)
        self.sequence_cfg = self.config.sequence_config()
        self.naming_cfg = self.config.naming_config()
        self._publisher = publisher
        self.summary = RunSummary("Daylist", logger)

    @property
    def publisher(self) -> PlaylistPublisher:
        if self._publisher is None:
            self._publisher = JsonPlaylistExporter(self.config.output_directory, now=self.now)
        return self._publisher

    def load_pool(self) -> List[Track]:
        """Load the snapshot and drop non-songs once for every profile"""
        tracks = load_tracks(self.config.tracks_path, limit=self.config.max_candidates)
        songs = [t for t in tracks if is_actual_song(t)]
        removed = len(tracks) - len(songs)
        if removed:
            logger.info(f"Filtered out {format_count(removed, 'non-song')} (interludes, sketches, etc.)")
        logger.info(f"Using {format_count(len(songs), 'track')} for playlist generation")
        self.summary.add("tracks_loaded", len(tracks))
        self.summary.add("songs_used", len(songs))
        return songs

    def select_profiles(self, names: Optional[Sequence[str]] = None) -> List[TasteProfile]:
        profiles = load_profiles(self.config.profiles_path)
        if not names:
            return profiles
        wanted = {n.lower() for n in names}
        selected = [p for p in profiles if p.name.lower() in wanted]
        missing = wanted - {p.name.lower() for p in selected}
        if missing:
            logger.warning(f"Unknown profiles ignored: {truncate_list(sorted(missing))}")
        return selected

    def generate(
        self,
        pool: Sequence[Track],
        profiles: Sequence[TasteProfile],
        target_length: Optional[int] = None,
    ) -> List[Playlist]:
        """Generate one playlist per profile; a failing profile is logged and skipped"""
        playlists: List[Playlist] = []
        for profile in profiles:
            try:
                result = run_generation(
                    pool,
                    profile,
                    now=self.now,
                    sequence_cfg=self.sequence_cfg,
                    naming_cfg=self.naming_cfg,
                    target_length=target_length,
                )
            except Exception:
                logger.exception(f"Generation failed for profile '{profile.name}'")
                self.summary.increment("failures")
                continue
            playlists.append(result.playlist)
            self.summary.increment("tracks_placed", len(result.playlist))
            self.summary.increment("fallback_picks", result.playlist.fallback_count)
        return playlists

    def publish(self, playlists: Sequence[Playlist]) -> Dict[str, str]:
        """Publish non-empty playlists; returns name -> status message"""
        results: Dict[str, str] = {}
        for playlist in playlists:
            if not playlist.tracks:
                logger.warning(f"No tracks for '{playlist.profile_name}', skipping publish")
                results[playlist.name] = "skipped (empty)"
                continue
            pattern = cleanup_pattern_for(playlist.profile_name) if self.config.cleanup_existing else None
            try:
                location = self.publisher.publish(playlist, cleanup_pattern=pattern)
            except OSError as e:
                logger.error(f"Failed to publish '{playlist.name}': {e}")
                self.summary.increment("failures")
                results[playlist.name] = f"failed: {e}"
                continue
            self.summary.increment("playlists_created")
            results[playlist.name] = location
        return results

    def run(
        self,
        dry_run: bool = False,
        profile_names: Optional[Sequence[str]] = None,
        target_length: Optional[int] = None,
    ) -> int:
        """Run the application; returns the process exit code"""
        profiles = self.select_profiles(profile_names)
        if not profiles:
            logger.error("No playlist profiles to generate")
            return 1

        pool = self.load_pool()
        playlists = self.generate(pool, profiles, target_length=target_length)
        self.summary.add("profiles", len(profiles))

        if dry_run:
            for playlist in playlists:
                profile = next(p for p in profiles if p.name == playlist.profile_name)
                print()
                print(build_report(
                    playlist,
                    weights=profile.quality_weights,
                    cleanup_pattern=cleanup_pattern_for(profile.name),
                ))
            self.summary.log()
            return 0 if playlists else 1

        results = self.publish(playlists)
        created = int(self.summary.get("playlists_created", 0))
        print(f"\nCreated {created}/{len(profiles)} playlists")
        for name, status in results.items():
            print(f"  {name}: {status}")
        self.summary.log()
        return 0 if created else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate daily playlists from a library snapshot and taste profiles"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to config.yaml (default: config.yaml)"
    )
    parser.add_argument(
        "--profile",
        action="append",
        metavar="NAME",
        help="Only generate this profile (repeatable)"
    )
    parser.add_argument(
        "--target-length",
        type=int,
        metavar="N",
        help="Override every profile's target number of tracks"
    )
    parser.add_argument(
        "--now",
        metavar="ISO",
        help="Generation time, e.g. 2025-08-03T09:00:00Z (default: current time)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print per-track reports instead of writing playlists"
    )
    add_logging_args(parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point"""
    args = build_parser().parse_args(argv)

    if not os.path.exists(args.config):
        print(f"Error: {args.config} not found")
        print("Copy config.example.yaml to config.yaml and point it at your library snapshot.")
        return 1

    try:
        now = parse_now(args.now)
    except ValueError as e:
        print(f"Error: invalid --now value: {e}")
        return 1

    try:
        app = DaylistApp(args.config, now=now)
        configure_logging(
            level=resolve_log_level(args) if (args.debug or args.quiet or args.log_level != 'INFO') else app.config.log_level,
            log_file=args.log_file or app.config.log_file,
            run_id=new_run_id(),
            show_run_id=args.show_run_id,
        )
        return app.run(
            dry_run=args.dry_run,
            profile_names=args.profile,
            target_length=args.target_length,
        )
    except (ValueError, FileNotFoundError) as e:
        print(f"\nConfiguration Error: {e}")
        print("\nPlease check your config and profile files.\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
