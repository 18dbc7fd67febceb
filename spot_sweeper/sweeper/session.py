"""
Per-run orchestration of sweeping operations.

A SweepSession holds the state of one run: the client, the settings, and a
few lazily fetched values (recent plays, the history playlist and its
tracks) that are computed at most once and never invalidated, since a run
is short and nothing persists between runs.

Usage:
    session = SweepSession(client, config.sweeper)
    summary = session.run()
"""

from typing import Sequence

from spot_sweeper.core.config import SweeperConfig
from spot_sweeper.core.exceptions import NotFound, Unauthorized
from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Collection, Track, TrackPosition
from spot_sweeper.sweeper.dedup import dedup
from spot_sweeper.sweeper.history import add_skip_duplicates, log_recent_plays
from spot_sweeper.sweeper.identity import IdentityResolver
from spot_sweeper.sweeper.mutator import remove_tracks
from spot_sweeper.sweeper.pagination import fetch_collection
from spot_sweeper.sweeper.playback import extend_for_playback
from spot_sweeper.sweeper.reconcile import intersect, subtract
from spot_sweeper.sweeper.trimmer import trim

logger = get_logger(__name__)

AGAINST_RECENT = "recent"
AGAINST_HISTORY = "history"


class SweepSession:
    """
    Runs sweeping operations against one Spotify account.

    Attributes:
        client: SpotifyClient (or any object with the same methods).
        settings: Sweeper section of the configuration.
        resolver: Identity resolver honoring the title-match override.
    """

    def __init__(self, client, settings: SweeperConfig) -> None:
        self.client = client
        self.settings = settings
        self.resolver = IdentityResolver(settings.no_title_match_artists)
        self._recent_tracks: list[Track] | None = None
        self._history_playlist: Collection | None = None
        self._history_tracks: list[Track] | None = None
        self._playlists: list[Collection] | None = None

    # =========================================================================
    # Memoized state
    # =========================================================================

    @property
    def recent_tracks(self) -> list[Track]:
        """The user's last plays, fetched once per run."""
        if self._recent_tracks is None:
            self._recent_tracks = self.client.recently_played()
            logger.debug(f"Recently played: {len(self._recent_tracks)} tracks")
            for track in self._recent_tracks:
                logger.debug(f"  {track.display_name}")
        return self._recent_tracks

    @property
    def history_playlist(self) -> Collection:
        """The history playlist, created on first use if it does not exist."""
        if self._history_playlist is None:
            name = self.settings.history_playlist
            playlist = self._find(name)
            if playlist is None:
                playlist = self.client.create_collection(name)
                self._playlists = None
            self._history_playlist = playlist
        return self._history_playlist

    @property
    def history_tracks(self) -> list[Track]:
        """
        Every track in the history playlist, fetched once per run.

        Fetched without a market so tracks are compared as they were logged.
        """
        if self._history_tracks is None:
            self._history_tracks = fetch_collection(
                self.client, self.history_playlist, self.settings.page_size, market=None
            )
        return self._history_tracks

    def playlists(self) -> list[Collection]:
        """The user's playlists, listed once per run."""
        if self._playlists is None:
            self._playlists = self.client.playlists()
        return self._playlists

    def _find(self, name: str) -> Collection | None:
        return next((p for p in self.playlists() if p.name == name), None)

    def playlist_by_name(self, name: str) -> Collection:
        """
        Raises:
            NotFound: If no playlist in the library has this name.
        """
        playlist = self._find(name)
        if playlist is None:
            raise NotFound(f"Playlist not found: '{name}'", details={"name": name})
        return playlist

    # =========================================================================
    # Operations
    # =========================================================================

    def reference_tracks(self, against: str) -> list[Track]:
        if against == AGAINST_RECENT:
            return self.recent_tracks
        if against == AGAINST_HISTORY:
            return self.history_tracks
        raise ValueError(f"Unknown reference '{against}', expected '{AGAINST_RECENT}' or '{AGAINST_HISTORY}'")

    def clean(self, playlist: Collection, against: str = AGAINST_RECENT) -> list[Track]:
        """
        Remove from `playlist` every track matching the reference tracks.

        If the playlist is the current playback context, the removal set
        is extended to an unbroken prefix of the playing window.

        Returns:
            The tracks whose positions were removed.

        Raises:
            Unauthorized: If the current user does not own the playlist.
            ConcurrencyConflict: If the playlist changed during removal.
        """
        self._check_owner(playlist)

        reference = self.reference_tracks(against)
        tracks = fetch_collection(self.client, playlist, self.settings.page_size)
        matches = intersect(reference, tracks, self.resolver)

        if matches and self.client.playback_context_uri() == playlist.uri:
            matches = extend_for_playback(tracks, matches, self.settings.playing_window)

        for track in matches:
            logger.debug(f"Match in '{playlist.name}': {track.display_name}")

        remove_tracks(self.client, playlist, tracks, matches, self.settings.batch_size)
        logger.info(f"'{playlist.name}': {len(matches)} heard tracks removed")
        return matches

    def log_recent(self) -> list[Track]:
        """Prepend recent plays to the history playlist, then trim it."""
        history = self.history_playlist
        self._check_owner(history)
        logged = log_recent_plays(self.client, history, self.recent_tracks, self.settings.page_size)
        self.trim(history, self.settings.history_cap)
        return logged

    def collect(self, playlist: Collection) -> list[Track]:
        """Add recent plays to the top of a playlist, skipping tracks it already has."""
        self._check_owner(playlist)
        return add_skip_duplicates(self.client, playlist, self.recent_tracks, self.settings.page_size)

    def trim(self, playlist: Collection, cap: int | None = None) -> list[list[TrackPosition]]:
        self._check_owner(playlist)
        cap = self.settings.history_cap if cap is None else cap
        batches = trim(self.client, playlist, cap, self.settings.batch_size)
        removed = sum(len(b) for b in batches)
        if removed:
            logger.info(f"Trimmed {removed} tracks from '{playlist.name}' (cap {cap})")
        return batches

    def dedup(self, playlist: Collection) -> list[TrackPosition]:
        self._check_owner(playlist)
        return dedup(self.client, playlist, self.settings.batch_size, self.settings.page_size)

    def diff(self, a: Collection, b: Collection) -> list[Track]:
        """Tracks of `a` that match nothing in `b`. Read-only."""
        a_tracks = fetch_collection(self.client, a, self.settings.page_size)
        b_tracks = fetch_collection(self.client, b, self.settings.page_size)
        return subtract(a_tracks, b_tracks, self.resolver)

    def run(self) -> dict[str, int]:
        """
        The default sweep.

        1. Clean each configured playlist against recent plays
        2. Log recent plays into the history playlist and trim it

        Returns:
            Playlist name to track count, for the configured playlists and
            the history playlist, read fresh after all changes.
        """
        targets = [p for p in self.playlists() if p.name in self.settings.playlists]
        missing = set(self.settings.playlists) - {p.name for p in targets}
        for name in sorted(missing):
            logger.warning(f"Configured playlist not found: '{name}'")

        for playlist in targets:
            self.clean(playlist, AGAINST_RECENT)

        self.log_recent()

        summary: dict[str, int] = {}
        for playlist in targets + [self.history_playlist]:
            summary[playlist.name] = self.client.collection_metadata(playlist).total
        return summary

    def _check_owner(self, playlist: Collection) -> None:
        user_id = self.client.current_user_id()
        if playlist.owner_id and playlist.owner_id != user_id:
            raise Unauthorized(
                f"Cannot modify '{playlist.name}': owned by {playlist.owner_id}",
                details={"playlist_id": playlist.id, "owner_id": playlist.owner_id}
            )


def format_summary(summary: dict[str, int]) -> str:
    """'Drive Mix: 48 | Recently Played: 2000'"""
    return " | ".join(f"{name}: {total}" for name, total in summary.items())


def format_tracks(tracks: Sequence[Track]) -> list[str]:
    return [track.display_name for track in tracks]
