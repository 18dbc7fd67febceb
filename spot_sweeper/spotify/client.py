"""
Spotify API client for spot-sweeper.

This module wraps the spotipy library and exposes the narrow set of
operations the sweeping engine consumes:

    list_page(collection, offset, limit)          one page of tracks
    collection_metadata(collection)               fresh total + snapshot token
    remove_by_position(collection, positions, t)  positional removal under a token
    create_collection(name)                       create a playlist

plus a few helpers for the session (listing playlists, recent plays,
adding tracks, reading the playback context).

Error Mapping:
    Every spotipy or requests exception is converted at this boundary into
    the spot_sweeper exception hierarchy and re-raised. No request is retried:
    spotipy is built with retries=0 and status_retries=0, so a 429 or 5xx
    reaches the caller as an exception.

Usage:
    client = SpotifyClient.from_config(config.spotify)
    playlist = client.playlists()[0]
    page = client.list_page(playlist, offset=0, limit=100)
"""

from typing import Any, Callable, Iterable, TypeVar

import requests
import spotipy
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from spot_sweeper.core.config import SpotifyConfig
from spot_sweeper.core.exceptions import (
    ConcurrencyConflict,
    NotFound,
    SpotifyError,
    TransportFailure,
)
from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import (
    Collection,
    CollectionMetadata,
    Track,
    TrackPosition,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Scopes needed to read and modify the user's playlists and playback state
SCOPES = " ".join([
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-private",
    "playlist-modify-public",
    "user-read-recently-played",
    "user-read-playback-state",
])

# Largest page Spotify serves for playlists and recently played tracks
PLAYLISTS_PAGE_SIZE = 50
RECENTLY_PLAYED_LIMIT = 50
ADD_ITEMS_LIMIT = 100

# HTTP statuses Spotify uses when a snapshot_id no longer matches
STALE_SNAPSHOT_STATUSES = (409, 412)


class SpotifyClient:
    """
    Thin wrapper around spotipy.Spotify.

    Unlike the engine, which only talks in Track and Collection objects,
    this class knows the shape of Spotify API responses. It is constructed
    once per run and passed explicitly to the session.

    Attributes:
        _spotify: The underlying spotipy.Spotify instance.
        _user_id: Lazily fetched id of the authenticated user.
    """

    def __init__(self, spotify_instance: spotipy.Spotify) -> None:
        self._spotify = spotify_instance
        self._user_id: str | None = None

    @classmethod
    def from_config(cls, config: SpotifyConfig) -> "SpotifyClient":
        """
        Build an authenticated client from configuration.

        The OAuth token is cached by spotipy in config.token_cache; the first
        run opens a browser for consent.

        Raises:
            SpotifyError: If the auth manager cannot be created.
        """
        try:
            auth_manager = SpotifyOAuth(
                client_id=config.client_id,
                client_secret=config.client_secret,
                redirect_uri=config.redirect_uri,
                scope=SCOPES,
                cache_path=str(config.token_cache),
                open_browser=True
            )
            spotify_instance = spotipy.Spotify(
                auth_manager=auth_manager,
                requests_timeout=config.requests_timeout,
                retries=0,
                status_retries=0
            )
        except SpotifyOauthError as e:
            raise SpotifyError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        return cls(spotify_instance)

    # =========================================================================
    # Error mapping
    # =========================================================================

    def _call(
        self,
        description: str,
        func: Callable[..., T],
        *args: Any,
        mutating: bool = False,
        details: dict | None = None,
        **kwargs: Any
    ) -> T:
        """
        Invoke a spotipy method, translating its failures.

        Args:
            description: What the call does, used in error messages.
            func: Bound spotipy method.
            mutating: True for calls that carry a snapshot_id; stale-token
                      responses are then raised as ConcurrencyConflict.
            details: Context copied into the raised exception.

        Raises:
            ConcurrencyConflict: Stale snapshot token on a mutating call.
            NotFound: HTTP 404.
            TransportFailure: Connection errors, timeouts and 5xx responses.
            SpotifyError: Any other API error (auth errors flagged).
        """
        details = dict(details or {})
        try:
            return func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            details.update({"http_status": e.http_status, "original_error": str(e)})
            status = e.http_status
            message = f"Failed to {description}: {e.msg}"
            if mutating and (status in STALE_SNAPSHOT_STATUSES or _mentions_snapshot(e)):
                raise ConcurrencyConflict(
                    f"Snapshot token is stale, cannot {description}",
                    details=details
                ) from e
            if status == 404:
                raise NotFound(message, details=details) from e
            if status == 429:
                raise SpotifyError(message, details=details, is_rate_limit=True) from e
            if status in (401, 403):
                raise SpotifyError(message, details=details, is_auth_error=True) from e
            if status is not None and status >= 500:
                raise TransportFailure(message, details=details) from e
            raise SpotifyError(message, details=details) from e
        except requests.exceptions.RequestException as e:
            details["original_error"] = str(e)
            raise TransportFailure(f"Failed to {description}: {e}", details=details) from e

    # =========================================================================
    # Collaborator interface used by the sweeping engine
    # =========================================================================

    def list_page(
        self,
        collection: Collection,
        offset: int,
        limit: int,
        market: str | None = "from_token"
    ) -> list[Track]:
        """
        Fetch one page of a playlist's tracks.

        Args:
            collection: Playlist to read.
            offset: Index of the first track to return.
            limit: Page size (max 100).
            market: Market for track relinking. "from_token" makes Spotify
                    fill 'linked_from' for relinked tracks; None returns the
                    catalog tracks as stored.

        Returns:
            Tracks in playlist order. An empty list means the end was reached.
            Entries without a track object (removed from catalog, podcasts)
            are kept as placeholders so that positions stay aligned.
        """
        response = self._call(
            "fetch playlist items",
            self._spotify.playlist_items,
            collection.id,
            limit=limit,
            offset=offset,
            market=market,
            additional_types=["track"],
            details={"playlist_id": collection.id, "offset": offset}
        )
        return [_track_from_item(item) for item in response.get("items") or []]

    def collection_metadata(self, collection: Collection) -> CollectionMetadata:
        """
        Read a playlist's current size and snapshot token.

        Always a network call; nothing is cached.
        """
        data = self._call(
            "fetch playlist metadata",
            self._spotify.playlist,
            collection.id,
            fields="snapshot_id,tracks.total",
            details={"playlist_id": collection.id}
        )
        return CollectionMetadata(
            total=(data.get("tracks") or {}).get("total", 0),
            snapshot_token=data.get("snapshot_id") or ""
        )

    def remove_by_position(
        self,
        collection: Collection,
        positions: Iterable[TrackPosition],
        snapshot_token: str
    ) -> str:
        """
        Remove the tracks at the given absolute positions.

        Args:
            collection: Playlist to modify.
            positions: At most 100 positions, each with the uri expected there.
            snapshot_token: Snapshot the positions were computed against.

        Returns:
            The playlist's new snapshot token.

        Raises:
            ConcurrencyConflict: If snapshot_token is stale.
        """
        by_uri: dict[str, list[int]] = {}
        for position in positions:
            by_uri.setdefault(position.uri, []).append(position.index)
        items = [{"uri": uri, "positions": indexes} for uri, indexes in by_uri.items()]

        result = self._call(
            "remove tracks by position",
            self._spotify.playlist_remove_specific_occurrences_of_items,
            collection.id,
            items,
            snapshot_id=snapshot_token,
            mutating=True,
            details={"playlist_id": collection.id, "snapshot_id": snapshot_token}
        )
        return (result or {}).get("snapshot_id", "")

    def create_collection(self, name: str) -> Collection:
        """Create a private playlist owned by the current user."""
        data = self._call(
            "create playlist",
            self._spotify.user_playlist_create,
            self.current_user_id(),
            name,
            public=False,
            details={"name": name}
        )
        logger.info(f"Created playlist '{name}'")
        return Collection.from_spotify_api(data)

    # =========================================================================
    # Session helpers
    # =========================================================================

    def current_user_id(self) -> str:
        if self._user_id is None:
            data = self._call("fetch current user", self._spotify.current_user)
            self._user_id = data["id"]
        return self._user_id

    def playlists(self) -> list[Collection]:
        """Every playlist in the current user's library, in library order."""
        collections: list[Collection] = []
        offset = 0
        while True:
            response = self._call(
                "list playlists",
                self._spotify.current_user_playlists,
                limit=PLAYLISTS_PAGE_SIZE,
                offset=offset
            )
            items = response.get("items") or []
            if not items:
                return collections
            collections.extend(Collection.from_spotify_api(p) for p in items if p)
            offset += len(items)

    def recently_played(self, limit: int = RECENTLY_PLAYED_LIMIT) -> list[Track]:
        """
        The user's most recently played tracks, newest first.

        Spotify serves at most 50 and does not paginate by offset.
        """
        response = self._call(
            "fetch recently played tracks",
            self._spotify.current_user_recently_played,
            limit=min(limit, RECENTLY_PLAYED_LIMIT)
        )
        return [
            Track.from_spotify_api(item["track"])
            for item in response.get("items") or []
            if item.get("track")
        ]

    def add_tracks(self, collection: Collection, uris: list[str], position: int | None = None) -> str:
        """
        Insert tracks at `position` (append when None), in chunks of 100.

        Chunks are inserted in order at increasing positions so the final
        order matches `uris`.

        Returns:
            The last snapshot token returned by Spotify.
        """
        snapshot = ""
        for start in range(0, len(uris), ADD_ITEMS_LIMIT):
            chunk = uris[start:start + ADD_ITEMS_LIMIT]
            result = self._call(
                "add tracks",
                self._spotify.playlist_add_items,
                collection.id,
                chunk,
                position=None if position is None else position + start,
                details={"playlist_id": collection.id}
            )
            snapshot = (result or {}).get("snapshot_id", snapshot)
        return snapshot

    def remove_uris(self, collection: Collection, uris: list[str]) -> str:
        """
        Remove every occurrence of each uri, in chunks of 100.

        Returns:
            The last snapshot token returned by Spotify.
        """
        snapshot = ""
        for start in range(0, len(uris), ADD_ITEMS_LIMIT):
            chunk = uris[start:start + ADD_ITEMS_LIMIT]
            result = self._call(
                "remove tracks",
                self._spotify.playlist_remove_all_occurrences_of_items,
                collection.id,
                chunk,
                mutating=True,
                details={"playlist_id": collection.id}
            )
            snapshot = (result or {}).get("snapshot_id", snapshot)
        return snapshot

    def playback_context_uri(self) -> str | None:
        """
        URI of the context (playlist, album) currently being played.

        Returns None when nothing is playing or playback is not from a context.
        """
        data = self._call("fetch playback state", self._spotify.current_playback)
        if not data:
            return None
        return (data.get("context") or {}).get("uri")


def _track_from_item(item: dict[str, Any]) -> Track:
    track_data = item.get("track") or item.get("item")
    if not track_data:
        return Track(id="", uri="", name="", artists=())
    return Track.from_spotify_api(track_data)


def _mentions_snapshot(error: spotipy.SpotifyException) -> bool:
    return "snapshot" in str(error.msg or "").lower()
