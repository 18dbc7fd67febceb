"""
Data models for Spotify entities.

This module defines immutable dataclasses representing the Spotify objects
the sweeper reads: tracks, playlists, and playlist metadata snapshots.

Design Decisions:
    - All dataclasses are frozen (immutable); a fetched track list is never
      modified in place, so positions computed against it stay meaningful
    - Only fields used for identity matching and mutation are kept
    - linked_from_id is a first-class field, filled from the API's
      'linked_from' object when Spotify relinked an unavailable track

Usage:
    from spot_sweeper.spotify.models import Track, Collection

    track = Track.from_spotify_api(item["track"])
    print(track.first_artist_id, track.name)
"""

from dataclasses import dataclass, field
from typing import Any, NamedTuple


@dataclass(frozen=True)
class Artist:
    """
    A track or album artist.

    Attributes:
        id: Spotify artist ID. May be empty for local files.
        name: Artist display name.
    """
    id: str
    name: str

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any]) -> "Artist":
        return cls(id=data.get("id") or "", name=data.get("name") or "")


@dataclass(frozen=True)
class Track:
    """
    Immutable representation of a Spotify track as seen in a playlist page.

    Attributes:
        id: Spotify track ID (22-character base62 string).
            Example: "4cOdK2wGLETKBW3PvgPWqT"

        uri: Stable opaque reference, used for exact-match removal.
             Example: "spotify:track:4cOdK2wGLETKBW3PvgPWqT"

        name: Track title. May carry a " - " suffix annotating a remix,
              live recording or remaster.
              Example: "Time - 2011 Remaster"

        artists: Track artists in credit order (never empty for catalog tracks).

        album_artist_ids: IDs of the album's artists, in order.

        external_ids: Provider name to provider code, e.g. {"isrc": "GBUM71029604"}.

        linked_from_id: ID of the originally requested track when Spotify
                        substituted a regionally available equivalent.
                        None when no relinking happened.
    """
    id: str
    uri: str
    name: str
    artists: tuple[Artist, ...]
    album_artist_ids: tuple[str, ...] = field(default_factory=tuple)
    external_ids: dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    linked_from_id: str | None = None

    @classmethod
    def from_spotify_api(cls, track_data: dict[str, Any]) -> "Track":
        """
        Create a Track from a Spotify API track object.

        Args:
            track_data: The track object, i.e. the 'track' field of a
                        playlist item or recently-played item.

        Returns:
            Track: A frozen Track instance.
        """
        artists = tuple(Artist.from_spotify_api(a) for a in track_data.get("artists") or [])
        album = track_data.get("album") or {}
        album_artist_ids = tuple(a.get("id") or "" for a in album.get("artists") or [])
        external_ids = {
            str(k): str(v)
            for k, v in (track_data.get("external_ids") or {}).items()
            if v
        }

        return cls(
            id=track_data.get("id") or "",
            uri=track_data.get("uri") or "",
            name=track_data.get("name") or "",
            artists=artists,
            album_artist_ids=album_artist_ids,
            external_ids=external_ids,
            linked_from_id=linked_from_id(track_data)
        )

    @property
    def first_artist_id(self) -> str:
        """ID of the first credited artist, or "" when there are none."""
        return self.artists[0].id if self.artists else ""

    @property
    def all_artists(self) -> str:
        return ", ".join(a.name for a in self.artists)

    @property
    def display_name(self) -> str:
        """Readable one-liner used in logs: 'uri - name - artists'."""
        return f"{self.uri} - {self.name} - {self.all_artists}"


def linked_from_id(track_data: dict[str, Any]) -> str | None:
    """
    Return the id of the track Spotify relinked from, if any.

    Only present when the playlist was fetched with a market (e.g.
    market="from_token") and the requested track is unavailable there.
    """
    linked = track_data.get("linked_from")
    if not linked:
        return None
    return linked.get("id") or None


@dataclass(frozen=True)
class Collection:
    """
    A Spotify playlist, or a virtual feed such as recently played tracks.

    Attributes:
        id: Spotify playlist ID.
        uri: Playlist URI, compared with the playback context URI.
        name: Playlist name.
        owner_id: Spotify user ID of the playlist owner.
        total: Track count. Authoritative only right after a metadata refresh.
        snapshot_token: Spotify snapshot_id. Invalidated by every mutation.
    """
    id: str
    uri: str
    name: str
    owner_id: str = ""
    total: int = 0
    snapshot_token: str = ""

    @classmethod
    def from_spotify_api(cls, playlist_data: dict[str, Any]) -> "Collection":
        """
        Create a Collection from a simplified or full playlist object.
        """
        owner = playlist_data.get("owner") or {}
        tracks = playlist_data.get("tracks") or playlist_data.get("items") or {}
        return cls(
            id=playlist_data["id"],
            uri=playlist_data.get("uri") or f"spotify:playlist:{playlist_data['id']}",
            name=playlist_data.get("name") or "",
            owner_id=owner.get("id") or "",
            total=tracks.get("total", 0) if isinstance(tracks, dict) else 0,
            snapshot_token=playlist_data.get("snapshot_id") or ""
        )


class CollectionMetadata(NamedTuple):
    """Fresh size and snapshot token of a playlist."""
    total: int
    snapshot_token: str


class TrackPosition(NamedTuple):
    """
    An absolute position in one frozen fetch, with the uri found there.

    Spotify requires the uri alongside positions when removing specific
    occurrences, and rejects the request if they do not line up.
    """
    index: int
    uri: str
