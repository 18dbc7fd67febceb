"""Test configuration and fixtures"""

import pytest

from spot_sweeper.core.config import SweeperConfig
from spot_sweeper.core.exceptions import ConcurrencyConflict, SpotifyError
from spot_sweeper.spotify.models import Artist, Collection, CollectionMetadata, Track


USER_ID = "me"


def build_track(
    track_id,
    name=None,
    artist_id="artist_1",
    uri=None,
    isrc=None,
    linked_from=None,
    album_artists=None,
):
    """Track with sensible defaults; uri derived from the id"""
    return Track(
        id=track_id,
        uri=uri or f"spotify:track:{track_id}",
        name=name if name is not None else f"Song {track_id}",
        artists=(Artist(id=artist_id, name=f"Artist {artist_id}"),),
        album_artist_ids=tuple(album_artists) if album_artists is not None else (artist_id,),
        external_ids={"isrc": isrc} if isrc else {},
        linked_from_id=linked_from,
    )


class FakeSpotify:
    """
    In-memory stand-in for SpotifyClient.

    Enforces snapshot tokens on positional removal the way Spotify does,
    and records every mutating call for assertions.
    """

    def __init__(self):
        self.collections = {}
        self.tracks = {}
        self.versions = {}
        self.recent = []
        self.playing_uri = None
        self.page_requests = []
        self.removed_batches = []
        self.added = []
        self.removed_uris = []
        self.on_metadata = None
        self.known_tracks = {}

    # Setup helpers

    def add_playlist(self, name, tracks=(), owner_id=USER_ID):
        playlist_id = f"pl_{len(self.collections) + 1}"
        collection = Collection(
            id=playlist_id,
            uri=f"spotify:playlist:{playlist_id}",
            name=name,
            owner_id=owner_id,
        )
        self.collections[playlist_id] = collection
        self.tracks[playlist_id] = list(tracks)
        self.versions[playlist_id] = 0
        return collection

    def snapshot(self, collection):
        return f"{collection.id}-v{self.versions[collection.id]}"

    # Collaborator interface

    def list_page(self, collection, offset, limit, market="from_token"):
        self.page_requests.append((collection.id, offset, limit))
        return list(self.tracks[collection.id][offset:offset + limit])

    def collection_metadata(self, collection):
        if self.on_metadata is not None:
            self.on_metadata(collection)
        return CollectionMetadata(len(self.tracks[collection.id]), self.snapshot(collection))

    def remove_by_position(self, collection, positions, snapshot_token):
        if snapshot_token != self.snapshot(collection):
            raise ConcurrencyConflict(
                "Snapshot token is stale",
                details={"snapshot_id": snapshot_token},
            )
        positions = list(positions)
        if any(not p.uri for p in positions):
            raise SpotifyError("Invalid track uri", details={"http_status": 400})
        tracks = self.tracks[collection.id]
        for position in positions:
            assert tracks[position.index].uri == position.uri
        for index in sorted({p.index for p in positions}, reverse=True):
            del tracks[index]
        self.removed_batches.append([p.index for p in positions])
        self.versions[collection.id] += 1
        return self.snapshot(collection)

    def create_collection(self, name):
        return self.add_playlist(name)

    # Session helpers

    def current_user_id(self):
        return USER_ID

    def playlists(self):
        return list(self.collections.values())

    def recently_played(self, limit=50):
        return list(self.recent[:limit])

    def add_tracks(self, collection, uris, position=None):
        by_uri = dict(self.known_tracks)
        for tracks in self.tracks.values():
            for track in tracks:
                by_uri[track.uri] = track
        for track in self.recent:
            by_uri[track.uri] = track
        new = [by_uri[uri] for uri in uris]
        tracks = self.tracks[collection.id]
        if position is None:
            tracks.extend(new)
        else:
            tracks[position:position] = new
        self.added.append((collection.id, list(uris), position))
        self.versions[collection.id] += 1
        return self.snapshot(collection)

    def remove_uris(self, collection, uris):
        doomed = set(uris)
        self.tracks[collection.id] = [t for t in self.tracks[collection.id] if t.uri not in doomed]
        self.removed_uris.append((collection.id, list(uris)))
        self.versions[collection.id] += 1
        return self.snapshot(collection)

    def playback_context_uri(self):
        return self.playing_uri


@pytest.fixture
def make_track(fake_spotify):
    """Factory for Track objects, registered with the fake so it can add them"""
    def factory(*args, **kwargs):
        track = build_track(*args, **kwargs)
        fake_spotify.known_tracks[track.uri] = track
        return track
    return factory


@pytest.fixture
def fake_spotify():
    """Fresh in-memory Spotify"""
    return FakeSpotify()


@pytest.fixture
def sweeper_settings():
    """Sweeper settings with small sizes for readable tests"""
    return SweeperConfig(
        playlists=("Drive Mix", "Weekly Playlist"),
        history_playlist="Recently Played",
        history_cap=2000,
        batch_size=100,
        page_size=100,
        playing_window=11,
        no_title_match_artists=frozenset(),
    )


@pytest.fixture
def sample_track_data():
    """Sample playlist item as returned by the Spotify API"""
    return {
        'added_at': '2024-01-15T10:30:00Z',
        'track': {
            'id': 'test_track_123',
            'uri': 'spotify:track:test_track_123',
            'name': 'Test Song - 2011 Remaster',
            'artists': [
                {'id': 'artist_123', 'name': 'Test Artist'},
                {'id': 'artist_456', 'name': 'Guest Artist'},
            ],
            'album': {
                'id': 'album_123',
                'name': 'Test Album',
                'artists': [{'id': 'artist_123', 'name': 'Test Artist'}]
            },
            'external_ids': {'isrc': 'GBUM71029604'},
            'linked_from': {
                'id': 'original_track_999',
                'uri': 'spotify:track:original_track_999'
            },
            'duration_ms': 210000,
        }
    }
