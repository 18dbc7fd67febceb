"""Test the spotipy wrapper and its error mapping"""

from unittest.mock import Mock

import pytest
import requests
from spotipy.exceptions import SpotifyException

from spot_sweeper.core.exceptions import (
    ConcurrencyConflict,
    NotFound,
    SpotifyError,
    TransportFailure,
)
from spot_sweeper.spotify.client import SpotifyClient
from spot_sweeper.spotify.models import Collection, TrackPosition


@pytest.fixture
def spotify():
    return Mock()


@pytest.fixture
def client(spotify):
    return SpotifyClient(spotify)


@pytest.fixture
def playlist():
    return Collection(id='pl1', uri='spotify:playlist:pl1', name='Drive Mix', owner_id='me')


class TestListPage:
    """Test list_page()"""

    def test_converts_items(self, client, spotify, playlist, sample_track_data):
        """Test items become Tracks and the market is passed through"""
        spotify.playlist_items.return_value = {'items': [sample_track_data]}

        page = client.list_page(playlist, 100, 50)

        assert [t.id for t in page] == ['test_track_123']
        spotify.playlist_items.assert_called_once_with(
            'pl1', limit=50, offset=100, market='from_token', additional_types=['track']
        )

    def test_unavailable_item_kept_as_placeholder(self, client, spotify, playlist):
        """Test items without a track keep their position"""
        spotify.playlist_items.return_value = {'items': [{'track': None}]}

        page = client.list_page(playlist, 0, 100)

        assert len(page) == 1
        assert page[0].uri == ''

    def test_empty_page(self, client, spotify, playlist):
        spotify.playlist_items.return_value = {'items': []}
        assert client.list_page(playlist, 0, 100) == []


class TestMutations:
    """Test removal and metadata calls"""

    def test_collection_metadata(self, client, spotify, playlist):
        """Test total and snapshot are read with a field filter"""
        spotify.playlist.return_value = {'snapshot_id': 's1', 'tracks': {'total': 7}}

        metadata = client.collection_metadata(playlist)

        assert metadata.total == 7
        assert metadata.snapshot_token == 's1'
        spotify.playlist.assert_called_once_with('pl1', fields='snapshot_id,tracks.total')

    def test_remove_by_position_groups_by_uri(self, client, spotify, playlist):
        """Test positions are sent as uri + positions items"""
        spotify.playlist_remove_specific_occurrences_of_items.return_value = {'snapshot_id': 's2'}
        positions = [TrackPosition(3, 'u:a'), TrackPosition(9, 'u:b'), TrackPosition(12, 'u:a')]

        assert client.remove_by_position(playlist, positions, 's1') == 's2'
        spotify.playlist_remove_specific_occurrences_of_items.assert_called_once_with(
            'pl1',
            [{'uri': 'u:a', 'positions': [3, 12]}, {'uri': 'u:b', 'positions': [9]}],
            snapshot_id='s1'
        )

    def test_stale_snapshot_is_concurrency_conflict(self, client, spotify, playlist):
        """Test a snapshot rejection maps to ConcurrencyConflict"""
        spotify.playlist_remove_specific_occurrences_of_items.side_effect = SpotifyException(
            400, -1, 'Invalid snapshot id'
        )

        with pytest.raises(ConcurrencyConflict) as exc_info:
            client.remove_by_position(playlist, [TrackPosition(0, 'u:a')], 'old')
        assert exc_info.value.details['snapshot_id'] == 'old'

    def test_add_tracks_in_chunks(self, client, spotify, playlist):
        """Test more than 100 uris are inserted in order"""
        spotify.playlist_add_items.return_value = {'snapshot_id': 's'}
        uris = [f'u:{i}' for i in range(150)]

        client.add_tracks(playlist, uris, position=0)

        calls = spotify.playlist_add_items.call_args_list
        assert calls[0].args == ('pl1', uris[:100])
        assert calls[0].kwargs == {'position': 0}
        assert calls[1].args == ('pl1', uris[100:])
        assert calls[1].kwargs == {'position': 100}


class TestErrorMapping:
    """Test translation of spotipy and requests failures"""

    def test_not_found(self, client, spotify, playlist):
        spotify.playlist.side_effect = SpotifyException(404, -1, 'Not found')
        with pytest.raises(NotFound):
            client.collection_metadata(playlist)

    def test_server_error_is_transport_failure(self, client, spotify, playlist):
        spotify.playlist_items.side_effect = SpotifyException(502, -1, 'Bad gateway')
        with pytest.raises(TransportFailure):
            client.list_page(playlist, 0, 100)

    def test_connection_error_is_transport_failure(self, client, spotify, playlist):
        spotify.playlist_items.side_effect = requests.exceptions.ConnectionError('reset')
        with pytest.raises(TransportFailure):
            client.list_page(playlist, 0, 100)

    def test_rate_limit_not_retried(self, client, spotify, playlist):
        """Test a 429 surfaces immediately"""
        spotify.playlist_items.side_effect = SpotifyException(429, -1, 'Too many requests')
        with pytest.raises(SpotifyError) as exc_info:
            client.list_page(playlist, 0, 100)
        assert exc_info.value.is_rate_limit
        assert spotify.playlist_items.call_count == 1

    def test_auth_error_flagged(self, client, spotify):
        spotify.current_user.side_effect = SpotifyException(401, -1, 'Expired')
        with pytest.raises(SpotifyError) as exc_info:
            client.current_user_id()
        assert exc_info.value.is_auth_error

    def test_snapshot_error_on_read_is_not_conflict(self, client, spotify, playlist):
        """Test only mutating calls raise ConcurrencyConflict"""
        spotify.playlist.side_effect = SpotifyException(409, -1, 'Conflict')
        with pytest.raises(SpotifyError) as exc_info:
            client.collection_metadata(playlist)
        assert not isinstance(exc_info.value, ConcurrencyConflict)


class TestSessionHelpers:
    """Test library helpers"""

    def test_playlists_paginates_to_empty(self, client, spotify):
        """Test playlists are listed until an empty page"""
        spotify.current_user_playlists.side_effect = [
            {'items': [{'id': 'a', 'name': 'A'}, {'id': 'b', 'name': 'B'}]},
            {'items': []},
        ]

        assert [p.name for p in client.playlists()] == ['A', 'B']
        assert spotify.current_user_playlists.call_args_list[1].kwargs == {'limit': 50, 'offset': 2}

    def test_recently_played(self, client, spotify, sample_track_data):
        spotify.current_user_recently_played.return_value = {'items': [sample_track_data]}
        assert [t.id for t in client.recently_played()] == ['test_track_123']

    def test_playback_context_uri(self, client, spotify):
        spotify.current_playback.return_value = {'is_playing': True, 'context': {'uri': 'spotify:playlist:pl1'}}
        assert client.playback_context_uri() == 'spotify:playlist:pl1'

    def test_nothing_playing(self, client, spotify):
        spotify.current_playback.return_value = None
        assert client.playback_context_uri() is None

    def test_current_user_id_cached(self, client, spotify):
        spotify.current_user.return_value = {'id': 'me'}
        assert client.current_user_id() == 'me'
        assert client.current_user_id() == 'me'
        assert spotify.current_user.call_count == 1
