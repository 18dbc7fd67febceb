"""
Spotify module for spot-sweeper.

Provides the spotipy-backed client and the immutable models the
sweeping engine works with.

Usage:
    from spot_sweeper.spotify import SpotifyClient, Track, Collection

    client = SpotifyClient.from_config(config.spotify)
"""

from spot_sweeper.spotify.client import SpotifyClient
from spot_sweeper.spotify.models import (
    Artist,
    Collection,
    CollectionMetadata,
    Track,
    TrackPosition,
    linked_from_id,
)

__all__ = [
    "SpotifyClient",
    "Artist",
    "Track",
    "Collection",
    "CollectionMetadata",
    "TrackPosition",
    "linked_from_id",
]
