"""
Batched positional removal.

Spotify removes playlist items by absolute position, and every removal shifts
the items behind it. All positions here are computed against one frozen fetch
and submitted highest batch first: removing a batch never moves the positions
of any batch still pending, since those all lie below it.

Before each batch the playlist's snapshot token is read again. The client
raises ConcurrencyConflict if Spotify rejects it; nothing is retried.
"""

from typing import Iterable, Sequence, TypeVar

from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Collection, Track, TrackPosition

logger = get_logger(__name__)

T = TypeVar("T")

# Spotify's limit on items per removal request
DEFAULT_BATCH_SIZE = 100


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split a sequence into consecutive lists of at most `size` items."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def positions_of(playlist_tracks: Sequence[Track], to_remove: Iterable[Track]) -> list[TrackPosition]:
    """
    Every position in `playlist_tracks` holding a track listed in `to_remove`.

    Matching is exact, by uri, so tracks in `to_remove` need not be the same
    objects as those in the playlist. Repeated occurrences are all included.

    Returns:
        Positions in ascending order.
    """
    uris = {t.uri for t in to_remove if t.uri}
    return [
        TrackPosition(index, track.uri)
        for index, track in enumerate(playlist_tracks)
        if track.uri in uris
    ]


def remove_positions(
    client,
    collection: Collection,
    positions: Iterable[TrackPosition],
    batch_size: int = DEFAULT_BATCH_SIZE
) -> list[list[TrackPosition]]:
    """
    Remove the given positions in batches, highest batch first.

    Args:
        client: Provides collection_metadata() and remove_by_position().
        collection: Playlist to modify.
        positions: Positions computed against a single frozen fetch.
        batch_size: Maximum positions per request.

    Returns:
        The batches in the order they were submitted.

    Raises:
        ConcurrencyConflict: If a batch's snapshot token is rejected.
    """
    ordered = sorted(set(positions))
    batches = list(reversed(chunked(ordered, batch_size)))

    for batch in batches:
        metadata = client.collection_metadata(collection)
        logger.debug(
            f"Removing {len(batch)} tracks at positions {batch[0].index}..{batch[-1].index} "
            f"from '{collection.name}' (snapshot {metadata.snapshot_token})"
        )
        client.remove_by_position(collection, batch, metadata.snapshot_token)

    return batches


def remove_tracks(
    client,
    collection: Collection,
    playlist_tracks: Sequence[Track],
    to_remove: Iterable[Track],
    batch_size: int = DEFAULT_BATCH_SIZE
) -> list[list[TrackPosition]]:
    """
    Remove every occurrence of the given tracks from a fully fetched playlist.

    Args:
        playlist_tracks: The playlist's complete track list from one fetch.
        to_remove: Tracks to remove, matched by uri.

    Returns:
        The submitted batches, highest first. Empty if nothing matched.
    """
    positions = positions_of(playlist_tracks, to_remove)
    if not positions:
        return []

    logger.info(f"Removing {len(positions)} tracks from '{collection.name}'")
    return remove_positions(client, collection, positions, batch_size)
