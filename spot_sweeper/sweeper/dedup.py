"""
Within-playlist deduplication by artist and title.
"""

from typing import Sequence

from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Collection, Track, TrackPosition
from spot_sweeper.sweeper.identity import TitleKey, title_key
from spot_sweeper.sweeper.mutator import DEFAULT_BATCH_SIZE, remove_positions
from spot_sweeper.sweeper.pagination import fetch_collection

logger = get_logger(__name__)


def duplicate_positions(tracks: Sequence[Track]) -> list[TrackPosition]:
    """
    Positions of every track whose title key already appeared earlier.

    The first occurrence of each key is kept. Tracks without a uri or a
    first artist id (local files) have no reliable key and are never
    scheduled.
    """
    seen: set[TitleKey] = set()
    duplicates: list[TrackPosition] = []
    for index, track in enumerate(tracks):
        if not track.uri or not track.first_artist_id:
            continue
        key = title_key(track)
        if key in seen:
            duplicates.append(TrackPosition(index, track.uri))
        else:
            seen.add(key)
    return duplicates


def dedup(
    client,
    collection: Collection,
    batch_size: int = DEFAULT_BATCH_SIZE,
    page_size: int = 100
) -> list[TrackPosition]:
    """
    Fetch a playlist once and remove every later duplicate.

    Returns:
        The removed positions, ascending.
    """
    tracks = fetch_collection(client, collection, page_size)
    duplicates = duplicate_positions(tracks)

    for position in duplicates:
        logger.debug(f"Duplicate at {position.index}: {tracks[position.index].display_name}")

    if duplicates:
        logger.info(f"Removing {len(duplicates)} duplicates from '{collection.name}'")
        remove_positions(client, collection, duplicates, batch_size)
    else:
        logger.info(f"No duplicates in '{collection.name}'")

    return duplicates
