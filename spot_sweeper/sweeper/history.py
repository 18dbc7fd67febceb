"""
Logging recent plays into a history playlist.

The history playlist is kept newest first. Recently played tracks that are
not already among its first page are moved (or added) to the top.
"""

from typing import Sequence

from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Collection, Track
from spot_sweeper.sweeper.pagination import fetch_collection

logger = get_logger(__name__)


def _unique_by_uri(tracks: Sequence[Track]) -> list[Track]:
    seen: set[str] = set()
    result: list[Track] = []
    for track in tracks:
        if track.uri and track.uri not in seen:
            seen.add(track.uri)
            result.append(track)
    return result


def log_recent_plays(
    client,
    history: Collection,
    recent: Sequence[Track],
    page_size: int = 100
) -> list[Track]:
    """
    Move recently played tracks to the top of the history playlist.

    Tracks already within the first page are left where they are. The rest
    are removed wherever they occur further down and re-inserted at 0,
    keeping the order of `recent` (newest first).

    Returns:
        The tracks inserted at the top.
    """
    head_uris = {t.uri for t in client.list_page(history, 0, page_size)}
    new_tracks = [t for t in _unique_by_uri(recent) if t.uri not in head_uris]

    if not new_tracks:
        logger.info(f"No new plays to log in '{history.name}'")
        return []

    uris = [t.uri for t in new_tracks]
    client.remove_uris(history, uris)
    client.add_tracks(history, uris, position=0)
    logger.info(f"Logged {len(new_tracks)} recent plays in '{history.name}'")
    return new_tracks


def add_skip_duplicates(
    client,
    collection: Collection,
    tracks: Sequence[Track],
    page_size: int = 100
) -> list[Track]:
    """
    Insert at the top only the tracks not already anywhere in the playlist.

    Returns:
        The tracks inserted.
    """
    existing = {t.uri for t in fetch_collection(client, collection, page_size)}
    new_tracks = [t for t in _unique_by_uri(tracks) if t.uri not in existing]
    if new_tracks:
        client.add_tracks(collection, [t.uri for t in new_tracks], position=0)
    return new_tracks
