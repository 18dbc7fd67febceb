"""
Full-collection fetching over Spotify's offset-based listings.

The loop stops on the first empty page rather than on the reported total,
because the total can change while the fetch is in progress.
"""

from typing import Callable

from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Collection, Track

logger = get_logger(__name__)

PageSource = Callable[[int, int], list[Track]]


def fetch_all(source: PageSource, page_size: int) -> list[Track]:
    """
    Fetch every item by requesting pages at increasing offsets.

    Args:
        source: Callable taking (offset, limit) and returning one page.
        page_size: Number of items requested per page.

    Returns:
        All items in request order.

    Raises:
        Whatever `source` raises. Nothing is retried.
    """
    tracks: list[Track] = []
    while True:
        page = source(len(tracks), page_size)
        if not page:
            return tracks
        tracks.extend(page)


def fetch_collection(
    client,
    collection: Collection,
    page_size: int,
    market: str | None = "from_token"
) -> list[Track]:
    """
    Fetch a playlist's complete track list in one frozen snapshot.

    Args:
        client: Object providing list_page(collection, offset, limit, market).
        collection: Playlist to read.
        page_size: Tracks per request.
        market: Passed through to list_page on every request.
    """
    tracks = fetch_all(
        lambda offset, limit: client.list_page(collection, offset, limit, market=market),
        page_size
    )
    logger.debug(f"Fetched {len(tracks)} tracks from '{collection.name}'")
    return tracks
