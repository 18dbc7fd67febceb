"""
Size cap for a growing playlist.

New plays are prepended to the history playlist, so its oldest entries sit at
the end. Each pass removes at most one batch from just past the cap, then
looks at the playlist again, which keeps working if plays arrive mid-trim.
"""

from spot_sweeper.core.exceptions import SpotifyError
from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Collection, TrackPosition
from spot_sweeper.sweeper.mutator import DEFAULT_BATCH_SIZE

logger = get_logger(__name__)


def trim(
    client,
    collection: Collection,
    cap: int,
    batch_size: int = DEFAULT_BATCH_SIZE
) -> list[list[TrackPosition]]:
    """
    Remove tail tracks until the playlist holds at most `cap` tracks.

    Each iteration:
        1. Re-read total and snapshot token
        2. Stop when total <= cap
        3. Read the tail page at offset `cap` for the uris Spotify expects
        4. Remove positions [cap, min(cap + batch_size - 1, total - 1)]

    Returns:
        The removed batches, in submission order.

    Raises:
        ConcurrencyConflict: If a snapshot token is rejected.
        SpotifyError: If a track past the cap is unavailable. Spotify
                      needs a uri for each removed position, so such a
                      playlist cannot be trimmed until the item is removed
                      by hand.
    """
    if cap < 0:
        raise ValueError(f"Cap must not be negative, got {cap}")

    batches: list[list[TrackPosition]] = []
    while True:
        metadata = client.collection_metadata(collection)
        if metadata.total <= cap:
            logger.debug(f"'{collection.name}' holds {metadata.total} tracks (cap {cap})")
            return batches

        last = min(cap + batch_size - 1, metadata.total - 1)
        page = client.list_page(collection, cap, last - cap + 1, market=None)
        if not page:
            # Total was stale; nothing lives past the cap
            return batches

        batch = [TrackPosition(cap + offset, track.uri) for offset, track in enumerate(page)]
        unavailable = [p.index for p in batch if not p.uri]
        if unavailable:
            raise SpotifyError(
                f"Cannot trim '{collection.name}': unavailable tracks at positions "
                f"{unavailable} have no uri to remove by",
                details={"playlist_id": collection.id, "positions": unavailable}
            )
        logger.debug(
            f"Trimming '{collection.name}': total {metadata.total}, "
            f"positions {cap}..{batch[-1].index} (snapshot {metadata.snapshot_token})"
        )
        client.remove_by_position(collection, batch, metadata.snapshot_token)
        batches.append(batch)
