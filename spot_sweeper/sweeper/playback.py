"""
Removal adjustments for a playlist that is currently playing.

If tracks near the head of a playing playlist are removed with gaps between
them, the player can skip past a track that should have become current.
Once removal touches the first `window` tracks, everything before the first
removed track is removed too, so playback resumes at the first survivor.
"""

from typing import Sequence

from spot_sweeper.core.logger import get_logger
from spot_sweeper.spotify.models import Track

logger = get_logger(__name__)

DEFAULT_PLAYING_WINDOW = 11


def extend_for_playback(
    tracks: Sequence[Track],
    matches: Sequence[Track],
    window: int = DEFAULT_PLAYING_WINDOW
) -> list[Track]:
    """
    Extend a removal set into an unbroken prefix of the playing window.

    Unavailable items (no uri) in the prefix cannot be removed by position
    and are left in place, so the prefix is unbroken except at those items.

    Args:
        tracks: The playlist's tracks in current order.
        matches: Tracks selected for removal.
        window: Number of leading tracks considered.

    Returns:
        The prefix before the earliest matched window track, followed by
        the original matches. Unchanged if no match falls in the window.
    """
    matched_uris = {t.uri for t in matches if t.uri}
    head = list(tracks[:window])

    first = next((i for i, t in enumerate(head) if t.uri in matched_uris), None)
    if first is None or first == 0:
        return list(matches)

    prefix = [t for t in head[:first] if t.uri and t.uri not in matched_uris]
    unavailable = [i for i, t in enumerate(head[:first]) if not t.uri]
    if unavailable:
        logger.warning(f"Playlist is playing; unavailable tracks at {unavailable} stay ahead of the first match")
    logger.debug(f"Playlist is playing; also removing {len(prefix)} tracks ahead of the first match")
    return prefix + list(matches)
