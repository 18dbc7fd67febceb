"""
Sweeping engine for spot-sweeper.

Components:
    pagination  - Full playlist fetch until the first empty page
    identity    - Fuzzy track identity (ids, external ids, artist + title)
    reconcile   - Intersection and subtraction of track collections
    mutator     - Batched positional removal, highest batch first
    trimmer     - Capping a playlist's size from the tail
    dedup       - Removing repeated artist + title within one playlist
    playback    - Prefix extension for a playlist that is playing
    history     - Logging recent plays into the history playlist
    session     - Per-run orchestration

Usage:
    from spot_sweeper.sweeper import SweepSession

    session = SweepSession(client, config.sweeper)
    session.run()
"""

from spot_sweeper.sweeper.dedup import dedup, duplicate_positions
from spot_sweeper.sweeper.history import add_skip_duplicates, log_recent_plays
from spot_sweeper.sweeper.identity import IdentityResolver, keys, title_key, title_of
from spot_sweeper.sweeper.mutator import chunked, positions_of, remove_positions, remove_tracks
from spot_sweeper.sweeper.pagination import fetch_all, fetch_collection
from spot_sweeper.sweeper.playback import extend_for_playback
from spot_sweeper.sweeper.reconcile import ReferenceIndex, intersect, subtract
from spot_sweeper.sweeper.session import SweepSession
from spot_sweeper.sweeper.trimmer import trim

__all__ = [
    "fetch_all",
    "fetch_collection",
    "IdentityResolver",
    "keys",
    "title_key",
    "title_of",
    "ReferenceIndex",
    "intersect",
    "subtract",
    "chunked",
    "positions_of",
    "remove_positions",
    "remove_tracks",
    "trim",
    "dedup",
    "duplicate_positions",
    "extend_for_playback",
    "log_recent_plays",
    "add_skip_duplicates",
    "SweepSession",
]
