"""
Fuzzy track identity.

Two tracks are considered the same song when they share any one of:

    - a Spotify id (including the id a relinked track was linked from)
    - an external catalog code, e.g. the same ISRC on another release
    - the first artist id plus the title before any " - " suffix

The last key deliberately folds "Song - Remastered 2011" and
"Song - Live" into "Song". Some artists legitimately release unrelated
songs under the same title; their ids go in the override set, which turns
off the title key for their tracks only.
"""

from typing import Hashable, Iterable

from spot_sweeper.spotify.models import Track

TITLE_SUFFIX_SEPARATOR = " - "

TitleKey = tuple[str, str]


def title_of(track: Track) -> str:
    """The track name with any " - " annotation removed."""
    return track.name.split(TITLE_SUFFIX_SEPARATOR, 1)[0]


def title_key(track: Track) -> TitleKey:
    """(first artist id, title before the first " - ")."""
    return track.first_artist_id, title_of(track)


def primary_ids(track: Track) -> set[str]:
    """The track's own id and, when relinked, the id it was linked from."""
    return {i for i in (track.id, track.linked_from_id) if i}


def external_keys(track: Track) -> set[tuple[str, str]]:
    """External ids as (provider, code) pairs."""
    return {(provider, code) for provider, code in track.external_ids.items()}


def keys(track: Track) -> set[Hashable]:
    """Every identity key of a track."""
    result: set[Hashable] = set(primary_ids(track))
    result |= external_keys(track)
    result.add(title_key(track))
    return result


class IdentityResolver:
    """
    Decides which identity keys apply to a track.

    Attributes:
        no_title_match_artists: Artist ids for which title-key matching is
                                suppressed. Checked against both the track's
                                artists and its album's artists.
    """

    def __init__(self, no_title_match_artists: Iterable[str] = ()) -> None:
        self.no_title_match_artists = frozenset(no_title_match_artists)

    def title_match_allowed(self, track: Track) -> bool:
        if not self.no_title_match_artists:
            return True
        artist_ids = {a.id for a in track.artists} | set(track.album_artist_ids)
        return self.no_title_match_artists.isdisjoint(artist_ids)

    def keys(self, track: Track) -> set[Hashable]:
        result = keys(track)
        if not self.title_match_allowed(track):
            result.discard(title_key(track))
        return result
