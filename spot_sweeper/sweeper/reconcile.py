"""
Set algebra over track collections under fuzzy identity.

A ReferenceIndex is built once from the reference side, after which every
candidate is classified with a handful of set lookups:

    index = ReferenceIndex.build(recent_tracks, resolver)
    to_remove = [t for t in playlist_tracks if index.matches(t)]

intersect() and subtract() wrap this and preserve the candidate order.
"""

from dataclasses import dataclass, field
from typing import Iterable

from spot_sweeper.spotify.models import Track
from spot_sweeper.sweeper.identity import (
    IdentityResolver,
    external_keys,
    primary_ids,
    title_of,
)


def _is_placeholder(track: Track) -> bool:
    return not track.uri and not track.id


@dataclass
class ReferenceIndex:
    """
    Lookup structures derived from a reference collection.

    Attributes:
        ids: Track ids and linked-from ids.
        external_ids: (provider, code) pairs.
        titles_by_artist: First artist id to the set of titles by that artist.
        resolver: Decides whether a candidate may match by title.
    """
    ids: set[str] = field(default_factory=set)
    external_ids: set[tuple[str, str]] = field(default_factory=set)
    titles_by_artist: dict[str, set[str]] = field(default_factory=dict)
    resolver: IdentityResolver = field(default_factory=IdentityResolver)

    @classmethod
    def build(cls, reference: Iterable[Track], resolver: IdentityResolver | None = None) -> "ReferenceIndex":
        index = cls(resolver=resolver or IdentityResolver())
        for track in reference:
            if _is_placeholder(track):
                continue
            index.ids |= primary_ids(track)
            index.external_ids |= external_keys(track)
            if track.first_artist_id:
                index.titles_by_artist.setdefault(track.first_artist_id, set()).add(title_of(track))
        return index

    def matches(self, track: Track) -> bool:
        """
        True if the track shares an identity key with the reference.

        The artist override only disables the title comparison; id and
        external-id matches always count.
        """
        if _is_placeholder(track):
            return False
        if track.id in self.ids or (track.linked_from_id and track.linked_from_id in self.ids):
            return True
        if not self.external_ids.isdisjoint(external_keys(track)):
            return True
        if not self.resolver.title_match_allowed(track):
            return False
        titles = self.titles_by_artist.get(track.first_artist_id)
        return bool(titles) and title_of(track) in titles


def intersect(
    reference: Iterable[Track],
    target: Iterable[Track],
    resolver: IdentityResolver | None = None
) -> list[Track]:
    """Tracks of `target`, in order, that match at least one reference track."""
    index = ReferenceIndex.build(reference, resolver)
    return [t for t in target if index.matches(t)]


def subtract(
    a: Iterable[Track],
    b: Iterable[Track],
    resolver: IdentityResolver | None = None
) -> list[Track]:
    """Tracks of `a`, in order, that match no track of `b`."""
    index = ReferenceIndex.build(b, resolver)
    return [t for t in a if not index.matches(t)]
