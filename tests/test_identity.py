"""Test fuzzy track identity"""

from spot_sweeper.sweeper.identity import (
    IdentityResolver,
    keys,
    primary_ids,
    title_key,
    title_of,
)


class TestTitleKey:
    """Test title extraction"""

    def test_strips_suffix_after_first_separator(self, make_track):
        """Test only the part before the first ' - ' is kept"""
        track = make_track("t1", name="Time - 2011 Remaster - Live")
        assert title_of(track) == "Time"
        assert title_key(track) == ("artist_1", "Time")

    def test_hyphen_without_spaces_is_kept(self, make_track):
        """Test hyphenated titles are not split"""
        assert title_of(make_track("t1", name="Re-Wind")) == "Re-Wind"

    def test_uses_first_artist(self, make_track):
        """Test the key uses the first credited artist"""
        track = make_track("t1", name="Song", artist_id="lead")
        assert title_key(track)[0] == "lead"


class TestKeys:
    """Test the full identity key set"""

    def test_includes_every_key_kind(self, make_track):
        """Test ids, external ids and title key are all present"""
        track = make_track("t1", name="Song - Remix", isrc="ISRC1", linked_from="orig")
        assert keys(track) == {"t1", "orig", ("isrc", "ISRC1"), ("artist_1", "Song")}

    def test_missing_linked_from_is_skipped(self, make_track):
        """Test no None key is produced"""
        assert primary_ids(make_track("t1")) == {"t1"}


class TestIdentityResolver:
    """Test the title-match override"""

    def test_title_match_allowed_by_default(self, make_track):
        """Test an empty override allows every track"""
        assert IdentityResolver().title_match_allowed(make_track("t1"))

    def test_override_on_album_artist(self, make_track):
        """Test an album artist in the override disables title matching"""
        resolver = IdentityResolver({"various"})
        track = make_track("t1", artist_id="a1", album_artists=["various"])
        assert not resolver.title_match_allowed(track)

    def test_override_on_track_artist(self, make_track):
        """Test a track artist in the override disables title matching"""
        resolver = IdentityResolver(["a1"])
        assert not resolver.title_match_allowed(make_track("t1", artist_id="a1"))

    def test_override_keeps_id_keys(self, make_track):
        """Test only the title key is dropped"""
        resolver = IdentityResolver(["a1"])
        track = make_track("t1", artist_id="a1", isrc="X")
        assert resolver.keys(track) == {"t1", ("isrc", "X")}
