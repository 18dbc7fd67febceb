"""Test within-playlist deduplication"""

from spot_sweeper.spotify.models import Artist, Track
from spot_sweeper.sweeper.dedup import dedup, duplicate_positions
from spot_sweeper.sweeper.reconcile import intersect


class TestDuplicatePositions:
    """Test duplicate_positions()"""

    def test_later_repeats_scheduled_first_kept(self, make_track):
        """Test repeats at 2 and 5 of a key first seen at 1"""
        tracks = [
            make_track("a", name="Other"),
            make_track("b", name="Song"),
            make_track("c", name="Song - Radio Edit"),
            make_track("d", name="Third"),
            make_track("e", name="Fourth"),
            make_track("f", name="Song - Live"),
        ]
        assert [p.index for p in duplicate_positions(tracks)] == [2, 5]

    def test_same_title_other_artist_is_not_duplicate(self, make_track):
        """Test the first artist is part of the key"""
        tracks = [make_track("a", name="Song", artist_id="x"), make_track("b", name="Song", artist_id="y")]
        assert duplicate_positions(tracks) == []

    def test_positions_carry_uri(self, make_track):
        """Test each position holds the uri found there"""
        tracks = [make_track("a", name="S"), make_track("b", name="S")]
        assert duplicate_positions(tracks)[0].uri == "spotify:track:b"

    def test_local_files_without_artist_ids_never_duplicates(self):
        """Test same-titled local files by different artists are both kept"""
        tracks = [
            Track(
                id="",
                uri="spotify:local:Adele::Hello:295",
                name="Hello",
                artists=(Artist(id="", name="Adele"),),
            ),
            Track(
                id="",
                uri="spotify:local:Lionel+Richie::Hello:250",
                name="Hello",
                artists=(Artist(id="", name="Lionel Richie"),),
            ),
        ]

        assert duplicate_positions(tracks) == []
        assert intersect(tracks[:1], tracks[1:]) == []


class TestDedup:
    """Test dedup() against the fake"""

    def test_removes_duplicates_from_single_fetch(self, fake_spotify, make_track):
        """Test one fetch, then positional removal of repeats"""
        tracks = [make_track(f"t{i}", name=f"Song {i % 3}") for i in range(9)]
        playlist = fake_spotify.add_playlist("Weekly Playlist", tracks)

        removed = dedup(fake_spotify, playlist, batch_size=4)

        assert [p.index for p in removed] == [3, 4, 5, 6, 7, 8]
        assert fake_spotify.removed_batches == [[7, 8], [3, 4, 5, 6]]
        assert fake_spotify.tracks[playlist.id] == tracks[:3]
        assert [r[1] for r in fake_spotify.page_requests] == [0, 9]

    def test_nothing_to_remove(self, fake_spotify, make_track):
        """Test a clean playlist is not modified"""
        playlist = fake_spotify.add_playlist("Clean", [make_track("a"), make_track("b")])
        assert dedup(fake_spotify, playlist) == []
        assert fake_spotify.removed_batches == []
