"""Test logging recent plays into the history playlist"""

from spot_sweeper.sweeper.history import add_skip_duplicates, log_recent_plays


class TestLogRecentPlays:
    """Test log_recent_plays()"""

    def test_moves_new_plays_to_top(self, fake_spotify, make_track):
        """Test plays not in the first page are moved to position 0"""
        old = [make_track(f"old{i}") for i in range(5)]
        history = fake_spotify.add_playlist("Recently Played", old)
        recent = [make_track("new1"), old[0], make_track("new2"), old[4]]

        logged = log_recent_plays(fake_spotify, history, recent, page_size=3)

        # old4 sits beyond the first page, so it moves up as well
        assert [t.id for t in logged] == ["new1", "new2", "old4"]
        assert [t.id for t in fake_spotify.tracks[history.id]] == [
            "new1", "new2", "old4", "old0", "old1", "old2", "old3",
        ]

    def test_nothing_new(self, fake_spotify, make_track):
        """Test no mutation when every play is already on top"""
        old = [make_track("a"), make_track("b")]
        history = fake_spotify.add_playlist("Recently Played", old)

        assert log_recent_plays(fake_spotify, history, [old[1]]) == []
        assert fake_spotify.added == []
        assert fake_spotify.removed_uris == []

    def test_repeated_plays_logged_once(self, fake_spotify, make_track):
        """Test the same track played twice is inserted once"""
        history = fake_spotify.add_playlist("Recently Played")
        song = make_track("s")

        log_recent_plays(fake_spotify, history, [song, make_track("t"), song])

        assert [t.id for t in fake_spotify.tracks[history.id]] == ["s", "t"]


class TestAddSkipDuplicates:
    """Test add_skip_duplicates()"""

    def test_only_absent_tracks_added(self, fake_spotify, make_track):
        """Test tracks anywhere in the playlist are skipped"""
        existing = [make_track(f"e{i}") for i in range(150)]
        playlist = fake_spotify.add_playlist("Collected", existing)

        added = add_skip_duplicates(fake_spotify, playlist, [existing[120], make_track("n")])

        assert [t.id for t in added] == ["n"]
        assert fake_spotify.tracks[playlist.id][0].id == "n"
