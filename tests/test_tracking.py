from edit_history.models import TrackingPolicy
from edit_history.tracking import DEFAULT_EXTENSIONS, parse_list, should_track, should_track_file


def _policy(deny=()):
    return TrackingPolicy(extension_allowlist=list(DEFAULT_EXTENSIONS), path_substring_denylist=list(deny))


def test_parse_list():
    assert parse_list(".MD, .txt,, ") == [".md", ".txt"]
    assert parse_list("") == []


class TestShouldTrack:
    def test_allowlist(self):
        assert should_track("notes/today.md", _policy())
        assert should_track("NOTES/Today.MD", _policy())
        assert not should_track("notes/image.png", _policy())

    def test_archive_never_tracked(self):
        assert not should_track("notes/today.md.edtz", _policy())
        assert not should_track("notes/today.md.edtz", TrackingPolicy())

    def test_denylist_substring(self):
        policy = _policy(deny=["private/"])
        assert not should_track("Private/diary.md", policy)
        assert should_track("public/diary.md", policy)

    def test_empty_allowlist_tracks_everything(self):
        assert should_track("anything.bin", TrackingPolicy())

    def test_empty_path(self):
        assert not should_track("", _policy())

    def test_folder(self, tmp_path):
        folder = tmp_path / "looks_like.md"
        folder.mkdir()
        assert not should_track_file(str(folder), _policy())
        assert should_track_file(str(tmp_path / "real.md"), _policy())
