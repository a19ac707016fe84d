import io
import os
from datetime import datetime
from zipfile import ZipFile

import pytest

from edit_history import archive, keys
from edit_history.chain import VersionChain, make_entry
from edit_history.errors import CorruptArchive, NotAFile

from .conftest import T0


def _chain():
    return VersionChain([
        make_entry(keys.encode(T0, False), "@@ -1 +1 @@\n-b\n+a\n", datetime(2023, 11, 14, 10, 0, 1)),
        make_entry(keys.encode(T0 + 10_000, True), "b", datetime(2023, 11, 14, 10, 0, 11)),
    ])


class TestArchive:
    def test_round_trip(self, tmp_path):
        path = str(tmp_path / "note.md.edtz")
        size = archive.save_chain(path, _chain())
        assert size == os.path.getsize(path)

        chain = archive.load_chain(path)
        assert chain.keys() == _chain().keys()
        assert chain.newest().text() == "b"
        assert chain.byte_size == size
        # DOS dates keep even seconds only
        assert chain.newest().stored_date == datetime(2023, 11, 14, 10, 0, 10)

    def test_members_oldest_first(self):
        with ZipFile(io.BytesIO(archive.chain_to_bytes(_chain()))) as z:
            assert z.namelist() == _chain().keys(descending=False)

    def test_no_temp_files_left(self, tmp_path):
        archive.save_chain(str(tmp_path / "note.md.edtz"), _chain())
        assert os.listdir(tmp_path) == ["note.md.edtz"]

    def test_missing_is_empty(self, tmp_path):
        assert len(archive.load_chain(str(tmp_path / "none.edtz"))) == 0

    def test_garbage(self, tmp_path):
        path = tmp_path / "bad.edtz"
        path.write_bytes(b"garbage")
        with pytest.raises(CorruptArchive):
            archive.load_chain(str(path))

    def test_bad_member_name(self, tmp_path):
        path = tmp_path / "bad.edtz"
        with ZipFile(str(path), "w") as z:
            z.writestr("not-a-key", "x")
        with pytest.raises(CorruptArchive):
            archive.load_chain(str(path))

    def test_not_a_file(self, tmp_path):
        path = tmp_path / "dir.edtz"
        path.mkdir()
        with pytest.raises(NotAFile):
            archive.load_chain(str(path))
        with pytest.raises(NotAFile):
            archive.save_chain(str(path), _chain())

    def test_zip_date_clamped(self):
        assert archive._zip_date_time(datetime(1970, 1, 1)) == (1980, 1, 1, 0, 0, 0)
        assert archive._zip_date_time(datetime(2020, 5, 6, 7, 8, 9)) == (2020, 5, 6, 7, 8, 8)

    def test_rename_replaces_target(self, tmp_path):
        old, new = str(tmp_path / "a.edtz"), str(tmp_path / "sub" / "b.edtz")
        archive.save_chain(old, _chain())
        assert archive.rename_archive(old, new)
        assert not os.path.exists(old)
        assert archive.load_chain(new).keys() == _chain().keys()
        assert not archive.rename_archive(old, new)

    def test_delete(self, tmp_path):
        path = str(tmp_path / "a.edtz")
        archive.save_chain(path, _chain())
        assert archive.delete_archive(path)
        assert not archive.delete_archive(path)
