import os

import pandas as pd

from edit_history.browser import HistorySession
from edit_history.export import export_versions_csv, versions_frame
from edit_history.viz import generate_visualizations

from .conftest import T0, write_doc


def _session(store, tmp_path):
    path = tmp_path / "note.md"
    for i, text in enumerate(["one\n", "one\ntwo\n", "two\n"]):
        write_doc(path, text)
        assert store.on_modify(str(path), mtime_ms=T0 + i * 10_000).stored
    return HistorySession.open(store, str(path))


class TestExport:
    def test_versions_frame(self, store, tmp_path):
        df = versions_frame(_session(store, tmp_path).chain, "two\n")
        assert list(df["chars"]) == [4, 8, 4]
        assert list(df["added_chars"]) == [4, 4, 0]
        assert list(df["removed_chars"]) == [0, 0, 4]
        assert df["kind"].iloc[-1] == "full"
        assert df["ts"].is_monotonic_increasing

    def test_csv_in_run_folder(self, store, tmp_path):
        session = _session(store, tmp_path)
        out = export_versions_csv(session, run_id="r1", runs_root=str(tmp_path / "runs"))
        assert out.endswith(os.path.join("r1", "csv", "versions.csv"))
        df = pd.read_csv(out)
        assert len(df) == 3
        assert os.path.isfile(os.path.join(str(tmp_path / "runs"), "note.md", "r1", "meta.json"))

    def test_csv_explicit_path(self, store, tmp_path):
        out = export_versions_csv(_session(store, tmp_path), out_path=str(tmp_path / "out" / "v.csv"))
        assert os.path.isfile(out)

    def test_charts(self, store, tmp_path):
        loc = generate_visualizations(_session(store, tmp_path), run_id="r1", runs_root=str(tmp_path / "runs"))
        assert os.path.isfile(loc["html"])
        assert os.path.isfile(loc["png"])
