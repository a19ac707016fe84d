# edit_history/browser.py
"""
Browse session over one document's history. The archive is read once into a
private snapshot, so a concurrent save replacing the archive can't disturb an
in-progress walk.
"""
import os
from typing import Callable, List, Optional

from loguru import logger

from . import keys
from .chain import VersionChain
from .errors import TargetNotFound
from .models import ProvenanceAnnotation, VersionInfo
from .patches import count_diffs, diff_text
from .reconstruct import annotate_provenance, annotate_provenance_async, materialize, materialize_neighbor_pair
from . import render


class VersionView:
    """One selected version: its text, its older neighbour and the diff between them."""

    def __init__(self, key: str, text: str, older_text: str, exact: bool = True):
        self.key = key
        self.text = text
        self.older_text = older_text
        # False when the key was missing and the oldest reconstruction was used
        self.exact = exact
        self.diffs = diff_text(older_text, text)

    @property
    def label(self) -> str:
        return keys.display_label(self.key)

    @property
    def diff_count(self) -> int:
        return count_diffs(self.diffs)

    def diff_info(self) -> str:
        n = self.diff_count
        return f"{n} diff" + ("s" if n != 1 else "")

    def html(self) -> str:
        return render.inline_html(self.older_text, self.text)

    def render(self, layout: str = "inline") -> str:
        return render.render_text(layout, self.older_text, self.text)


class HistorySession:
    def __init__(self, doc_path: str, chain: VersionChain, live: str,
                 archive_size: int = 0, log=None):
        self.doc_path = doc_path
        self.chain = chain
        self.live = live
        self.archive_size = archive_size
        self.log = log or logger

    @classmethod
    def open(cls, store, doc_path: str) -> Optional["HistorySession"]:
        """
        None when the document isn't tracked or has no history yet.
        CorruptArchive / NotAFile propagate to the caller.
        """
        if not store.is_tracked(doc_path):
            store.log.warning(f"Edit history not allowed for {doc_path}")
            return None
        if not store.has_history(doc_path):
            store.log.warning(f"No history file for {doc_path}")
            return None
        chain = store.load(doc_path)
        if not chain:
            store.log.warning("Empty edit history file")
            return None
        # Note this may differ from the newest stored edit (rate limiting)
        try:
            with open(doc_path, "r", encoding="utf-8", errors="replace", newline="") as f:
                live = f.read()
        except OSError as e:
            newest = chain.newest()
            store.log.warning(f"Can't read {doc_path} ({e}), browsing the stored versions only")
            live = newest.text() if newest.is_full else ""
        return cls(doc_path, chain, live, archive_size=chain.byte_size, log=store.log)

    # ---------- listing ----------

    def live_differs(self) -> bool:
        newest = self.chain.newest()
        return newest is None or not newest.is_full or newest.text() != self.live

    def versions(self, include_live: bool = True) -> List[VersionInfo]:
        out = []
        if include_live and self.live_differs():
            out.append(VersionInfo(key=keys.LIVE_KEY, epoch_ms=self._live_epoch(),
                                   is_full=True, label=keys.display_label(keys.LIVE_KEY)))
        for entry in self.chain.entries():
            out.append(VersionInfo(key=entry.key, epoch_ms=entry.epoch_ms, is_full=entry.is_full,
                                   label=keys.display_label(entry.key),
                                   compressed_size=entry.compressed_size))
        return out

    def _live_epoch(self) -> int:
        try:
            return int(os.path.getmtime(self.doc_path) * 1000)
        except OSError:
            return 0

    def stats(self) -> str:
        n = len(self.chain)
        note_bytes = len(self.live.encode("utf-8"))
        return (f"{n} edit" + ("s, " if n != 1 else ", ")
                + f"{self.archive_size} bytes compressed, {note_bytes} note bytes")

    def resolve(self, key_or_index: str) -> str:
        """Accepts a key, "live", or a 0-based index into versions()."""
        if key_or_index in ("live", keys.LIVE_KEY):
            return keys.LIVE_KEY
        if key_or_index.isdigit() and key_or_index not in self.chain:
            versions = self.versions()
            i = int(key_or_index)
            if i < len(versions):
                return versions[i].key
        return key_or_index

    # ---------- reconstruction ----------

    def select(self, key: str) -> VersionView:
        try:
            text, older = materialize_neighbor_pair(self.chain, key, self.live, log=self.log)
            return VersionView(key, text, older)
        except TargetNotFound as e:
            self.log.warning(f"{e}, showing the oldest version available")
            return VersionView(key, e.fallback, "", exact=False)

    def text_of(self, key: str) -> str:
        return materialize(self.chain, key, self.live, log=self.log)

    def copy_to(self, key: str, out_path: str) -> str:
        text = self.text_of(key)
        with open(out_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        self.log.info(f"Copied {key} to {out_path}")
        return out_path

    def annotate(self, key: str, progress: Optional[Callable[[int], None]] = None) -> ProvenanceAnnotation:
        return annotate_provenance(self.chain, key, self.live, progress=progress, log=self.log)

    async def annotate_async(self, key: str,
                             progress: Optional[Callable[[int], None]] = None) -> ProvenanceAnnotation:
        return await annotate_provenance_async(self.chain, key, self.live, progress=progress, log=self.log)
