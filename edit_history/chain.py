# edit_history/chain.py
import zlib
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from . import keys
from .models import VersionEntry


def estimate_compressed_size(payload: bytes) -> int:
    """Raw DEFLATE size, i.e. what the zip member will take."""
    c = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -15)
    return len(c.compress(payload) + c.flush())


def make_entry(key: str, text: str, stored_date: Optional[datetime] = None) -> VersionEntry:
    payload = text.encode("utf-8")
    return VersionEntry(
        key=key,
        payload=payload,
        compressed_size=estimate_compressed_size(payload),
        stored_date=stored_date or datetime.now(),
    )


class VersionChain:
    """
    In-memory snapshot of one document's archive.
    Entries are keyed by member name; ordering always goes through the codec.
    """

    def __init__(self, entries: Iterable[VersionEntry] = (), byte_size: Optional[int] = None):
        self._entries: Dict[str, VersionEntry] = {}
        for e in entries:
            keys.decode_epoch(e.key)  # validates
            self._entries[e.key] = e
        # Size of the archive this snapshot was read from; None until persisted
        self._byte_size = byte_size

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> VersionEntry:
        return self._entries[key]

    def keys(self, descending: bool = True) -> List[str]:
        return keys.sort_keys(self._entries.keys(), descending=descending)

    def entries(self, descending: bool = True) -> List[VersionEntry]:
        return [self._entries[k] for k in self.keys(descending)]

    def newest(self) -> Optional[VersionEntry]:
        ks = self.keys()
        return self._entries[ks[0]] if ks else None

    def oldest(self) -> Optional[VersionEntry]:
        ks = self.keys()
        return self._entries[ks[-1]] if ks else None

    @property
    def byte_size(self) -> int:
        if self._byte_size is not None:
            return self._byte_size
        return sum(e.compressed_size for e in self._entries.values())

    def full_keys(self) -> List[str]:
        return [k for k in self.keys() if keys.is_full(k)]

    def copy(self) -> "VersionChain":
        return VersionChain(self._entries.values(), byte_size=self._byte_size)

    # ---------- mutation (used by the store only) ----------

    def add(self, entry: VersionEntry):
        self._entries[entry.key] = entry
        self._byte_size = None

    def remove(self, key: str) -> VersionEntry:
        entry = self._entries.pop(key)
        if self._byte_size is not None:
            self._byte_size = max(0, self._byte_size - entry.compressed_size)
        return entry

    def replace(self, old_key: str, entry: VersionEntry):
        self._entries.pop(old_key)
        self._entries[entry.key] = entry
        self._byte_size = None
