# edit_history/store.py
"""
Diff-chain store.

The host only tells us about an edit after the document has been written, so
the pre-edit text is never available to diff against. Instead the newest
version is always kept in full, and when a new edit arrives that full copy is
folded into a backward diff against the incoming text:

    before:  a  <- b  <- [C]          ([X] = full, others = diffs)
    after:   a  <- b  <-  c  <- [D]

record_edit() is the pure fold/append step on an in-memory chain;
EditHistoryStore wraps it with paths, tracking, archive I/O and logging.
"""
import os
import time
from datetime import datetime
from typing import Optional

from loguru import logger

from . import archive, keys
from .chain import VersionChain, estimate_compressed_size, make_entry
from .errors import ArchiveWriteError, CorruptArchive, NotAFile
from .models import Outcome, RetentionLimits, TrackingPolicy, VersionEntry
from .patches import make_patch
from .paths import archive_path_for
from .retention import select_evictions
from .tracking import should_track, should_track_file


def _now_ms() -> int:
    return int(time.time() * 1000)


def record_edit(chain: VersionChain, new_content: str, new_epoch_ms: int, force: bool,
                limits: RetentionLimits, now_ms: Optional[int] = None, log=None) -> Outcome:
    """
    Fold the newest full entry into a diff against new_content and append
    new_content in full. The chain is only mutated when the outcome is "stored".
    """
    log = log or logger
    now_ms = _now_ms() if now_ms is None else now_ms
    newest = chain.newest()

    # Rate gate. Forced saves (explicit user request) bypass it
    if not force:
        if limits.manual_only:
            log.debug("Manual save only, ignoring edit")
            return Outcome.skipped("rate_limited", len(chain), "manual save only")
        if newest is not None:
            elapsed = new_epoch_ms - newest.epoch_ms
            if elapsed < limits.min_interval_ms:
                log.debug(f"Need to pass {(limits.min_interval_ms - elapsed) / 1000:.0f}s between edits, ignoring")
                return Outcome.skipped("rate_limited", len(chain))

    new_key = keys.encode(new_epoch_ms, True)

    # Checked against the newest entry before eviction, which may drop it
    if newest is not None:
        if keys.same_second(newest.key, new_epoch_ms):
            # Same key would overwrite the previous version
            log.info("Delaying entry due to colliding epochs")
            return Outcome.skipped("epoch_collision", len(chain))

        if keys.decode_epoch(new_key) < newest.epoch_ms:
            log.warning(f"Edit at {new_key} is older than stored entry {newest.key}, ignoring")
            return Outcome.skipped("stale_edit", len(chain))

    # Retention pre-pass, anticipating the incoming entry
    evicted = select_evictions(chain.entries(), chain.byte_size, limits, now_ms, log=log)
    evicted_set = set(evicted)
    remaining = [e for e in chain.entries() if e.key not in evicted_set]

    folded: Optional[VersionEntry] = None
    most_recent = remaining[0] if remaining else None

    if most_recent is not None:
        if not most_recent.is_full:
            # Its content can't be rebuilt from here, keep it as is
            log.warning(f"Most recent entry {most_recent.key} is not stored in full, not folding")
        else:
            prev_text = most_recent.text()
            patch = make_patch(new_content, prev_text)
            if not patch:
                log.info("No changes detected, ignoring")
                return Outcome.skipped("no_change", len(chain))

            # Only replace with the diff when it actually saves space
            if len(patch) < len(prev_text):
                payload = patch.encode("utf-8")
                folded = VersionEntry(
                    key=keys.as_diff(most_recent.key),
                    payload=payload,
                    compressed_size=estimate_compressed_size(payload),
                    stored_date=most_recent.stored_date,
                )

    # Commit: nothing above touched the chain
    for key in evicted:
        log.info(f"Purging entry {key}")
        chain.remove(key)
    if folded is not None:
        log.info(f"Storing {folded.key} as a diff of {len(folded.payload)} chars")
        chain.replace(most_recent.key, folded)
    log.info(f"Storing {new_key}")
    chain.add(make_entry(new_key, new_content, datetime.fromtimestamp(new_epoch_ms / 1000)))

    return Outcome(status="stored", total_entries=len(chain), evicted=evicted, key=new_key)


class EditHistoryStore:
    """
    Reacts to host notifications (modify / rename / delete) for documents
    under the current settings. Every method returns or logs; none of them
    raise on archive problems, since the document save itself must never fail
    because of its history.
    """

    def __init__(self, limits: RetentionLimits, policy: TrackingPolicy,
                 root_folder: str = "", log=None, reset_corrupt: bool = False,
                 clock=None):
        self.limits = limits
        self.policy = policy
        self.root_folder = root_folder
        self.log = log or logger
        # Treat an unreadable archive as empty (drops the old history)
        self.reset_corrupt = reset_corrupt
        self.clock = clock or _now_ms

    @classmethod
    def from_settings(cls, settings, log=None, **kw) -> "EditHistoryStore":
        return cls(settings.limits, settings.policy, settings.root_folder, log=log, **kw)

    def archive_path(self, doc_path: str) -> str:
        return archive_path_for(doc_path, self.root_folder)

    def is_tracked(self, doc_path: str) -> bool:
        return should_track_file(doc_path, self.policy)

    def load(self, doc_path: str) -> VersionChain:
        """Private snapshot of a document's chain; raises CorruptArchive / NotAFile."""
        return archive.load_chain(self.archive_path(doc_path))

    def has_history(self, doc_path: str) -> bool:
        try:
            return archive.exists(self.archive_path(doc_path))
        except NotAFile:
            return False

    # ---------- host notifications ----------

    def on_modify(self, doc_path: str, content: Optional[str] = None,
                  mtime_ms: Optional[int] = None, force: bool = False) -> Outcome:
        self.log.info(f"vault modify {doc_path}")
        if not self.is_tracked(doc_path):
            self.log.debug(f"Ignoring non whitelisted file {doc_path}")
            return Outcome.skipped("not_tracked")

        zip_path = self.archive_path(doc_path)
        try:
            chain = archive.load_chain(zip_path)
        except NotAFile as e:
            self.log.error(str(e))
            return Outcome.failed("not_a_file", str(e))
        except CorruptArchive as e:
            if not self.reset_corrupt:
                self.log.error(f"{e}, not recording edit")
                return Outcome.failed("corrupt_archive", str(e))
            self.log.warning(f"{e}, starting a new history (previous edits are lost)")
            chain = VersionChain()

        if content is None or mtime_ms is None:
            try:
                if content is None:
                    with open(doc_path, "r", encoding="utf-8", errors="replace", newline="") as f:
                        content = f.read()
                if mtime_ms is None:
                    mtime_ms = int(os.path.getmtime(doc_path) * 1000)
            except OSError as e:
                self.log.error(f"Can't read {doc_path}: {e}")
                return Outcome.failed("read_error", str(e))

        outcome = record_edit(chain, content, mtime_ms, force, self.limits,
                              now_ms=self.clock(), log=self.log)
        if not outcome.stored:
            return outcome

        try:
            archive.save_chain(zip_path, chain)
        except (ArchiveWriteError, NotAFile) as e:
            self.log.error(str(e))
            return Outcome.failed("write_error", str(e))
        return outcome

    def on_rename(self, old_path: str, new_path: str) -> bool:
        """Move the archive along with the document. True if an archive was moved."""
        self.log.info(f"vault rename {old_path} -> {new_path}")
        if not (should_track(old_path, self.policy) or should_track(new_path, self.policy)):
            self.log.debug(f"Ignoring non whitelisted file {new_path}")
            return False
        old_zip, new_zip = self.archive_path(old_path), self.archive_path(new_path)
        if old_zip == new_zip:
            return False
        try:
            moved = archive.rename_archive(old_zip, new_zip)
        except (ArchiveWriteError, NotAFile) as e:
            self.log.error(str(e))
            return False
        if moved:
            self.log.info(f"Renamed edit history file {old_zip} to {new_zip}")
        return moved

    def on_delete(self, doc_path: str) -> bool:
        self.log.info(f"vault delete {doc_path}")
        if not should_track(doc_path, self.policy):
            self.log.debug(f"Ignoring non whitelisted file {doc_path}")
            return False
        zip_path = self.archive_path(doc_path)
        try:
            deleted = archive.delete_archive(zip_path)
        except (ArchiveWriteError, NotAFile) as e:
            self.log.error(str(e))
            return False
        if deleted:
            self.log.info(f"Deleted edit history file {zip_path}")
        return deleted
