# edit_history/scanner.py
"""
Folder scanning: a notification source for hosts that don't push events.
review_folder() records every tracked file once; watch_folder() polls
modification times and forwards changes through an EditDispatcher.
"""
import asyncio
import os
import time
from typing import Dict, Optional

from loguru import logger

from .dispatch import EditDispatcher
from .paths import normalize_path
from .tracking import is_archive_path

# Folders never worth walking into
SKIP_DIRS = {".git", ".hg", ".svn", "__pycache__", ".obsidian", ".trash"}


def _iter_files(root_path: str, skip_dirs=None):
    skip = SKIP_DIRS if skip_dirs is None else set(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = [d for d in dirnames if d not in skip]
        for fn in filenames:
            full = normalize_path(os.path.join(dirpath, fn))
            if not is_archive_path(full):
                yield full


def snapshot_mtimes(root_path: str, store) -> Dict[str, int]:
    """path -> mtime in ms, for every tracked file under root_path."""
    out = {}
    for full in _iter_files(root_path):
        if not store.is_tracked(full):
            continue
        try:
            out[full] = int(os.path.getmtime(full) * 1000)
        except OSError:
            continue
    return out


def review_folder(root_path: str, store, force: bool = False) -> dict:
    """
    Walk root_path once and record an edit for every tracked file.
    Returns counters by outcome plus the number of files seen.
    """
    counts = {"files_seen": 0, "stored": 0, "skipped": 0, "failed": 0}
    reasons: Dict[str, int] = {}
    total_bytes = 0

    for full in _iter_files(root_path):
        if not store.is_tracked(full):
            continue
        counts["files_seen"] += 1
        try:
            total_bytes += os.path.getsize(full)
        except OSError:
            pass

        outcome = store.on_modify(full, force=force)
        counts[outcome.status] += 1
        if outcome.reason:
            reasons[outcome.reason] = reasons.get(outcome.reason, 0) + 1

    counts["bytes"] = total_bytes
    counts["reasons"] = reasons
    store.log.info(f"Scanned {root_path}: {counts}")
    return counts


async def watch_folder(root_path: str, store, interval: float = 2.0,
                       max_polls: Optional[int] = None, dispatcher: Optional[EditDispatcher] = None,
                       log=None, on_result=None) -> EditDispatcher:
    """
    Poll root_path every `interval` seconds. Changed mtimes become modify
    events, vanished files become delete events. Renames can't be told apart
    from delete + create when polling, so the archive of a renamed file is
    dropped and the new name starts a fresh history.

    Runs forever unless max_polls is given. Returns the dispatcher, drained
    (and closed when created here).
    """
    log = log or logger
    owned = dispatcher is None
    dispatcher = dispatcher or EditDispatcher(store, log=log, on_result=on_result)
    seen = snapshot_mtimes(root_path, store)
    log.info(f"Watching {root_path} ({len(seen)} tracked files)")

    polls = 0
    try:
        while max_polls is None or polls < max_polls:
            await asyncio.sleep(interval)
            polls += 1
            current = snapshot_mtimes(root_path, store)

            for path, mtime in current.items():
                if seen.get(path) != mtime:
                    log.debug(f"Changed: {path}")
                    dispatcher.modify(path, mtime_ms=mtime)
            for path in seen.keys() - current.keys():
                log.debug(f"Gone: {path}")
                dispatcher.delete(path)
            seen = current
    finally:
        if owned:
            await dispatcher.close()
        else:
            await dispatcher.drain()
    return dispatcher


def run_watch(root_path: str, store, interval: float = 2.0, max_polls: Optional[int] = None,
              log=None, on_result=None) -> EditDispatcher:
    """Blocking wrapper for command line use; Ctrl+C stops it."""
    started = time.time()
    try:
        return asyncio.run(watch_folder(root_path, store, interval=interval,
                                        max_polls=max_polls, log=log, on_result=on_result))
    except KeyboardInterrupt:
        (log or logger).info(f"Stopped watching {root_path} after {time.time() - started:.0f}s")
        return None
