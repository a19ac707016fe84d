# edit_history/reconstruct.py
"""
History reconstruction.

Every walk starts from the live document and goes newest-first through the
chain: a full entry replaces the running text, a diff entry is patched onto
it. The walks are generators so long chains can be driven step by step
(progress reporting, cooperative yielding, later cancellation).
"""
import asyncio
from typing import Callable, Generator, Iterator, List, Optional, Tuple

from loguru import logger

from . import keys
from .chain import VersionChain
from .errors import TargetNotFound
from .models import ProvenanceAnnotation, VersionEntry
from .patches import DIFF_DELETE, DIFF_EQUAL, DIFF_INSERT, apply_patch, diff_line_runs, split_lines
from .reporter import ProgressTicker

# Yield to the event loop every this many chain steps
CHECKPOINT_EVERY = 25


def iter_versions(chain: VersionChain, live: str, log=None) -> Iterator[Tuple[VersionEntry, str]]:
    """Yields (entry, materialized text) newest-first."""
    log = log or logger
    data = live
    for entry in chain.entries():
        if entry.is_full:
            data = entry.text()
        else:
            data, clean = apply_patch(entry.text(), data, key=entry.key)
            if not clean:
                log.warning(f"Patch for {entry.key} did not apply cleanly")
        yield entry, data


def materialize(chain: VersionChain, target_key: str, live: str, log=None) -> str:
    """
    Text of target_key. LIVE_KEY is the live content itself.
    Raises TargetNotFound (with the oldest reconstruction as .fallback).
    """
    if target_key == keys.LIVE_KEY:
        return live
    keys.decode_epoch(target_key)
    data = live
    for entry, data in iter_versions(chain, live, log=log):
        if entry.key == target_key:
            return data
    raise TargetNotFound(target_key, fallback=data)


def materialize_neighbor_pair(chain: VersionChain, target_key: str, live: str,
                              log=None) -> Tuple[str, str]:
    """
    (target text, text of the entry just older than it).
    The older text is "" when the target is the oldest entry, i.e. history is
    assumed to start from an empty document.
    """
    walk = iter_versions(chain, live, log=log)
    if target_key == keys.LIVE_KEY:
        target = live
    else:
        keys.decode_epoch(target_key)
        data = live
        for entry, data in walk:
            if entry.key == target_key:
                break
        else:
            raise TargetNotFound(target_key, fallback=data)
        target = data
    older = next(walk, None)
    return target, (older[1] if older is not None else "")


# ---------- provenance ----------

def iter_annotate(chain: VersionChain, target_key: str, live: str,
                  label: Callable[[str], str] = keys.display_label,
                  log=None) -> Generator[float, None, ProvenanceAnnotation]:
    """
    Per line of the target version, which saved version most recently
    introduced it. Yields progress in [0, 1]; the annotation is the
    generator's return value.

    Line indices of the target are carried through each step's line diff:
    lines equal between newer and older keep their target index, lines only
    in newer were introduced by newer and get stamped, lines only in older
    don't exist in the target.
    """
    log = log or logger
    walk = iter_versions(chain, live, log=log)
    total = len(chain)

    if target_key == keys.LIVE_KEY:
        newer_key, newer_text, done = keys.LIVE_KEY, live, 0
    else:
        keys.decode_epoch(target_key)
        newer_key = newer_text = None
        done = 0
        data = live
        for entry, data in walk:
            done += 1
            if entry.key == target_key:
                newer_key, newer_text = entry.key, data
                break
        else:
            raise TargetNotFound(target_key, fallback=data)

    lines = split_lines(newer_text)
    stamps: List[Optional[str]] = [None] * len(lines)
    stamp_keys: List[Optional[str]] = [None] * len(lines)
    # mapping[i] = target line index of line i of the current "newer" text
    mapping: List[Optional[int]] = list(range(len(lines)))
    pending = len(lines)

    def _stamp(idx, key):
        nonlocal pending
        if idx is not None and stamp_keys[idx] is None:
            stamp_keys[idx] = key
            stamps[idx] = label(key)
            pending -= 1

    yield done / total if total else 1.0

    for entry, older_text in walk:
        if not pending:
            break
        done += 1
        new_mapping: List[Optional[int]] = []
        pos = 0  # position in newer
        for op, count in diff_line_runs(older_text, newer_text):
            if op == DIFF_EQUAL:
                new_mapping.extend(mapping[pos:pos + count])
                pos += count
            elif op == DIFF_INSERT:
                for idx in mapping[pos:pos + count]:
                    _stamp(idx, newer_key)
                pos += count
            elif op == DIFF_DELETE:
                new_mapping.extend([None] * count)
        mapping = new_mapping
        newer_key, newer_text = entry.key, older_text
        yield done / total

    # Whatever survives to the oldest version was introduced by it
    if pending:
        for idx in mapping:
            _stamp(idx, newer_key)

    log.debug(f"Annotated {len(lines)} lines of {target_key}")
    return ProvenanceAnnotation(target_key=target_key, lines=lines,
                                annotation=stamps, keys=stamp_keys)


def annotate_provenance(chain: VersionChain, target_key: str, live: str,
                        progress: Optional[Callable[[int], None]] = None,
                        label: Callable[[str], str] = keys.display_label,
                        log=None) -> ProvenanceAnnotation:
    """Synchronous driver for iter_annotate; progress gets whole percentages in 5% steps."""
    ticker = ProgressTicker(progress)
    gen = iter_annotate(chain, target_key, live, label=label, log=log)
    while True:
        try:
            ticker.update(next(gen))
        except StopIteration as stop:
            ticker.finish()
            return stop.value


async def annotate_provenance_async(chain: VersionChain, target_key: str, live: str,
                                    progress: Optional[Callable[[int], None]] = None,
                                    label: Callable[[str], str] = keys.display_label,
                                    log=None) -> ProvenanceAnnotation:
    """Same as annotate_provenance, yielding to the event loop at coarse checkpoints."""
    ticker = ProgressTicker(progress)
    gen = iter_annotate(chain, target_key, live, label=label, log=log)
    steps = 0
    while True:
        try:
            ticker.update(next(gen))
        except StopIteration as stop:
            ticker.finish()
            return stop.value
        steps += 1
        if steps % CHECKPOINT_EVERY == 0:
            await asyncio.sleep(0)
