# edit_history/retention.py
from typing import List, Sequence

from loguru import logger

from .models import RetentionLimits, VersionEntry


def select_evictions(entries: Sequence[VersionEntry], byte_size: int,
                     limits: RetentionLimits, now_ms: int, log=None) -> List[str]:
    """
    entries: newest-first. Returns the keys to evict, oldest first.

    Evicts from the oldest end while, for the current oldest remaining entry:
      - the remaining count leaves no room for the incoming entry (>=),
      - it is older than max_age_ms,
      - the running archive size is over max_bytes.
    Only a contiguous oldest suffix is ever evicted.
    """
    log = log or logger
    remaining = list(entries)
    size = byte_size
    evicted: List[str] = []

    while remaining:
        oldest = remaining[-1]
        purge = False

        # A new edit is incoming, so equality already means over the limit
        if len(remaining) >= limits.max_entries:
            log.info(f"Will purge entry {oldest.key} over max count {len(remaining)} >= {limits.max_entries}")
            purge = True

        age_ms = now_ms - oldest.epoch_ms
        if age_ms > limits.max_age_ms:
            log.info(f"Will purge entry {oldest.key} over max age {age_ms / 1000:.0f}s > {limits.max_age_ms / 1000:.0f}s")
            purge = True

        if size > limits.max_bytes:
            log.info(f"Will purge entry {oldest.key} over max size {size} > {limits.max_bytes}")
            purge = True

        if not purge:
            break

        remaining.pop()
        # The size check consumes the entry whichever condition triggered the purge
        size -= oldest.compressed_size
        evicted.append(oldest.key)

    return evicted
