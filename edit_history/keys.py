# edit_history/keys.py
# Version keys: base-36 epoch seconds, "$" suffix when the member holds a full copy.
import re
from datetime import datetime
from functools import cmp_to_key
from typing import Iterable, List

from .errors import InvalidKey

FULL_MARKER = "$"
# Virtual key for the live (possibly unsaved) document content
LIVE_KEY = "@live"

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE36 = re.compile(r"^[0-9a-zA-Z]+$")


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_DIGITS[r])
    return "".join(reversed(out))


def encode(epoch_ms: int, is_full: bool) -> str:
    """Truncate to whole seconds, base-36 encode, append the marker for full copies."""
    if epoch_ms < 0:
        raise ValueError(f"epoch must be >= 0, got {epoch_ms}")
    return _to_base36(int(epoch_ms) // 1000) + (FULL_MARKER if is_full else "")


def decode_epoch(key: str) -> int:
    """Epoch in milliseconds (always a whole second)."""
    prefix = key[:-1] if key.endswith(FULL_MARKER) else key
    if not _BASE36.match(prefix):
        raise InvalidKey(key)
    return int(prefix, 36) * 1000


def is_full(key: str) -> bool:
    return key.endswith(FULL_MARKER)


def as_diff(key: str) -> str:
    return encode(decode_epoch(key), False)


def compare(a: str, b: str) -> int:
    """Chronological order of two keys; keys are variable length so never compare strings."""
    ea, eb = decode_epoch(a), decode_epoch(b)
    return (ea > eb) - (ea < eb)


def sort_keys(keys: Iterable[str], descending: bool = True) -> List[str]:
    return sorted(keys, key=cmp_to_key(compare), reverse=descending)


def same_second(key: str, epoch_ms: int) -> bool:
    return decode_epoch(key) == (int(epoch_ms) // 1000) * 1000


def display_label(key: str, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Local time label for a key, the way the history browser lists versions."""
    if key == LIVE_KEY:
        return "current (unsaved)"
    return datetime.fromtimestamp(decode_epoch(key) / 1000).strftime(fmt)
