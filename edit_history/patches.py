# edit_history/patches.py
# Thin layer over diff-match-patch so the rest of the package never touches dmp objects directly.
from typing import List, Tuple

from diff_match_patch import diff_match_patch

from .errors import CorruptArchive

DIFF_DELETE = diff_match_patch.DIFF_DELETE
DIFF_INSERT = diff_match_patch.DIFF_INSERT
DIFF_EQUAL = diff_match_patch.DIFF_EQUAL

_OP_NAMES = {DIFF_DELETE: "delete", DIFF_INSERT: "insert", DIFF_EQUAL: "equal"}

_dmp = diff_match_patch()


def make_patch(base: str, target: str) -> str:
    """
    Patch text describing `target` in terms of `base`; "" when they are equal.
    Stored diffs are backward: base is the newer content, target the older one.
    """
    patches = _dmp.patch_make(base, target)
    if not patches:
        return ""
    return _dmp.patch_toText(patches)


def apply_patch(patch_text: str, data: str, key: str = "") -> Tuple[str, bool]:
    """Returns (patched text, all hunks applied)."""
    try:
        patches = _dmp.patch_fromText(patch_text)
    except ValueError as e:
        raise CorruptArchive(key or "<patch>", f"invalid patch text ({e})")
    text, results = _dmp.patch_apply(patches, data)
    return text, all(results)


def diff_text(older: str, newer: str, semantic: bool = True) -> List[Tuple[int, str]]:
    """Character diff from older to newer, optionally cleaned up for humans."""
    diffs = _dmp.diff_main(older, newer)
    if semantic:
        _dmp.diff_cleanupSemantic(diffs)
    return diffs


def split_lines(text: str) -> List[str]:
    """Split keeping "\\n", the same way diff-match-patch's line mode does."""
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def diff_line_runs(older: str, newer: str) -> List[Tuple[int, int]]:
    """
    Line-mode diff from older to newer as (op, line count) runs.
    Each line is hashed to one char first so counts are exact.
    """
    chars1, chars2, _line_array = _dmp.diff_linesToChars(older, newer)
    diffs = _dmp.diff_main(chars1, chars2, False)
    return [(op, len(chunk)) for op, chunk in diffs]


def diff_lines(older: str, newer: str) -> List[Tuple[int, List[str]]]:
    """Line-mode diff from older to newer as (op, lines) runs."""
    chars1, chars2, line_array = _dmp.diff_linesToChars(older, newer)
    diffs = _dmp.diff_main(chars1, chars2, False)
    return [(op, [line_array[ord(c)] for c in chunk]) for op, chunk in diffs]


def op_name(op: int) -> str:
    return _OP_NAMES[op]


def count_diffs(diffs) -> int:
    """Number of insert/delete runs, what the browser reports as "N diffs"."""
    return sum(1 for op, _ in diffs if op != DIFF_EQUAL)


def pretty_html(diffs) -> str:
    """diff_prettyHtml without its inline styles."""
    html = []
    for op, data in diffs:
        text = (data.replace("&", "&amp;").replace("<", "&lt;")
                .replace(">", "&gt;").replace("\n", "&para;<br>"))
        if op == DIFF_INSERT:
            html.append(f"<ins>{text}</ins>")
        elif op == DIFF_DELETE:
            html.append(f"<del>{text}</del>")
        else:
            html.append(f"<span>{text}</span>")
    return "".join(html)
