import pytest

from edit_history.errors import CorruptArchive
from edit_history.patches import apply_patch, count_diffs, diff_line_runs, diff_text, make_patch, split_lines

PAIRS = [
    ("", "new document\n"),
    ("old document\n", ""),
    ("line 1\nline 2\nline 3\n", "line 1\nline two\nline 3\nline 4\n"),
    ("ünïcödé ✓\r\n", "unicode ✗\r\n"),
]


@pytest.mark.parametrize("a,b", PAIRS)
def test_patch_applies_back(a, b):
    text, clean = apply_patch(make_patch(a, b), a)
    assert clean
    assert text == b


def test_equal_texts_have_no_patch():
    assert make_patch("same", "same") == ""


def test_bad_patch_text():
    with pytest.raises(CorruptArchive):
        apply_patch("this is not a patch", "x", key="abc")


def test_split_lines():
    assert split_lines("a\nb") == ["a\n", "b"]
    assert split_lines("a\nb\n") == ["a\n", "b\n"]
    assert split_lines("") == []


def test_line_runs():
    runs = diff_line_runs("a\nb\nc\n", "a\nX\nc\n")
    assert sum(count for op, count in runs if op != 1) == 3   # older side
    assert sum(count for op, count in runs if op != -1) == 3  # newer side


def test_count_diffs():
    assert count_diffs(diff_text("abc", "abd")) == 2
    assert count_diffs(diff_text("abc", "abc")) == 0
