# edit_history/render.py
"""
Rendering adapters: turn a (older, newer) pair or a provenance annotation
into display structures. No widgets here, only data plus two plain
renderings (HTML fragments and terminal text).
"""
import html
from typing import List, Tuple

from .models import DiffSpan, ProvenanceAnnotation, SideBySideRow, TimelineRun
from .patches import DIFF_DELETE, DIFF_EQUAL, DIFF_INSERT, diff_lines, diff_text, op_name, pretty_html

LAYOUTS = ("inline", "side_by_side", "top_bottom", "timeline")


# ---------- inline ----------

def inline(older: str, newer: str) -> List[DiffSpan]:
    """Character-level spans, deletions and insertions interleaved."""
    return [DiffSpan(op=op_name(op), text=text) for op, text in diff_text(older, newer)]


def inline_html(older: str, newer: str) -> str:
    return pretty_html(diff_text(older, newer))


# ---------- side by side ----------

def side_by_side(older: str, newer: str) -> List[SideBySideRow]:
    """
    Line rows: left is the older version, right the newer one. A delete run
    followed by an insert run is paired up into "replace" rows.
    """
    rows: List[SideBySideRow] = []
    left_no = right_no = 0
    runs = diff_lines(older, newer)
    i = 0
    while i < len(runs):
        op, lines = runs[i]
        if op == DIFF_EQUAL:
            for line in lines:
                left_no += 1
                right_no += 1
                rows.append(SideBySideRow(kind="equal", left_no=left_no, left=line,
                                          right_no=right_no, right=line))
        elif op == DIFF_DELETE and i + 1 < len(runs) and runs[i + 1][0] == DIFF_INSERT:
            deleted, inserted = lines, runs[i + 1][1]
            for j in range(max(len(deleted), len(inserted))):
                row = SideBySideRow(kind="replace")
                if j < len(deleted):
                    left_no += 1
                    row.left_no, row.left = left_no, deleted[j]
                if j < len(inserted):
                    right_no += 1
                    row.right_no, row.right = right_no, inserted[j]
                rows.append(row)
            i += 1
        elif op == DIFF_DELETE:
            for line in lines:
                left_no += 1
                rows.append(SideBySideRow(kind="delete", left_no=left_no, left=line))
        else:
            for line in lines:
                right_no += 1
                rows.append(SideBySideRow(kind="insert", right_no=right_no, right=line))
        i += 1
    return rows


# ---------- top / bottom ----------

def top_bottom(older: str, newer: str) -> Tuple[List[DiffSpan], List[DiffSpan]]:
    """
    Two panes from one diff: the top shows the older text with its deletions,
    the bottom the newer text with its insertions.
    """
    top: List[DiffSpan] = []
    bottom: List[DiffSpan] = []
    for span in inline(older, newer):
        if span.op in ("equal", "delete"):
            top.append(span)
        if span.op in ("equal", "insert"):
            bottom.append(span)
    return top, bottom


# ---------- timeline ----------

def timeline(annotation: ProvenanceAnnotation) -> List[TimelineRun]:
    """Consecutive lines stamped by the same version grouped into one run."""
    runs: List[TimelineRun] = []
    for i, (line, key, label) in enumerate(zip(annotation.lines, annotation.keys, annotation.annotation)):
        if runs and runs[-1].key == key:
            runs[-1].lines.append(line)
        else:
            runs.append(TimelineRun(key=key, label=label, first_line=i + 1, lines=[line]))
    return runs


def timeline_html(annotation: ProvenanceAnnotation) -> str:
    out = []
    for run in timeline(annotation):
        body = html.escape("".join(run.lines)).replace("\n", "<br>")
        out.append(f'<div class="edit-run"><span class="edit-date">{html.escape(run.label or "")}</span>'
                   f'<div class="edit-lines">{body}</div></div>')
    return "".join(out)


# ---------- terminal text ----------

def spans_to_text(spans: List[DiffSpan]) -> str:
    """[-deleted-] and {+inserted+} markers, like wdiff."""
    out = []
    for span in spans:
        if span.op == "delete":
            out.append("[-" + span.text + "-]")
        elif span.op == "insert":
            out.append("{+" + span.text + "+}")
        else:
            out.append(span.text)
    return "".join(out)


def side_by_side_to_text(rows: List[SideBySideRow], width: int = 60) -> str:
    marks = {"equal": " ", "insert": ">", "delete": "<", "replace": "|"}
    out = []
    for row in rows:
        left = row.left.rstrip("\n")[:width].ljust(width)
        right = row.right.rstrip("\n")[:width]
        ln = str(row.left_no) if row.left_no else ""
        rn = str(row.right_no) if row.right_no else ""
        out.append(f"{ln:>5} {left} {marks[row.kind]} {rn:>5} {right}".rstrip())
    return "\n".join(out)


def top_bottom_to_text(top: List[DiffSpan], bottom: List[DiffSpan]) -> str:
    rule = "-" * 40
    return "\n".join([spans_to_text(top), rule, spans_to_text(bottom)])


def timeline_to_text(annotation: ProvenanceAnnotation) -> str:
    width = max((len(a or "") for a in annotation.annotation), default=0)
    out = []
    prev = object()
    for line, key, label in zip(annotation.lines, annotation.keys, annotation.annotation):
        shown = (label or "") if key != prev else ""
        prev = key
        out.append(f"{shown:<{width}} | {line.rstrip(chr(10))}")
    return "\n".join(out)


def render_text(layout: str, older: str, newer: str) -> str:
    if layout == "side_by_side":
        return side_by_side_to_text(side_by_side(older, newer))
    if layout == "top_bottom":
        return top_bottom_to_text(*top_bottom(older, newer))
    return spans_to_text(inline(older, newer))
