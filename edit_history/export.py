# edit_history/export.py
import os
from datetime import datetime
from typing import List, Optional

import pandas as pd

from .chain import VersionChain
from .patches import DIFF_DELETE, DIFF_INSERT, count_diffs, diff_text
from .paths import ensure_run_dirs, update_meta
from .reconstruct import iter_versions

COLUMNS = ["key", "ts", "kind", "compressed_size", "chars", "added_chars", "removed_chars", "diffs"]


def versions_frame(chain: VersionChain, live: str, log=None) -> pd.DataFrame:
    """
    One row per stored version, oldest first. added/removed are character
    counts against the next older version (the oldest is compared to "").
    """
    walked = list(iter_versions(chain, live, log=log))
    rows: List[dict] = []
    for i, (entry, text) in enumerate(walked):
        older = walked[i + 1][1] if i + 1 < len(walked) else ""
        diffs = diff_text(older, text)
        added = sum(len(t) for op, t in diffs if op == DIFF_INSERT)
        removed = sum(len(t) for op, t in diffs if op == DIFF_DELETE)
        rows.append({
            "key": entry.key,
            "ts": datetime.fromtimestamp(entry.epoch_ms / 1000),
            "kind": "full" if entry.is_full else "diff",
            "compressed_size": entry.compressed_size,
            "chars": len(text),
            "added_chars": added,
            "removed_chars": removed,
            "diffs": count_diffs(diffs),
        })
    df = pd.DataFrame(rows, columns=COLUMNS)
    return df.iloc[::-1].reset_index(drop=True)


def export_versions_csv(session, run_id: Optional[str] = None, runs_root: Optional[str] = None,
                        out_path: Optional[str] = None) -> str:
    """
    Write the versions table of a HistorySession as CSV. Without out_path it
    goes to outputs/history_runs/{document}/{run_id}/csv/versions.csv and the
    run's meta.json is updated.
    """
    df = versions_frame(session.chain, session.live, log=session.log)
    if out_path is None:
        run_base, sub = ensure_run_dirs(session.doc_path, run_id=run_id, runs_root=runs_root)
        out_path = os.path.join(sub["csv"], "versions.csv")
        update_meta(run_base, versions_csv=out_path, versions=len(df))
    else:
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    df.to_csv(out_path, index=False, date_format="%Y-%m-%d %H:%M:%S")
    session.log.info(f"Wrote {len(df)} versions to {out_path}")
    return out_path
