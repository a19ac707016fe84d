# edit_history/viz.py
# Zoomable, hoverable timeline of one document's versions using Plotly, plus a
# static Matplotlib PNG. Outputs go to outputs/history_runs/{document}/{run_id}/viz.

import os
from typing import Optional

# Use a non-interactive backend, the CLI may run without a display
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import plotly.express as px
import pandas as pd

from .export import versions_frame
from .paths import ensure_run_dirs, update_meta


def _resolve_viz_paths(doc_path: str, run_id: Optional[str], runs_root: Optional[str]) -> dict:
    run_base, sub = ensure_run_dirs(doc_path, run_id=run_id, runs_root=runs_root)
    out_dir = sub["viz"]
    return {
        "run_base": run_base,
        "html": os.path.join(out_dir, "versions_timeline.html"),
        "png": os.path.join(out_dir, "versions_timeline.png"),
    }


def _write_html(df: pd.DataFrame, path: str, title: str):
    if df.empty:
        with open(path, "w", encoding="utf-8") as f:
            f.write("<html><body><h3>No versions to visualize yet.</h3></body></html>")
        return path

    df = df.copy()
    # Marker size follows how much changed, with a floor so tiny edits stay visible
    df["changed"] = (df["added_chars"] + df["removed_chars"]).clip(lower=1)
    fig = px.scatter(
        df,
        x="ts",
        y="chars",
        color="kind",
        size="changed",
        size_max=24,
        hover_data={
            "key": True,
            "ts": "|%Y-%m-%d %H:%M:%S",
            "chars": True,
            "added_chars": True,
            "removed_chars": True,
            "compressed_size": True,
            "changed": False,
        },
        title=title,
        height=600,
    )
    fig.update_traces(mode="lines+markers", line=dict(width=1))
    fig.update_layout(legend_title_text="Stored as", hovermode="closest")
    fig.update_yaxes(title_text="Characters")
    fig.update_xaxes(title_text="Time")
    fig.write_html(path, include_plotlyjs="cdn")
    return path


def _save_static_png(df: pd.DataFrame, path: str, title: str):
    plt.figure(figsize=(12, 4))
    if not df.empty:
        xs = df["ts"].tolist()
        plt.plot(xs, df["chars"].tolist(), marker="o", linestyle="-", linewidth=1)
        full = df[df["kind"] == "full"]
        if not full.empty:
            plt.scatter(full["ts"].tolist(), full["chars"].tolist(), s=60, marker="s", zorder=3)
    plt.xlabel("Time")
    plt.ylabel("Characters")
    plt.title(f"{title} (static preview)")
    plt.tight_layout()
    plt.savefig(path, dpi=160)
    plt.close()
    return path


def generate_visualizations(session, run_id: Optional[str] = None, runs_root: Optional[str] = None) -> dict:
    """
    Writes the interactive HTML timeline and the static PNG for a
    HistorySession. Returns {"html": ..., "png": ..., "run_base": ...}.
    """
    loc = _resolve_viz_paths(session.doc_path, run_id, runs_root)
    df = versions_frame(session.chain, session.live, log=session.log)
    title = f"Edit history: {os.path.basename(session.doc_path)}"

    _write_html(df, loc["html"], title)
    _save_static_png(df, loc["png"], title)
    update_meta(loc["run_base"], visualizations={"html": loc["html"], "png": loc["png"]})
    session.log.info(f"Wrote timeline charts to {os.path.dirname(loc['html'])}")
    return loc
