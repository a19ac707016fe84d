# edit_history/tasks/export_history.py
from edit_history.browser import HistorySession
from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.errors import EditHistoryError
from edit_history.export import export_versions_csv
from edit_history.paths import new_run_id
from edit_history.store import EditHistoryStore
from edit_history.viz import generate_visualizations


def run(path=None, output_file=None, charts=True, run_id=None, runs_root=None,
        settings=None, log=None, env_path=DEFAULT_ENV_PATH):
    """
    Export a row-per-version CSV of a document's history and (unless
    charts=False) an interactive HTML + static PNG timeline. Without
    output_file everything lands in one run folder:
        outputs/history_runs/{document}/{run_id}/{csv,viz}
    """
    if not path:
        return False, "No document given."
    settings = settings or load_settings(env_path)
    store = EditHistoryStore.from_settings(settings, log=log)

    try:
        session = HistorySession.open(store, path)
    except EditHistoryError as e:
        return False, f"Cannot open edit history: {e}"
    if session is None:
        return False, f"No edit history for {path}"

    rid = run_id or new_run_id()
    csv_path = export_versions_csv(session, run_id=rid, runs_root=runs_root, out_path=output_file)
    msg = f"Versions CSV: {csv_path}"
    if charts:
        loc = generate_visualizations(session, run_id=rid, runs_root=runs_root)
        msg += f"\nTimeline: {loc['html']}\nPreview: {loc['png']}"
    return True, msg
