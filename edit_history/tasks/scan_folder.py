# edit_history/tasks/scan_folder.py
import os

from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.scanner import review_folder
from edit_history.store import EditHistoryStore


def run(root_path=None, force=False, settings=None, log=None, env_path=DEFAULT_ENV_PATH):
    root = root_path or os.getcwd()
    if not os.path.isdir(root):
        return False, f"Not a folder: {root}"
    settings = settings or load_settings(env_path)
    store = EditHistoryStore.from_settings(settings, log=log)

    stats = review_folder(root, store, force=force)
    reasons = ", ".join(f"{k}={v}" for k, v in sorted(stats["reasons"].items()))
    msg = (f"Scan complete. files={stats['files_seen']} stored={stats['stored']} "
           f"skipped={stats['skipped']} failed={stats['failed']}")
    if reasons:
        msg += f" ({reasons})"
    return stats["failed"] == 0, msg
