# edit_history/tasks/watch_folder.py
import os

from loguru import logger

from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.scanner import run_watch
from edit_history.store import EditHistoryStore


def run(root_path=None, interval=2.0, max_polls=None, settings=None, log=None,
        env_path=DEFAULT_ENV_PATH):
    """Poll a folder and record edits until interrupted (or max_polls)."""
    root = root_path or os.getcwd()
    if not os.path.isdir(root):
        return False, f"Not a folder: {root}"
    settings = settings or load_settings(env_path)
    log = log or logger
    store = EditHistoryStore.from_settings(settings, log=log)

    def _report(event):
        outcome = event.result
        if event.kind != "modify":
            return
        if outcome.status == "failed":
            # Never stops the watch, the document itself is already saved
            log.warning(f"Edit of {event.path} not recorded: {outcome.summary()}")
        elif outcome.stored and settings.show_on_status_bar:
            print(f"{event.path}: {outcome.summary()}", flush=True)

    dispatcher = run_watch(root, store, interval=interval, max_polls=max_polls, log=log, on_result=_report)
    if dispatcher is None:
        return True, f"Stopped watching {root}"
    stored = sum(1 for ev in dispatcher.history
                 if ev.kind == "modify" and ev.result is not None and ev.result.stored)
    failed = sum(1 for ev in dispatcher.history if ev.error is not None)
    return failed == 0, f"Watched {root}: {len(dispatcher.history)} events, {stored} edits stored, {failed} errors"
