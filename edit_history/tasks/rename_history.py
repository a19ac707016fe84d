# edit_history/tasks/rename_history.py
from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.store import EditHistoryStore


def run(path=None, new_path=None, settings=None, log=None, env_path=DEFAULT_ENV_PATH):
    """Move a document's archive after the document itself was renamed."""
    if not path or not new_path:
        return False, "Both the old and the new path are required."
    settings = settings or load_settings(env_path)
    store = EditHistoryStore.from_settings(settings, log=log)
    if store.on_rename(path, new_path):
        return True, f"Moved edit history to {store.archive_path(new_path)}"
    return False, f"No edit history moved for {path}"
