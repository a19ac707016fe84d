# edit_history/tasks/delete_history.py
from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.store import EditHistoryStore


def run(path=None, settings=None, log=None, env_path=DEFAULT_ENV_PATH):
    if not path:
        return False, "No document given."
    settings = settings or load_settings(env_path)
    store = EditHistoryStore.from_settings(settings, log=log)
    if store.on_delete(path):
        return True, f"Deleted {store.archive_path(path)}"
    return False, f"No edit history to delete for {path}"
