# edit_history/tasks/save_edit.py
from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.store import EditHistoryStore


def run(path=None, settings=None, log=None, env_path=DEFAULT_ENV_PATH):
    """Force-save the current content of `path`, bypassing the rate gate."""
    if not path:
        return False, "No document given."
    settings = settings or load_settings(env_path)
    store = EditHistoryStore.from_settings(settings, log=log)

    if not store.is_tracked(path):
        return False, f"Edit history not allowed for {path}"

    outcome = store.on_modify(path, force=True)
    if outcome.status == "failed":
        return False, f"Edit not saved: {outcome.summary()}"
    if outcome.status == "skipped":
        return True, f"Nothing saved: {outcome.summary()}"
    msg = f"Saved edit {outcome.key} of {path}"
    if settings.show_on_status_bar:
        msg += f"\n{outcome.summary()}"
    return True, msg
