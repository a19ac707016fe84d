# edit_history/tasks/open_history.py
from edit_history import render
from edit_history.browser import HistorySession
from edit_history.config import DEFAULT_ENV_PATH, load_settings
from edit_history.errors import EditHistoryError
from edit_history.store import EditHistoryStore


def _listing(session: HistorySession) -> str:
    out = [session.stats()]
    for i, v in enumerate(session.versions()):
        kind = "full" if v.is_full else "diff"
        out.append(f"{i:>4}  {v.key:<10} {v.label:<20} {kind}")
    return "\n".join(out)


def run(path=None, version=None, layout=None, annotate=False, copy_to=None,
        settings=None, log=None, env_path=DEFAULT_ENV_PATH, progress=None):
    """
    Open the edit history of `path`.
      - no version: list the stored versions (plus the live content if it differs)
      - version: show it diffed against the next older version, in `layout`
      - annotate / layout "timeline": per-line provenance of the version
      - copy_to: write the reconstructed version to that file instead
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

    if version is None:
        return True, _listing(session)

    try:
        key = session.resolve(str(version))
        if copy_to:
            session.copy_to(key, copy_to)
            return True, f"Copied version {key} to {copy_to}"

        layout = layout or settings.diff_layout
        if annotate or layout == "timeline":
            annotation = session.annotate(key, progress=progress)
            return True, render.timeline_to_text(annotation)

        view = session.select(key)
    except EditHistoryError as e:
        return False, str(e)

    header = f"{view.label} ({view.diff_info()})"
    if not view.exact:
        header += f"\nVersion {key} not found, showing the oldest version available"
    return True, header + "\n" + view.render(layout)
