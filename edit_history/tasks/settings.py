# edit_history/tasks/settings.py
from edit_history.config import DEFAULT_ENV_PATH, ENV_KEYS, load_env, save_settings


def _parse_assignments(assignments):
    updates = {}
    for item in assignments or []:
        if "=" not in item:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        k, v = item.split("=", 1)
        k = k.strip().upper()
        # Short names are accepted: max_edits -> EDIT_HISTORY_MAX_EDITS
        if not k.startswith("EDIT_HISTORY_"):
            k = "EDIT_HISTORY_" + k
        updates[k] = v.strip()
    return updates


def run(assignments=None, env_path=DEFAULT_ENV_PATH, log=None):
    """Show the managed settings, or update them from KEY=VALUE pairs."""
    try:
        updates = _parse_assignments(assignments)
    except ValueError as e:
        return False, str(e)

    if updates:
        try:
            save_settings(updates, env_path)
        except KeyError as e:
            return False, f"{e.args[0]}. Known settings: {', '.join(ENV_KEYS)}"

    values = load_env(env_path)
    lines = [f"{k}={values[k]}" for k in ENV_KEYS]
    if updates:
        lines.insert(0, f"Updated {len(updates)} setting(s) in {env_path}")
    return True, "\n".join(lines)
