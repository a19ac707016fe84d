# edit_history/config.py
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values
from pydantic import BaseModel

from .models import NO_LIMIT, RetentionLimits, TrackingPolicy
from .render import LAYOUTS
from .reporter import DEBUG_LEVELS
from .tracking import parse_list

DEFAULT_ENV_PATH = ".env"

# Managed keys and their defaults (all values are strings, as stored)
DEFAULT_SETTINGS: Dict[str, str] = {
    "EDIT_HISTORY_MIN_SECONDS_BETWEEN_EDITS": "60",
    "EDIT_HISTORY_MAX_EDITS": "0",
    "EDIT_HISTORY_MAX_EDIT_AGE": "0",
    "EDIT_HISTORY_MAX_FILE_SIZE_KB": "0",
    "EDIT_HISTORY_ROOT_FOLDER": "",
    "EDIT_HISTORY_EXTENSION_WHITELIST": ".md, .txt, .csv, .htm, .html",
    "EDIT_HISTORY_PATH_DENYLIST": "",
    "EDIT_HISTORY_SHOW_ON_STATUS_BAR": "true",
    "EDIT_HISTORY_DIFF_LAYOUT": "inline",
    "EDIT_HISTORY_DEBUG_LEVEL": "warn",
}

ENV_KEYS = list(DEFAULT_SETTINGS.keys())


class Settings(BaseModel):
    """Typed view of the settings; always rebuilt from the raw strings."""
    limits: RetentionLimits
    policy: TrackingPolicy
    root_folder: str = ""
    show_on_status_bar: bool = True
    diff_layout: str = "inline"
    debug_level: str = "warn"
    raw: Dict[str, str] = {}


def _positive_int(value: Optional[str]) -> Optional[int]:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _limit(value: Optional[str], scale: int = 1) -> float:
    """'0', '', junk or negative -> NO_LIMIT; otherwise value * scale."""
    n = _positive_int(value)
    return NO_LIMIT if n is None else n * scale


def _bool(value: Optional[str], default: bool) -> bool:
    if value is None or str(value).strip() == "":
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_settings(raw: Dict[str, str]) -> Settings:
    """
    Pure parse/validate step from stored strings to typed settings. Missing
    keys take their defaults.
    """
    values = dict(DEFAULT_SETTINGS)
    values.update({k: v for k, v in raw.items() if k in DEFAULT_SETTINGS and v is not None})

    limits = RetentionLimits(
        min_interval_ms=_limit(values["EDIT_HISTORY_MIN_SECONDS_BETWEEN_EDITS"], 1000),
        max_entries=_limit(values["EDIT_HISTORY_MAX_EDITS"]),
        max_age_ms=_limit(values["EDIT_HISTORY_MAX_EDIT_AGE"], 1000),
        max_bytes=_limit(values["EDIT_HISTORY_MAX_FILE_SIZE_KB"], 1024),
    )
    policy = TrackingPolicy(
        extension_allowlist=parse_list(values["EDIT_HISTORY_EXTENSION_WHITELIST"]),
        path_substring_denylist=parse_list(values["EDIT_HISTORY_PATH_DENYLIST"]),
    )

    layout = values["EDIT_HISTORY_DIFF_LAYOUT"].strip().lower()
    if layout not in LAYOUTS:
        layout = "inline"
    level = values["EDIT_HISTORY_DEBUG_LEVEL"].strip().lower()
    if level not in DEBUG_LEVELS:
        level = "warn"

    return Settings(
        limits=limits,
        policy=policy,
        root_folder=values["EDIT_HISTORY_ROOT_FOLDER"].strip(),
        show_on_status_bar=_bool(values["EDIT_HISTORY_SHOW_ON_STATUS_BAR"], True),
        diff_layout=layout,
        debug_level=level,
        raw=values,
    )


def load_env(env_path: str = DEFAULT_ENV_PATH) -> Dict[str, str]:
    """
    Raw values of the keys we manage: defaults, overlaid by the .env file (if
    present), overlaid by the process environment.
    """
    values = dict(DEFAULT_SETTINGS)
    if Path(env_path).exists():
        for k, v in dotenv_values(env_path).items():
            if k in DEFAULT_SETTINGS and v is not None:
                values[k] = v
    for k in ENV_KEYS:
        if k in os.environ:
            values[k] = os.environ[k]
    return values


def load_settings(env_path: str = DEFAULT_ENV_PATH) -> Settings:
    return parse_settings(load_env(env_path))


def _read_env_file(env_path: str) -> str:
    p = Path(env_path)
    return p.read_text(encoding="utf-8") if p.exists() else ""


def save_env_updates(updates: Dict[str, str], env_path: str = DEFAULT_ENV_PATH) -> None:
    """
    Idempotently update/add only the keys we manage. Keeps comments/other lines.
    """
    p = Path(env_path)
    contents = _read_env_file(env_path)

    lines = contents.splitlines() if contents else []
    # map of key -> index in lines
    idx = {}
    for i, line in enumerate(lines):
        if "=" in line and not line.strip().startswith("#"):
            k = line.split("=", 1)[0].strip()
            idx[k] = i

    for k, v in updates.items():
        if k not in ENV_KEYS:
            raise KeyError(f"Unknown setting {k}")
        if k in idx:
            lines[idx[k]] = f"{k}={v}"
        else:
            lines.append(f"{k}={v}")
            idx[k] = len(lines) - 1

        # keep the live process in sync, the environment wins over the file
        if k in os.environ:
            os.environ[k] = v

    out = "\n".join(lines).rstrip() + ("\n" if lines else "")
    p.write_text(out, encoding="utf-8")


def save_settings(updates: Dict[str, str], env_path: str = DEFAULT_ENV_PATH) -> Settings:
    """Persist, then re-parse everything (no partial updates)."""
    save_env_updates(updates, env_path)
    return load_settings(env_path)
