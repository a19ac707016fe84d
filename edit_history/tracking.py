# edit_history/tracking.py
import os

from .archive import EDIT_HISTORY_FILE_EXT
from .models import TrackingPolicy

# ---------------------------
# Default extension allowlist
# ---------------------------

DEFAULT_EXTENSIONS = [".md", ".txt", ".csv", ".htm", ".html"]


def parse_list(value: str) -> list:
    """'.md, .TXT,,' -> ['.md', '.txt']"""
    items = []
    for part in (value or "").split(","):
        part = part.strip().lower()
        if part:
            items.append(part)
    return items


def is_archive_path(path: str) -> bool:
    # The archive's own write notification must never be recorded
    return path.lower().endswith(EDIT_HISTORY_FILE_EXT)


def should_track(path: str, policy: TrackingPolicy) -> bool:
    """
    True if an edit history archive should be kept for this path.
    Pure: only looks at the path string.
    """
    if not path or is_archive_path(path):
        return False
    lowered = path.replace("\\", "/").lower()
    if any(s in lowered for s in policy.path_substring_denylist):
        return False
    if not policy.extension_allowlist:
        return True
    name = os.path.basename(lowered)
    return any(name.endswith(ext) for ext in policy.extension_allowlist)


def should_track_file(path: str, policy: TrackingPolicy) -> bool:
    """should_track plus: folders never have an edit history."""
    if os.path.isdir(path):
        return False
    return should_track(path, policy)
