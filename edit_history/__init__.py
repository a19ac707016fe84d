# edit_history/__init__.py
# Export the primary entry points so tasks and hosts can import them cleanly.

from .archive import EDIT_HISTORY_FILE_EXT
from .browser import HistorySession, VersionView
from .config import Settings, load_settings, parse_settings
from .dispatch import EditDispatcher
from .keys import LIVE_KEY
from .models import NO_LIMIT, Outcome, RetentionLimits, TrackingPolicy
from .reconstruct import annotate_provenance, materialize, materialize_neighbor_pair
from .store import EditHistoryStore, record_edit

__all__ = [
    "EDIT_HISTORY_FILE_EXT",
    "EditDispatcher",
    "EditHistoryStore",
    "HistorySession",
    "LIVE_KEY",
    "NO_LIMIT",
    "Outcome",
    "RetentionLimits",
    "Settings",
    "TrackingPolicy",
    "VersionView",
    "annotate_provenance",
    "load_settings",
    "materialize",
    "materialize_neighbor_pair",
    "parse_settings",
    "record_edit",
]
