# edit_history/reporter.py
import sys
from typing import Callable, Optional

from loguru import logger

# Debug levels in increasing severity, as they appear in settings
DEBUG_LEVELS = ["debug", "info", "warn", "error"]
_LOGURU_LEVELS = {"debug": "DEBUG", "info": "INFO", "warn": "WARNING", "error": "ERROR"}

TAG = "EditHistory"


class Reporter:
    """
    Owns one loguru sink at the configured level. Components get `.logger`
    handed to them instead of reading a global level.
    """

    def __init__(self, debug_level: str = "warn", sink=None, tag: str = TAG,
                 replace_default: bool = False):
        level = (debug_level or "warn").strip().lower()
        if level not in DEBUG_LEVELS:
            level = "warn"
        self.debug_level = level
        self.tag = tag
        if replace_default:
            # Drop loguru's catch-all stderr handler (CLI use)
            logger.remove()
        self._handler_id = logger.add(
            sink or sys.stderr,
            level=_LOGURU_LEVELS[level],
            format=f"<level>{tag}[{{level}}]</level>: {{message}}",
            filter=lambda record: (record["extra"].get("tag") == tag
                                   or (record["name"] or "").startswith("edit_history")),
        )
        self.logger = logger.bind(tag=tag)

    def close(self):
        if self._handler_id is not None:
            logger.remove(self._handler_id)
            self._handler_id = None


class ProgressTicker:
    """
    Forwards progress in fixed percentage steps (5% by default) so long loops
    don't flood the caller.
    """

    def __init__(self, callback: Optional[Callable[[int], None]] = None, step: int = 5):
        self.callback = callback
        self.step = step
        self.last = -1

    def update(self, fraction: float):
        if self.callback is None:
            return
        pct = int(max(0.0, min(1.0, fraction)) * 100)
        pct -= pct % self.step
        if pct > self.last:
            self.last = pct
            self.callback(pct)

    def finish(self):
        self.update(1.0)
