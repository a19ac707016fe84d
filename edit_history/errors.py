# edit_history/errors.py
"""
Error taxonomy. Codec/reconstruction errors stay local to one request;
archive I/O errors are turned into Outcome values / user notices by the store.
"""


class EditHistoryError(Exception):
    """Base class for everything raised by edit_history."""


class InvalidKey(EditHistoryError):
    """Malformed version identifier (prefix is not base-36)."""

    def __init__(self, key: str):
        super().__init__(f"Invalid version key: {key!r}")
        self.key = key


class TargetNotFound(EditHistoryError):
    """Reconstruction requested for a key absent from the chain."""

    def __init__(self, key: str, fallback: str = ""):
        super().__init__(f"Version {key!r} not found in edit history")
        self.key = key
        # Oldest text reconstructed before the walk ran out of entries
        self.fallback = fallback


class CorruptArchive(EditHistoryError):
    """History archive (or one of its members) can't be read."""

    def __init__(self, path: str, reason: str = ""):
        msg = f"Corrupt edit history file {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.path = path


class ArchiveWriteError(EditHistoryError):
    """Persisting the archive failed; nothing was replaced on disk."""

    def __init__(self, path: str, reason: str = ""):
        msg = f"Can't write edit history file {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.path = path


class NotAFile(EditHistoryError):
    """The archive path is taken by something that isn't a regular file."""

    def __init__(self, path: str):
        super().__init__(f"Edit history file is not a file: {path}")
        self.path = path
