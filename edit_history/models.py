from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from . import keys

NO_LIMIT = float("inf")

OutcomeStatus = Literal["stored", "skipped", "failed"]
SkipReason = Literal["rate_limited", "epoch_collision", "no_change", "stale_edit", "not_tracked"]
FailReason = Literal["corrupt_archive", "write_error", "not_a_file", "read_error"]


class VersionEntry(BaseModel):
    key: str               # VersionKey, see keys.py
    payload: bytes         # full UTF-8 text, or patch text for diffs
    compressed_size: int = 0
    stored_date: datetime

    @property
    def epoch_ms(self) -> int:
        return keys.decode_epoch(self.key)

    @property
    def is_full(self) -> bool:
        return keys.is_full(self.key)

    def text(self) -> str:
        return self.payload.decode("utf-8")


class RetentionLimits(BaseModel):
    # NO_LIMIT (inf) means unbounded, never 0
    max_entries: float = NO_LIMIT
    max_age_ms: float = NO_LIMIT
    max_bytes: float = NO_LIMIT
    min_interval_ms: float = NO_LIMIT

    @property
    def manual_only(self) -> bool:
        return self.min_interval_ms == NO_LIMIT


class TrackingPolicy(BaseModel):
    extension_allowlist: List[str] = Field(default_factory=list)      # lowercase, with dot
    path_substring_denylist: List[str] = Field(default_factory=list)  # lowercase


class Outcome(BaseModel):
    status: OutcomeStatus
    reason: Optional[str] = None
    total_entries: int = 0
    evicted: List[str] = Field(default_factory=list)
    key: Optional[str] = None   # key of the stored entry
    message: str = ""

    @property
    def stored(self) -> bool:
        return self.status == "stored"

    @classmethod
    def skipped(cls, reason: SkipReason, total_entries: int = 0, message: str = "") -> "Outcome":
        return cls(status="skipped", reason=reason, total_entries=total_entries, message=message)

    @classmethod
    def failed(cls, reason: FailReason, message: str = "") -> "Outcome":
        return cls(status="failed", reason=reason, message=message)

    def summary(self) -> str:
        if self.status == "stored":
            return f"{self.total_entries} edit" + ("s" if self.total_entries != 1 else "")
        return f"{self.status}: {self.reason}" + (f" ({self.message})" if self.message else "")


class VersionInfo(BaseModel):
    key: str
    epoch_ms: int
    is_full: bool
    label: str
    compressed_size: int = 0


class DiffSpan(BaseModel):
    op: Literal["equal", "insert", "delete"]
    text: str


class SideBySideRow(BaseModel):
    kind: Literal["equal", "insert", "delete", "replace"]
    left_no: Optional[int] = None
    left: str = ""
    right_no: Optional[int] = None
    right: str = ""


class ProvenanceAnnotation(BaseModel):
    target_key: str
    lines: List[str]
    annotation: List[Optional[str]]   # display timestamp per line, None if never stamped
    keys: List[Optional[str]]         # version key per line


class TimelineRun(BaseModel):
    key: Optional[str]
    label: Optional[str]
    first_line: int   # 1-based
    lines: List[str]
