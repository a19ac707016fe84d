from datetime import datetime

from edit_history import keys
from edit_history.models import NO_LIMIT, RetentionLimits, VersionEntry
from edit_history.retention import select_evictions

from .conftest import T0


def _entries(offsets_s, size=10):
    """Newest-first entries at T0 + offset seconds, each `size` compressed bytes."""
    out = []
    for i, s in enumerate(sorted(offsets_s, reverse=True)):
        out.append(VersionEntry(key=keys.encode(T0 + s * 1000, i == 0), payload=b"x",
                                compressed_size=size, stored_date=datetime.now()))
    return out


class TestSelectEvictions:
    def test_unbounded_keeps_everything(self):
        entries = _entries([0, 10, 20])
        assert select_evictions(entries, 30, RetentionLimits(), T0 + 10**9) == []

    def test_max_entries_leaves_room_for_incoming(self):
        entries = _entries([0, 10, 20])
        evicted = select_evictions(entries, 30, RetentionLimits(max_entries=3), T0 + 30_000)
        assert evicted == [keys.encode(T0, False)]

    def test_max_entries_below_limit(self):
        entries = _entries([0, 10])
        assert select_evictions(entries, 20, RetentionLimits(max_entries=3), T0 + 30_000) == []

    def test_max_age(self):
        entries = _entries([0, 60, 90])
        limits = RetentionLimits(max_age_ms=50_000)
        assert select_evictions(entries, 30, limits, T0 + 100_000) == [keys.encode(T0, False)]

    def test_max_bytes_consumes_running_size(self):
        entries = _entries([0, 10, 20], size=100)
        evicted = select_evictions(entries, 300, RetentionLimits(max_bytes=150), T0)
        # 300 > 150, then 200 > 150, then 100 fits
        assert evicted == [keys.encode(T0, False), keys.encode(T0 + 10_000, False)]

    def test_size_decrements_when_another_limit_triggers(self):
        entries = _entries([0, 10, 20], size=100)
        limits = RetentionLimits(max_age_ms=25_000, max_bytes=250)
        # Age drops the oldest; the remaining 200 bytes are within the size limit
        evicted = select_evictions(entries, 300, limits, T0 + 30_000)
        assert evicted == [keys.encode(T0, False)]

    def test_only_oldest_suffix(self):
        entries = _entries([0, 10, 20])
        evicted = select_evictions(entries, 30, RetentionLimits(max_entries=1), T0)
        assert evicted == [keys.encode(T0, False), keys.encode(T0 + 10_000, False),
                           keys.encode(T0 + 20_000, True)]

    def test_no_limit_is_infinite(self):
        assert RetentionLimits().max_entries == NO_LIMIT
        assert RetentionLimits().manual_only
        assert not RetentionLimits(min_interval_ms=0).manual_only
