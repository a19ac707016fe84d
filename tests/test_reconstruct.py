import asyncio

import pytest

from edit_history import keys
from edit_history.chain import VersionChain
from edit_history.errors import InvalidKey, TargetNotFound
from edit_history.models import RetentionLimits
from edit_history.reconstruct import (
    annotate_provenance,
    annotate_provenance_async,
    materialize,
    materialize_neighbor_pair,
)
from edit_history.store import record_edit

from .conftest import T0, numbered_lines

V1 = "a\nb\n"
V2 = "a\nb\nc\n"
V3 = "a\nX\nc\n"


def _chain(*texts):
    limits = RetentionLimits(min_interval_ms=0)
    chain = VersionChain()
    for i, text in enumerate(texts):
        record_edit(chain, text, T0 + i * 10_000, False, limits, now_ms=T0 + i * 10_000)
    return chain


class TestMaterialize:
    def test_live_key_is_live_content(self):
        chain = _chain(V1, V2)
        assert materialize(chain, keys.LIVE_KEY, "unsaved") == "unsaved"

    def test_each_version(self):
        chain = _chain(V1, V2, V3)
        k3, k2, k1 = chain.keys()
        assert materialize(chain, k1, V3) == V1
        assert materialize(chain, k2, V3) == V2
        assert materialize(chain, k3, V3) == V3

    def test_missing_key_falls_back_to_oldest(self):
        big1 = numbered_lines(30)
        big2 = numbered_lines(30, changed=3)
        chain = _chain(big1, big2)
        with pytest.raises(TargetNotFound) as e:
            materialize(chain, keys.encode(T0 + 999_000, True), big2)
        assert e.value.fallback == big1

    def test_invalid_key(self):
        with pytest.raises(InvalidKey):
            materialize(_chain(V1), "not-a-key", V1)

    def test_neighbor_pair(self):
        chain = _chain(V1, V2, V3)
        k3, k2, k1 = chain.keys()
        assert materialize_neighbor_pair(chain, k2, V3) == (V2, V1)
        assert materialize_neighbor_pair(chain, k3, V3) == (V3, V2)

    def test_neighbor_pair_of_oldest_is_against_empty(self):
        chain = _chain(V1, V2)
        assert materialize_neighbor_pair(chain, chain.keys()[-1], V2) == (V1, "")

    def test_neighbor_pair_of_sole_entry(self):
        chain = _chain(V1)
        assert materialize_neighbor_pair(chain, chain.keys()[0], V1) == (V1, "")


class TestAnnotate:
    def test_lines_stamped_by_introducing_version(self):
        chain = _chain(V1, V2, V3)
        k3, k2, k1 = chain.keys()
        annotation = annotate_provenance(chain, k3, V3)
        assert annotation.lines == ["a\n", "X\n", "c\n"]
        assert annotation.keys == [k1, k3, k2]
        assert annotation.annotation == [keys.display_label(k) for k in (k1, k3, k2)]

    def test_older_target(self):
        chain = _chain(V1, V2, V3)
        k3, k2, k1 = chain.keys()
        annotation = annotate_provenance(chain, k2, V3)
        assert annotation.keys == [k1, k1, k2]

    def test_live_lines(self):
        chain = _chain(V1, V2)
        k2, k1 = chain.keys()
        live = V2 + "d\n"
        annotation = annotate_provenance(chain, keys.LIVE_KEY, live)
        assert annotation.keys == [k1, k1, k2, keys.LIVE_KEY]

    def test_sole_entry(self):
        chain = _chain(V1)
        (k1,) = chain.keys()
        annotation = annotate_provenance(chain, k1, V1)
        assert annotation.keys == [k1, k1]

    def test_custom_label(self):
        chain = _chain(V1)
        annotation = annotate_provenance(chain, chain.keys()[0], V1, label=lambda k: "v:" + k)
        assert annotation.annotation[0] == "v:" + chain.keys()[0]

    def test_missing_target(self):
        chain = _chain(V1)
        with pytest.raises(TargetNotFound):
            annotate_provenance(chain, keys.encode(T0 + 500_000, True), V1)

    def test_progress_in_steps(self):
        texts = [numbered_lines(10, changed=i) for i in range(10)]
        chain = _chain(*texts)
        seen = []
        annotate_provenance(chain, chain.keys()[0], texts[-1], progress=seen.append)
        assert seen == sorted(set(seen))
        assert all(p % 5 == 0 for p in seen)
        assert seen[-1] == 100

    def test_async_matches_sync(self):
        chain = _chain(V1, V2, V3)
        key = chain.keys()[0]
        expected = annotate_provenance(chain, key, V3)
        got = asyncio.run(annotate_provenance_async(chain, key, V3))
        assert got == expected
