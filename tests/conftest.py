import pytest

from edit_history.config import ENV_KEYS
from edit_history.models import RetentionLimits, TrackingPolicy
from edit_history.store import EditHistoryStore
from edit_history.tracking import DEFAULT_EXTENSIONS

# 2023-11-14T22:13:20Z, a whole second
T0 = 1_700_000_000_000


class Clock:
    def __init__(self, now_ms=T0):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Settings must never leak in from the machine running the tests."""
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def limits():
    return RetentionLimits(min_interval_ms=0)


@pytest.fixture
def policy():
    return TrackingPolicy(extension_allowlist=list(DEFAULT_EXTENSIONS))


@pytest.fixture
def store(limits, policy, clock):
    return EditHistoryStore(limits, policy, clock=clock)


def write_doc(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    return str(path)


def numbered_lines(n, changed=None, word="line"):
    """n lines of text; line `changed` (0-based) gets different content."""
    out = []
    for i in range(n):
        out.append(f"{word} {i} edited\n" if i == changed else f"{word} {i} of the document\n")
    return "".join(out)
