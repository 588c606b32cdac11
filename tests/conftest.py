import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make the package importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from slicetable.data.array_source import ArraySource, LazyArraySource  # noqa: E402


ROWS = [
    {"name": "alice", "age": 25},
    {"name": "bob", "age": 30},
    {"name": "carol", "age": 20},
    {"name": "dave", "age": 20},
]


@pytest.fixture
def rows() -> list[dict]:
    return [dict(row) for row in ROWS]


@pytest.fixture
def array_source(rows) -> ArraySource:
    return ArraySource(rows)


@pytest.fixture
def lazy_source(rows) -> LazyArraySource:
    return LazyArraySource(rows)
