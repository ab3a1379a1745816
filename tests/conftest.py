import os
import sys
from pathlib import Path
from typing import Any, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class ManualSource:
    """Pull source whose replies are delivered by the test.

    Each request parks its callback in ``pending`` until the test calls
    :meth:`push` or :meth:`end`.
    """

    def __init__(self) -> None:
        self.pending: Optional[Any] = None
        self.requests = 0
        self.aborts = 0

    def __call__(self, abort, callback) -> None:
        if abort:
            self.aborts += 1
            callback(True)
            return
        assert self.pending is None, "second request while one is outstanding"
        self.requests += 1
        self.pending = callback

    def push(self, item) -> None:
        callback, self.pending = self.pending, None
        assert callback is not None, "no outstanding request"
        callback(None, item)

    def end(self, value=True) -> None:
        callback, self.pending = self.pending, None
        assert callback is not None, "no outstanding request"
        callback(value)


class CountingSource:
    """Wrap a synchronous source and count the requests it receives."""

    def __init__(self, source) -> None:
        self._source = source
        self.requests = 0
        self.aborts = 0

    def __call__(self, abort, callback) -> None:
        if abort:
            self.aborts += 1
        else:
            self.requests += 1
        self._source(abort, callback)


@pytest.fixture
def manual_source():
    return ManualSource


@pytest.fixture
def counting_source():
    return CountingSource
