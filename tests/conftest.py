"""Pytest configuration and fixtures for all tests."""

import os
import tempfile
from collections.abc import Iterable

import pytest

# Keep log files out of the user's home directory. Set before any flightcore
# module is imported, since modules create their loggers at import time.
os.environ.setdefault("FLIGHTCORE_LOG_DIR", tempfile.mkdtemp(prefix="flightcore-logs-"))


class SequenceRandom:
    """Random source that returns scripted values in order.

    Once the script runs out it keeps returning ``fallback``.
    """

    def __init__(self, values: Iterable[float] = (), fallback: float = 0.999) -> None:
        self.values = list(values)
        self.fallback = fallback
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.fallback


@pytest.fixture
def sequence_random():
    """Factory for scripted random sources."""
    return SequenceRandom


@pytest.fixture
def never_fail():
    """Random source whose draws never trigger a failure."""
    return SequenceRandom()
