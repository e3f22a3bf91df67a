"""
Pytest configuration for directory trigger tests.
"""

import os
import time
from pathlib import Path
from typing import Callable

import pytest

from watchtrigger.triggers import DirectoryTrigger, TriggerConfig


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "posix: relies on '/' separated absolute paths"
    )


def pytest_collection_modifyitems(config, items):
    if os.sep == "/":
        return
    skip = pytest.mark.skip(reason="posix path semantics only")
    for item in items:
        if "posix" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def watch_root(tmp_path: Path) -> Path:
    """Resolved temporary directory to watch."""
    root = tmp_path.resolve() / "watch"
    root.mkdir()
    return root


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 10.0, interval: float = 0.05) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait


@pytest.fixture
def trigger():
    """Initialized (not started) trigger for job '1'; always shut down."""
    t = DirectoryTrigger()
    t.init(TriggerConfig(job_id="1", check_interval=0.1))
    yield t
    t.stop()
    t.join(timeout=5.0)
