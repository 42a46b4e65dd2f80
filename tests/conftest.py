"""
Pytest configuration and shared fixtures for the buildagent test suite.

Provides a scripted fake of the process probe so watcher behaviour can be
driven without spawning real processes, plus common sink and manager
fixtures.
"""

import shutil
import sys
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Set

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from buildagent.config import manager as config_manager  # noqa: E402
from buildagent.job import BuildManager, CollectingCompletionSink, SentinelFile  # noqa: E402
from buildagent.system import ProcessLookupFailure, ProcessProbe, ProcessWaitFailure  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Fake process probe
# ============================================================================


class FakeHandle:
    """A process that stays alive until the test ends it."""

    def __init__(self, pid: int):
        self.pid = pid
        self.exited = threading.Event()
        self.exit_code: Optional[int] = None
        self.wait_error: Optional[str] = None


class FakeProcessProbe(ProcessProbe):
    """
    Scripted ProcessProbe.

    Every pid is alive until ``finish`` or ``fail_wait`` is called for it,
    except pids marked ``missing``, whose lookup fails.
    """

    def __init__(self):
        self._handles: Dict[int, FakeHandle] = {}
        self._lock = threading.Lock()
        self.missing: Set[int] = set()
        self.lookups = []

    def handle(self, pid: int) -> FakeHandle:
        with self._lock:
            if pid not in self._handles:
                self._handles[pid] = FakeHandle(pid)
            return self._handles[pid]

    def lookup(self, pid: int) -> FakeHandle:
        self.lookups.append(pid)
        if pid in self.missing:
            raise ProcessLookupFailure(pid, f"process {pid} not found")
        return self.handle(pid)

    def wait(self, handle: FakeHandle) -> Optional[int]:
        handle.exited.wait()
        if handle.wait_error:
            raise ProcessWaitFailure(handle.pid, handle.wait_error)
        return handle.exit_code

    def finish(self, pid: int, exit_code: int = 0) -> None:
        handle = self.handle(pid)
        handle.exit_code = exit_code
        handle.exited.set()

    def fail_wait(self, pid: int, message: str) -> None:
        handle = self.handle(pid)
        handle.wait_error = message
        handle.exited.set()


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_probe():
    probe = FakeProcessProbe()
    yield probe
    # Release any watcher still blocked on a fake process.
    with probe._lock:
        handles = list(probe._handles.values())
    for handle in handles:
        handle.exited.set()


@pytest.fixture
def sink():
    return CollectingCompletionSink()


@pytest.fixture
def sentinel(temp_dir):
    return SentinelFile(temp_dir / "build_tmp")


@pytest.fixture
def manager(sink, sentinel, fake_probe):
    """A fresh BuildManager wired to the fake probe."""
    return BuildManager(sink=sink, sentinel=sentinel, probe=fake_probe)


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Each test starts from the default config path with nothing cached."""
    config_manager.clear_config_cache()
    yield
    config_manager._CONFIG_FILE_PATH = config_manager._DEFAULT_CONFIG_FILE_PATH
    config_manager.clear_config_cache()
