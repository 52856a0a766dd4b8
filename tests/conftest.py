"""
Pytest configuration for utilkit tests.

Automatically adds project root to sys.path so that 'from utilkit...' imports work.
Defines markers and shared fixtures.
"""
import gc
import sys
import pytest
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from utilkit.core.config import reset_settings, set_memory_manager
from utilkit.core.connectors import CPythonMemoryManager, ManualMemoryManager
from utilkit.common.logging import LoggingConfig


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "gc: Tests that force interpreter garbage collection")
    config.addinivalue_line("markers", "invariant: Cache invariant tests")


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch):
    """Each test starts from environment defaults and a fresh default manager."""
    for var in ("MEMORY_BACKEND", "MANUAL_MAX_GENERATION", "LOG_LEVEL", "LOG_JSON_FORMAT"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    set_memory_manager(None)
    LoggingConfig.reset_instance()
    yield
    reset_settings()
    set_memory_manager(None)
    LoggingConfig.reset_instance()


@pytest.fixture
def manual_memory() -> ManualMemoryManager:
    """Deterministic memory manager: nothing dies until collect()/expire()."""
    return ManualMemoryManager()


@pytest.fixture
def cpython_memory() -> CPythonMemoryManager:
    """Memory manager backed by the running interpreter."""
    return CPythonMemoryManager()


@pytest.fixture
def collect():
    """Force a full interpreter collection (callable fixture)."""
    def _collect():
        for _ in range(3):
            gc.collect()
    return _collect


@pytest.fixture
def gc_paused():
    """Suspend automatic collection; explicit gc.collect() still runs."""
    was_enabled = gc.isenabled()
    gc.disable()
    yield
    if was_enabled:
        gc.enable()
