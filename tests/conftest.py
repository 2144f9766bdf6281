"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from unittest.mock import Mock

import pytest

from dbconnect.config import clear_settings_cache
from dbconnect.models import ConnectOptions
from dbconnect.registry import ConnectionRegistry

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires running database servers)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (may require external services)"
    )
    config.addinivalue_line("markers", "slow: mark test as slow (takes more than 1 second)")
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture everything the package logs."""
    caplog.set_level(logging.DEBUG)
    yield


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reload settings for every test so env overrides do not leak."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture
def sink():
    """Logger sink recording info/error calls."""
    return Mock(spec=["info", "error", "debug", "warning"])


@pytest.fixture
def options(sink):
    """Connect options writing to the mock sink."""
    return ConnectOptions(logger=sink)


@pytest.fixture
def registry():
    """Fresh registry, isolated from the process-wide one."""
    return ConnectionRegistry()
