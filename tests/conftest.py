"""
Pytest configuration and shared fixtures for pyconfigkit tests.
"""

import sys

import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.interpreters import (
    fake_prober,
    two_bin_dirs,
    fake_python_script,
)
from pyconfigkit.core.platform import clear_host_cache


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "posix_only: marks tests that need POSIX shell scripts and permission bits",
    )


def pytest_collection_modifyitems(config, items):
    """Skip POSIX-only tests on Windows."""
    if sys.platform != "win32":
        return
    skip_posix = pytest.mark.skip(reason="requires a POSIX host")
    for item in items:
        if "posix_only" in item.keywords:
            item.add_marker(skip_posix)


@pytest.fixture(autouse=True)
def fresh_host_detection():
    """Clear cached host detection around every test."""
    clear_host_cache()
    yield
    clear_host_cache()
