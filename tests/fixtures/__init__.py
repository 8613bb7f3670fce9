"""Test fixtures for pyconfigkit tests.

This package provides reusable pytest fixtures for testing pyconfigkit components:

- interpreters: Fake interpreter executables, synthetic probe output and an
  in-memory FakeProber

Import fixtures in your tests using:
    from tests.fixtures.interpreters import FakeProber, make_executable
"""

__all__ = [
    "interpreters",
]
