"""
Core functionality for pyconfigkit.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    HostInfo,
    detect_host,
    executable_suffixes,
    clear_host_cache,
)

from .exceptions import (
    PyConfigKitError,
    DiscoveryError,
    PathUnreadableError,
    ProbeError,
    ProbeTimeoutError,
    NonZeroExitError,
    SpawnFailedError,
    ParseError,
    MalformedFlagsError,
    MalformedVersionError,
    MissingFieldError,
    MalformedFieldError,
    SelectionError,
    NoMatchError,
    SelectionCancelledError,
)

__all__ = [
    "HostInfo",
    "detect_host",
    "executable_suffixes",
    "clear_host_cache",
    "PyConfigKitError",
    "DiscoveryError",
    "PathUnreadableError",
    "ProbeError",
    "ProbeTimeoutError",
    "NonZeroExitError",
    "SpawnFailedError",
    "ParseError",
    "MalformedFlagsError",
    "MalformedVersionError",
    "MissingFieldError",
    "MalformedFieldError",
    "SelectionError",
    "NoMatchError",
    "SelectionCancelledError",
]
