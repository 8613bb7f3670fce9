"""
Host platform facts for pyconfigkit.

Candidate discovery needs to know how the host marks files as executable:
POSIX hosts use the execute permission bit, Windows hosts use a set of file
extensions listed in PATHEXT.

Usage:
    from pyconfigkit.core.platform import detect_host

    host = detect_host()
    print(f"OS: {host.os}")
    print(f"Executable suffixes: {host.executable_suffixes}")
"""

import functools
import os
import platform
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

# Used when PATHEXT is unset or empty on Windows
DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD"


@dataclass(frozen=True)
class HostInfo:
    """
    Facts about the host that affect executable discovery.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos' or the raw system name)
        executable_suffixes: Lowercased file suffixes that mark an executable.
            POSIX hosts use ("",) because executability comes from the permission bit.
    """

    os: str
    executable_suffixes: Tuple[str, ...]

    def __str__(self) -> str:
        """String representation of host info."""
        return f"{self.os} [{', '.join(self.executable_suffixes) or 'no suffix'}]"


@functools.lru_cache(maxsize=1)
def detect_host() -> HostInfo:
    """
    Detect current host information.

    This function is cached - it only runs detection once per process.

    Returns:
        HostInfo for the running interpreter's host
    """
    os_name = _detect_os()
    return HostInfo(
        os=os_name,
        executable_suffixes=executable_suffixes(os_name),
    )


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the lowercased system name
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "macos"
    # Cygwin and MSYS report their own names and honour the permission bit
    return system or "unknown"


def executable_suffixes(
    os_name: str, environ: Optional[Mapping[str, str]] = None
) -> Tuple[str, ...]:
    """
    Get the file suffixes that mark a file as executable on a host.

    Args:
        os_name: Normalized OS name as returned by detect_host()
        environ: Environment to read PATHEXT from (defaults to os.environ)

    Returns:
        Lowercased suffixes in PATHEXT order on Windows, ("",) elsewhere

    Example:
        >>> executable_suffixes("windows", {"PATHEXT": ".EXE;.BAT"})
        ('.exe', '.bat')
    """
    if os_name != "windows":
        return ("",)

    if environ is None:
        environ = os.environ

    pathext = environ.get("PATHEXT") or DEFAULT_PATHEXT
    suffixes = []
    for suffix in pathext.split(";"):
        suffix = suffix.strip().lower()
        if suffix and suffix not in suffixes:
            suffixes.append(suffix)
    return tuple(suffixes)


def clear_host_cache():
    """
    Clear the host detection cache.

    This forces the next call to detect_host() to re-detect.
    Useful for testing or when PATHEXT changes.
    """
    detect_host.cache_clear()


__all__ = [
    "HostInfo",
    "detect_host",
    "executable_suffixes",
    "clear_host_cache",
    "DEFAULT_PATHEXT",
]
