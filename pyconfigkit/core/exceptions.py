"""
Centralized exception hierarchy for pyconfigkit.

Discovery failures are fatal to a single enumeration, probe and parse
failures are recoverable per candidate, and selection failures are the
terminal errors surfaced to callers.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..interpreter.selector import SelectionReport


# ============================================================================
# Base Exceptions
# ============================================================================


class PyConfigKitError(Exception):
    """Base exception for all pyconfigkit errors."""

    pass


# ============================================================================
# Discovery Exceptions
# ============================================================================


class DiscoveryError(PyConfigKitError):
    """Base exception when candidate interpreters cannot be enumerated."""

    pass


class PathUnreadableError(DiscoveryError):
    """Raised when the executable search path itself cannot be read."""

    def __init__(self, search_path: object, reason: str):
        self.search_path = search_path
        self.reason = reason
        super().__init__(f"Cannot read search path {search_path!r}: {reason}")


# ============================================================================
# Probe Exceptions
# ============================================================================


class ProbeError(PyConfigKitError):
    """Base exception for a failed interpreter invocation."""

    def __init__(self, executable: Path, message: str):
        self.executable = executable
        super().__init__(f"{executable}: {message}")


class ProbeTimeoutError(ProbeError):
    """Raised when an interpreter does not finish within the probe timeout."""

    def __init__(self, executable: Path, timeout: float):
        self.timeout = timeout
        super().__init__(executable, f"timed out after {timeout:g}s")


class NonZeroExitError(ProbeError):
    """Raised when an interpreter exits with a non-zero status."""

    def __init__(self, executable: Path, status: int, stderr: str = ""):
        self.status = status
        self.stderr = stderr
        message = f"exited with status {status}"
        last_line = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        if last_line:
            message += f" ({last_line})"
        super().__init__(executable, message)


class SpawnFailedError(ProbeError):
    """Raised when the interpreter process cannot be started at all."""

    def __init__(self, executable: Path, reason: str):
        self.reason = reason
        super().__init__(executable, f"could not be started: {reason}")


# ============================================================================
# Parse Exceptions
# ============================================================================


class ParseError(PyConfigKitError):
    """Base exception for probe output that cannot be normalized."""

    pass


class MalformedFlagsError(ParseError):
    """Raised when the compiler/linker flags line cannot be tokenized."""

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"Malformed flag {token!r}: {reason}")


class MalformedVersionError(ParseError):
    """Raised when a version string is not MAJOR.MINOR[.PATCH[suffix]]."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(
            f"Invalid version format: {text!r}. "
            f"Expected MAJOR.MINOR, MAJOR.MINOR.PATCH or MAJOR.MINOR.PATCHsuffix"
        )


class MissingFieldError(ParseError):
    """Raised when a required introspection key is absent."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Required field missing from probe output: {name}")


class MalformedFieldError(ParseError):
    """Raised when an introspection value cannot be converted to its type."""

    def __init__(self, name: str, value: str, expected: str):
        self.name = name
        self.value = value
        self.expected = expected
        super().__init__(f"Field {name!r} has invalid value {value!r}: expected {expected}")


# ============================================================================
# Selection Exceptions
# ============================================================================


class SelectionError(PyConfigKitError):
    """Base exception for selection failures; carries the selection report."""

    def __init__(self, message: str, report: Optional["SelectionReport"] = None):
        self.report = report
        super().__init__(message)


class NoMatchError(SelectionError):
    """Raised when no discovered interpreter satisfies the predicate."""

    def __init__(self, report: Optional["SelectionReport"] = None):
        message = "No installed Python interpreter satisfied the predicate"
        if report is not None:
            message += f" ({report.summary()})"
        super().__init__(message, report)


class SelectionCancelledError(SelectionError):
    """Raised when a selection deadline passes or cancellation is requested."""

    def __init__(self, reason: str, report: Optional["SelectionReport"] = None):
        self.reason = reason
        super().__init__(f"Interpreter selection cancelled: {reason}", report)
