"""
Python interpreter discovery for pyconfigkit.

This module provides functionality for:
- Enumerating interpreter candidates on the executable search path
- Probing candidates for their build configuration
- Parsing probe output into normalized Config records
- Selecting interpreters with caller-supplied predicates

Usage:
    from pyconfigkit.interpreter import find_interpreter_matching, version_at_least

    config = find_interpreter_matching(version_at_least("3.8"))
    print(config.include_dirs, config.libraries)
"""

from pyconfigkit.core.exceptions import (
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
from pyconfigkit.interpreter.version import Version
from pyconfigkit.interpreter.config import Config
from pyconfigkit.interpreter.candidates import (
    Candidate,
    CandidateLocator,
    NamePattern,
    DEFAULT_FAMILIES,
    DEFAULT_NAME_PATTERNS,
    list_candidates,
)
from pyconfigkit.interpreter.prober import (
    Prober,
    SubprocessProber,
    RawProbeOutput,
    DEFAULT_PROBE_TIMEOUT,
    PROBE_PROTOCOL_VERSION,
)
from pyconfigkit.interpreter.parser import (
    FlagSet,
    FlagToken,
    TokenKind,
    parse,
    parse_flags,
    parse_introspection,
    tokenize_flags,
)
from pyconfigkit.interpreter.selector import (
    Selector,
    SelectionReport,
    CandidateOutcome,
    find_interpreter_matching,
    list_interpreters,
    any_interpreter,
    version_at_least,
    major_is,
    implementation_is,
    all_of,
)

__all__ = [
    # Public API
    "find_interpreter_matching",
    "list_interpreters",
    "Config",
    "Version",
    # Predicates
    "any_interpreter",
    "version_at_least",
    "major_is",
    "implementation_is",
    "all_of",
    # Candidate Locator
    "Candidate",
    "CandidateLocator",
    "NamePattern",
    "DEFAULT_FAMILIES",
    "DEFAULT_NAME_PATTERNS",
    "list_candidates",
    # Prober
    "Prober",
    "SubprocessProber",
    "RawProbeOutput",
    "DEFAULT_PROBE_TIMEOUT",
    "PROBE_PROTOCOL_VERSION",
    # Parser
    "FlagSet",
    "FlagToken",
    "TokenKind",
    "parse",
    "parse_flags",
    "parse_introspection",
    "tokenize_flags",
    # Selector
    "Selector",
    "SelectionReport",
    "CandidateOutcome",
    # Errors
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
