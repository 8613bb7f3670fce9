"""
Shared utilities for CLI commands.

Maps command-line options and environment variables onto selector settings
and renders configurations as text, JSON or YAML.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import yaml

from pyconfigkit.interpreter import (
    CandidateLocator,
    Config,
    Selector,
    SubprocessProber,
    DEFAULT_PROBE_TIMEOUT,
    all_of,
    any_interpreter,
    implementation_is,
    major_is,
    version_at_least,
)
from pyconfigkit.interpreter.selector import Predicate

logger = logging.getLogger(__name__)

# Interpreter path tried before the search path
PYTHON_ENV_VAR = "PYCONFIGKIT_PYTHON"

# Probe timeout override in seconds
TIMEOUT_ENV_VAR = "PYCONFIGKIT_TIMEOUT"


# ============================================================================
# Settings
# ============================================================================


def resolve_timeout(value: Optional[float], environ=None) -> float:
    """
    Resolve the probe timeout from the --timeout option or the environment.

    Args:
        value: Value of --timeout (None if not given)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Timeout in seconds

    Raises:
        ValueError: If the environment value is not a positive number
    """
    if value is not None:
        return value

    environ = os.environ if environ is None else environ
    raw = environ.get(TIMEOUT_ENV_VAR)
    if not raw:
        return DEFAULT_PROBE_TIMEOUT

    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"{TIMEOUT_ENV_VAR} must be a number of seconds, got {raw!r}")
    if timeout <= 0:
        raise ValueError(f"{TIMEOUT_ENV_VAR} must be positive, got {raw!r}")
    return timeout


def resolve_explicit(pythons: Optional[Sequence[str]], environ=None) -> List[str]:
    """
    Collect explicitly requested interpreters.

    --python options come first, then PYCONFIGKIT_PYTHON if set.
    """
    environ = os.environ if environ is None else environ
    explicit = list(pythons or [])
    from_env = environ.get(PYTHON_ENV_VAR)
    if from_env:
        logger.debug(f"Using {PYTHON_ENV_VAR}={from_env}")
        explicit.append(from_env)
    return explicit


def build_selector(args) -> Selector:
    """
    Create a Selector from parsed arguments.

    Args:
        args: Parsed arguments with search_path, python, timeout and jobs

    Returns:
        Configured Selector
    """
    locator = CandidateLocator(
        search_path=args.search_path,
        explicit=resolve_explicit(args.python),
    )
    prober = SubprocessProber(timeout=resolve_timeout(args.timeout))
    return Selector(locator=locator, prober=prober, max_workers=args.jobs)


def build_predicate(args) -> Predicate:
    """
    Combine --min-version, --major and --implementation into one predicate.

    Raises:
        MalformedVersionError: If --min-version is not a valid version
    """
    predicates = []
    if args.min_version:
        predicates.append(version_at_least(args.min_version))
    if args.major is not None:
        predicates.append(major_is(args.major))
    if args.implementation:
        predicates.append(implementation_is(args.implementation))

    if not predicates:
        return any_interpreter
    return all_of(*predicates)


# ============================================================================
# Output
# ============================================================================


def format_text(config: Config) -> str:
    """Render a configuration as aligned 'label: value' lines."""
    rows = [
        ("interpreter version", f"{config.implementation} {config.version}"),
        ("interpreter path", str(config.executable)),
        ("abi tag", config.abi_tag or "(none)"),
        ("static", str(config.is_static).lower()),
        ("include dirs", " ".join(str(p) for p in config.include_dirs)),
        ("library dirs", " ".join(str(p) for p in config.library_dirs)),
        ("libraries", " ".join(config.libraries)),
        ("compile flags", " ".join(config.extra_compile_flags)),
        ("link flags", " ".join(config.extra_link_flags)),
        ("libdir", config.libdir or "(none)"),
        ("base prefix", config.base_prefix or "(none)"),
        ("ld_version", config.ld_version or "(none)"),
        ("pointer size", str(config.pointer_size) if config.pointer_size else "(unknown)"),
    ]
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)} : {value}".rstrip() for label, value in rows)


def render(configs: List[Config], output_format: str) -> str:
    """
    Render configurations in the requested format.

    Args:
        configs: Configurations to render
        output_format: 'text', 'json' or 'yaml'

    Returns:
        Rendered output (no trailing newline)
    """
    data: List[Dict[str, Any]] = [config.to_dict() for config in configs]

    if output_format == "json":
        return json.dumps(data, indent=2)
    if output_format == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip()
    return "\n\n".join(format_text(config) for config in configs)
