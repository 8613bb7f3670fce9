"""
pyconfigkit/interpreter/prober.py

Interpreter probing - runs a candidate to collect its raw build configuration.

Each probe issues two non-interactive invocations:

1. Flags: ``<python> -c FLAGS_SCRIPT`` prints one line of compiler and linker
   flags in python-config conventions (-I<dir>, -L<dir>, -l<name>, others
   passed through). Flags containing whitespace or quotes are quoted.
2. Introspection: ``<python> -c INTROSPECTION_SCRIPT`` prints ``key=value``
   lines: version, abi and static are always present; implementation,
   executable, base_prefix, libdir, ld_version and pointer_size are
   reported when known.

The scripts form a versioned contract (PROBE_PROTOCOL_VERSION) and run on
Python 2.7 as well as Python 3 so that old interpreters still report a version.
"""

import subprocess
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ..core.exceptions import NonZeroExitError, ProbeTimeoutError, SpawnFailedError
from .candidates import Candidate

logger = logging.getLogger(__name__)

# Reported by INTROSPECTION_SCRIPT as "protocol"; bump together with the scripts
PROBE_PROTOCOL_VERSION = 1

# Seconds allowed for each interpreter invocation
DEFAULT_PROBE_TIMEOUT = 10.0

FLAGS_SCRIPT = """\
# pyconfigkit:flags
import os
import sys
import sysconfig


def var(name):
    return sysconfig.get_config_var(name) or ""


def quote(flag):
    plain = flag.split() == [flag] and "'" not in flag and '"' not in flag
    if not flag or plain:
        return flag
    if '"' in flag:
        return "'" + flag + "'"
    return '"' + flag + '"'


include = sysconfig.get_path("include")
flags = ["-I" + include]
platinclude = sysconfig.get_path("platinclude")
if platinclude and platinclude != include:
    flags.append("-I" + platinclude)
flags.extend(str(var("CCSHARED")).split())
if sys.platform == "win32":
    base = getattr(sys, "base_exec_prefix", sys.exec_prefix)
    flags.append("-L" + os.path.join(base, "libs"))
    flags.append("-lpython%d%d" % sys.version_info[:2])
else:
    if var("LIBDIR"):
        flags.append("-L" + var("LIBDIR"))
    ldversion = var("LDVERSION") or var("py_version_short")
    if ldversion:
        flags.append("-lpython" + ldversion)
    flags.extend(str(var("LIBS")).split())
    flags.extend(str(var("SYSLIBS")).split())
sys.stdout.write(" ".join(quote(flag) for flag in flags) + "\\n")
"""

INTROSPECTION_SCRIPT = """\
# pyconfigkit:introspection
import platform
import struct
import sys
import sysconfig


def emit(key, value):
    sys.stdout.write("%s=%s\\n" % (key, value))


info = sys.version_info
suffix = ""
if info[3] != "final":
    tags = {"alpha": "a", "beta": "b", "candidate": "rc"}
    suffix = tags.get(info[3], info[3]) + str(info[4])
implementation = platform.python_implementation()
shared = (
    implementation == "PyPy"
    or sys.platform == "win32"
    or bool(sysconfig.get_config_var("Py_ENABLE_SHARED"))
)
emit("protocol", 1)
emit("version", "%d.%d.%d%s" % (info[0], info[1], info[2], suffix))
emit("abi", getattr(sys, "abiflags", ""))
emit("static", shared and "false" or "true")
emit("implementation", implementation)
emit("executable", sys.executable or "")
emit("base_prefix", getattr(sys, "base_prefix", sys.exec_prefix))
libdir = sysconfig.get_config_var("LIBDIR")
if libdir:
    emit("libdir", libdir)
emit(
    "ld_version",
    sysconfig.get_config_var("LDVERSION")
    or sysconfig.get_config_var("py_version_short")
    or "",
)
emit("pointer_size", struct.calcsize("P"))
"""


@dataclass(frozen=True)
class RawProbeOutput:
    """
    Unparsed output of probing one candidate.

    Attributes:
        executable: Path of the probed interpreter
        flags_output: Standard output of the flags invocation
        introspection_output: Standard output of the introspection invocation
        stderr: Standard error of both invocations, concatenated
        returncode: Exit status (always 0 for outputs returned by a Prober)
    """

    executable: Path
    flags_output: str
    introspection_output: str
    stderr: str = ""
    returncode: int = 0


class Prober(ABC):
    """
    Abstract interface for retrieving raw configuration from a candidate.

    Implementations must raise a ProbeError subclass instead of returning
    partial output, and must never block longer than their timeout.
    """

    @abstractmethod
    def probe(self, candidate: Candidate, timeout: Optional[float] = None) -> RawProbeOutput:
        """
        Probe a candidate interpreter.

        Args:
            candidate: Candidate to invoke
            timeout: Per-invocation timeout in seconds, overriding the default

        Returns:
            RawProbeOutput with the captured output

        Raises:
            ProbeTimeoutError: If an invocation exceeds the timeout
            NonZeroExitError: If an invocation exits with a non-zero status
            SpawnFailedError: If the interpreter cannot be started
        """
        pass


class SubprocessProber(Prober):
    """
    Probe candidates by running them as child processes.

    Standard input is closed so an interpreter never waits for interactive
    input; the timeout kills any invocation that still hangs.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        env: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize prober.

        Args:
            timeout: Default per-invocation timeout in seconds
            env: Environment for the child processes (inherits the current one if None)
        """
        if timeout <= 0:
            raise ValueError(f"Probe timeout must be positive, got {timeout}")
        self.timeout = timeout
        self.env = dict(env) if env is not None else None

    def probe(self, candidate: Candidate, timeout: Optional[float] = None) -> RawProbeOutput:
        """
        Run the flags and introspection invocations for a candidate.

        Args:
            candidate: Candidate to invoke
            timeout: Per-invocation timeout in seconds (defaults to self.timeout)

        Returns:
            RawProbeOutput with both invocations' output
        """
        timeout = self.timeout if timeout is None else timeout
        executable = candidate.path

        flags = self._run(executable, FLAGS_SCRIPT, timeout)
        introspection = self._run(executable, INTROSPECTION_SCRIPT, timeout)

        logger.debug(f"Probed {executable} (protocol {PROBE_PROTOCOL_VERSION})")
        return RawProbeOutput(
            executable=executable,
            flags_output=flags.stdout,
            introspection_output=introspection.stdout,
            stderr=flags.stderr + introspection.stderr,
            returncode=introspection.returncode,
        )

    def _run(
        self, executable: Path, script: str, timeout: float
    ) -> "subprocess.CompletedProcess[str]":
        """
        Run one script with the interpreter.

        Args:
            executable: Interpreter path
            script: Python source passed with -c
            timeout: Timeout in seconds

        Returns:
            Completed process with decoded output

        Raises:
            ProbeTimeoutError: If the invocation exceeds the timeout
            NonZeroExitError: If the invocation exits with a non-zero status
            SpawnFailedError: If the interpreter cannot be started
        """
        try:
            result = subprocess.run(
                [str(executable), "-c", script],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                env=self.env,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.debug(f"Timeout probing {executable} after {timeout}s")
            raise ProbeTimeoutError(executable, timeout) from e
        except OSError as e:
            logger.debug(f"Failed to start {executable}: {e}")
            raise SpawnFailedError(executable, str(e)) from e

        if result.returncode != 0:
            logger.debug(f"{executable} returned {result.returncode}: {result.stderr.strip()[:200]}")
            raise NonZeroExitError(executable, result.returncode, result.stderr)

        return result
