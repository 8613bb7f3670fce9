"""Reusable interpreter fixtures for testing.

This module provides fake interpreter executables on disk and an in-memory
prober, so discovery and selection can be tested without real Python
installations.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from pyconfigkit.interpreter.candidates import Candidate
from pyconfigkit.interpreter.prober import Prober, RawProbeOutput
from pyconfigkit.core.exceptions import ProbeError

# Flags and introspection output of a typical Linux CPython 3.11 build
CPYTHON_311_FLAGS = (
    "-I/usr/include/python3.11 -fPIC -L/usr/lib/x86_64-linux-gnu "
    "-lpython3.11 -lpthread -ldl -lutil -lm -lm\n"
)
CPYTHON_311_INTROSPECTION = """\
protocol=1
version=3.11.4
abi=
static=false
implementation=CPython
executable=/usr/bin/python3.11
base_prefix=/usr
libdir=/usr/lib/x86_64-linux-gnu
ld_version=3.11
pointer_size=8
"""


def make_executable(directory: Path, name: str, content: str = "#!/bin/sh\nexit 0\n") -> Path:
    """
    Create an executable file.

    Args:
        directory: Directory to create the file in (created if missing)
        name: File name
        content: File content

    Returns:
        Path to the executable
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content)
    path.chmod(0o755)
    return path


def raw_output(
    executable: Union[str, Path] = "/usr/bin/python3",
    version: str = "3.11.4",
    abi: str = "",
    static: str = "false",
    flags: str = "-I/usr/include/python3.11 -L/usr/lib -lpython3.11",
    extra_lines: str = "",
) -> RawProbeOutput:
    """Build RawProbeOutput for a synthetic interpreter."""
    introspection = f"version={version}\nabi={abi}\nstatic={static}\n{extra_lines}"
    return RawProbeOutput(
        executable=Path(executable),
        flags_output=flags,
        introspection_output=introspection,
    )


class FakeProber(Prober):
    """
    In-memory prober keyed by candidate path.

    Values are RawProbeOutput instances or exceptions to raise. Candidates
    without an entry get a default CPython 3.11 output.
    """

    def __init__(self, outputs: Optional[Dict[str, Union[RawProbeOutput, Exception]]] = None):
        self.outputs = {str(key): value for key, value in (outputs or {}).items()}
        self.calls: List[Path] = []
        self.timeouts: List[Optional[float]] = []

    def probe(self, candidate: Candidate, timeout: Optional[float] = None) -> RawProbeOutput:
        self.calls.append(candidate.path)
        self.timeouts.append(timeout)
        result = self.outputs.get(str(candidate.path))
        if result is None:
            return raw_output(executable=candidate.path)
        if isinstance(result, Exception):
            raise result
        return result


def failing(path: Path, error: ProbeError) -> Dict[str, ProbeError]:
    """Entry for FakeProber making path fail with error."""
    return {str(path): error}


@pytest.fixture
def fake_prober() -> FakeProber:
    """Fresh FakeProber with no configured outputs."""
    return FakeProber()


@pytest.fixture
def two_bin_dirs(tmp_path):
    """
    Two search-path directories each holding a python3 executable.

    Returns:
        (first_dir, second_dir, search_path string)
    """
    first = tmp_path / "first" / "bin"
    second = tmp_path / "second" / "bin"
    make_executable(first, "python3")
    make_executable(second, "python3")
    return first, second, os.pathsep.join([str(first), str(second)])


@pytest.fixture
def fake_python_script(tmp_path) -> Path:
    """
    Shell script that answers the probe invocations like a Python 3.9 build.

    The script inspects the '-c' argument to decide which invocation it is
    answering, so it works with the real SubprocessProber.
    """
    script = """#!/bin/sh
case "$2" in
  *pyconfigkit:flags*)
    echo "-I/usr/include/tool3.9 -L/usr/lib -ltool3.9 -fPIC"
    ;;
  *pyconfigkit:introspection*)
    echo "version=3.9.7"
    echo "abi=m"
    echo "static=false"
    ;;
  *)
    echo "unexpected invocation" >&2
    exit 3
    ;;
esac
"""
    return make_executable(tmp_path / "fakebin", "python3.9", script)
