"""
Tests for pyconfigkit.interpreter.prober module.
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from pyconfigkit.core.exceptions import (
    NonZeroExitError,
    ProbeError,
    ProbeTimeoutError,
    SpawnFailedError,
)
from pyconfigkit.interpreter.candidates import Candidate
from pyconfigkit.interpreter.parser import parse, parse_flags
from pyconfigkit.interpreter.prober import (
    DEFAULT_PROBE_TIMEOUT,
    FLAGS_SCRIPT,
    INTROSPECTION_SCRIPT,
    SubprocessProber,
)
from pyconfigkit.interpreter.version import Version
from tests.fixtures.interpreters import make_executable


def completed(stdout="", stderr="", returncode=0):
    """Build a CompletedProcess-like result."""
    return subprocess.CompletedProcess(
        args=["python"], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def candidate():
    return Candidate(path=Path("/usr/bin/python3"), name="python3", version_hint="3")


class TestSubprocessProber:
    """Tests for SubprocessProber with a mocked subprocess."""

    def test_default_timeout(self):
        """Test default timeout."""
        assert SubprocessProber().timeout == DEFAULT_PROBE_TIMEOUT

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_invalid_timeout(self, timeout):
        """Test that a non-positive timeout is rejected."""
        with pytest.raises(ValueError):
            SubprocessProber(timeout=timeout)

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_probe_runs_both_scripts(self, mock_run, candidate):
        """Test that the flags and introspection scripts are both run."""
        mock_run.side_effect = [
            completed(stdout="-I/usr/include/python3.11\n"),
            completed(stdout="version=3.11.4\nabi=\nstatic=false\n"),
        ]

        raw = SubprocessProber(timeout=5).probe(candidate)

        assert raw.executable == candidate.path
        assert raw.flags_output == "-I/usr/include/python3.11\n"
        assert raw.introspection_output.startswith("version=3.11.4")
        assert raw.returncode == 0

        scripts = [call.args[0][2] for call in mock_run.call_args_list]
        assert scripts == [FLAGS_SCRIPT, INTROSPECTION_SCRIPT]

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_non_interactive_invocation(self, mock_run, candidate):
        """Test that stdin is closed and output is captured separately."""
        mock_run.return_value = completed()

        SubprocessProber(timeout=5, env={"LC_ALL": "C"}).probe(candidate)

        args, kwargs = mock_run.call_args
        assert args[0][:2] == [str(candidate.path), "-c"]
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == 5
        assert kwargs["env"] == {"LC_ALL": "C"}
        assert kwargs["check"] is False

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_timeout_override(self, mock_run, candidate):
        """Test that a per-call timeout overrides the default."""
        mock_run.return_value = completed()

        SubprocessProber(timeout=30).probe(candidate, timeout=0.5)

        assert mock_run.call_args.kwargs["timeout"] == 0.5

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_timeout(self, mock_run, candidate):
        """Test that a hung interpreter becomes ProbeTimeoutError."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="python3", timeout=2)

        with pytest.raises(ProbeTimeoutError) as exc_info:
            SubprocessProber(timeout=2).probe(candidate)

        assert exc_info.value.executable == candidate.path
        assert exc_info.value.timeout == 2
        assert "timed out" in str(exc_info.value)

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_non_zero_exit(self, mock_run, candidate):
        """Test that a failing invocation becomes NonZeroExitError."""
        mock_run.return_value = completed(
            stderr="Traceback (most recent call last):\nImportError: No module named sysconfig\n",
            returncode=1,
        )

        with pytest.raises(NonZeroExitError) as exc_info:
            SubprocessProber().probe(candidate)

        assert exc_info.value.status == 1
        assert "ImportError" in exc_info.value.stderr
        assert "No module named sysconfig" in str(exc_info.value)

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_second_invocation_failure(self, mock_run, candidate):
        """Test that a failure in the introspection run is not hidden."""
        mock_run.side_effect = [completed(stdout="-I/x\n"), completed(returncode=2)]

        with pytest.raises(NonZeroExitError) as exc_info:
            SubprocessProber().probe(candidate)

        assert exc_info.value.status == 2

    @patch("pyconfigkit.interpreter.prober.subprocess.run")
    def test_spawn_failure(self, mock_run, candidate):
        """Test that an unstartable executable becomes SpawnFailedError."""
        mock_run.side_effect = PermissionError(13, "Permission denied")

        with pytest.raises(SpawnFailedError) as exc_info:
            SubprocessProber().probe(candidate)

        assert isinstance(exc_info.value, ProbeError)
        assert "Permission denied" in exc_info.value.reason

    def test_missing_executable(self, tmp_path):
        """Test probing a path that does not exist."""
        missing = Candidate(path=tmp_path / "python3", name="python3")

        with pytest.raises(SpawnFailedError):
            SubprocessProber(timeout=5).probe(missing)


@pytest.mark.posix_only
class TestSubprocessProberIntegration:
    """Tests running real child processes."""

    def test_fake_interpreter(self, fake_python_script):
        """Test probing a script that answers like an interpreter."""
        candidate = Candidate(path=fake_python_script, name=fake_python_script.name)

        raw = SubprocessProber(timeout=10).probe(candidate)
        config = parse(raw)

        assert config.version == Version(3, 9, 7)
        assert config.abi_tag == "m"
        assert config.libraries == ("tool3.9",)
        assert config.extra_compile_flags == ("-fPIC",)
        assert config.executable == fake_python_script

    def test_failing_executable(self, tmp_path):
        """Test an executable that is not an interpreter."""
        script = make_executable(tmp_path, "python3", "#!/bin/sh\necho boom >&2\nexit 4\n")

        with pytest.raises(NonZeroExitError) as exc_info:
            SubprocessProber(timeout=10).probe(Candidate(path=script, name="python3"))

        assert exc_info.value.status == 4
        assert "boom" in str(exc_info.value)

    def test_hanging_executable(self, tmp_path):
        """Test that an interpreter that never exits is killed."""
        script = make_executable(tmp_path, "python3", "#!/bin/sh\nexec sleep 30\n")

        with pytest.raises(ProbeTimeoutError):
            SubprocessProber(timeout=0.5).probe(Candidate(path=script, name="python3"))

    def test_waiting_for_stdin(self, tmp_path):
        """Test that an interpreter reading stdin sees end of input."""
        script = make_executable(
            tmp_path, "python3", "#!/bin/sh\nread line\necho version=3.8.0\n"
        )

        raw = SubprocessProber(timeout=10).probe(Candidate(path=script, name="python3"))

        assert "version=3.8.0" in raw.introspection_output

    def test_running_interpreter(self):
        """Test probing the interpreter running the tests."""
        executable = Path(sys.executable)
        candidate = Candidate(path=executable, name=executable.name)

        config = parse(SubprocessProber(timeout=30).probe(candidate))

        assert config.version.major == sys.version_info[0]
        assert config.version.minor == sys.version_info[1]
        assert config.version.patch == sys.version_info[2]
        assert config.include_dirs
        assert config.pointer_size in (4, 8)


class TestProbeScripts:
    """Tests for the probe script sources."""

    def test_scripts_are_marked(self):
        """Test that each script identifies itself on its first line."""
        assert FLAGS_SCRIPT.splitlines()[0] == "# pyconfigkit:flags"
        assert INTROSPECTION_SCRIPT.splitlines()[0] == "# pyconfigkit:introspection"

    def test_scripts_compile(self):
        """Test that the scripts are valid Python source."""
        compile(FLAGS_SCRIPT, "<flags>", "exec")
        compile(INTROSPECTION_SCRIPT, "<introspection>", "exec")

    @pytest.mark.parametrize(
        "include",
        ["/opt/Program Files/Python311/Include", "/home/o'brien/include", '/srv/say "hi"/include'],
    )
    def test_flags_script_quotes_paths(self, include, capsys):
        """Test that paths with spaces or quotes come back whole from the flags line."""
        with patch("sysconfig.get_path", return_value=include):
            exec(compile(FLAGS_SCRIPT, "<flags>", "exec"), {"__name__": "__main__"})

        flags = parse_flags(capsys.readouterr().out)

        assert flags.include_dirs == (include,)

    def test_scripts_are_single_argument(self):
        """Test that the scripts contain no NUL bytes."""
        assert "\0" not in FLAGS_SCRIPT
        assert "\0" not in INTROSPECTION_SCRIPT


def test_prober_is_abstract():
    """Test that Prober subclasses must implement probe."""
    from pyconfigkit.interpreter.prober import Prober

    with pytest.raises(TypeError):
        Prober()
