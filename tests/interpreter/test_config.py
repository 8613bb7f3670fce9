"""
Tests for pyconfigkit.interpreter.config module.
"""

import dataclasses
from pathlib import Path

import pytest

from pyconfigkit.interpreter.config import Config
from pyconfigkit.interpreter.version import Version


@pytest.fixture
def config():
    """A fully populated Config."""
    return Config(
        executable=Path("/usr/bin/python3.11"),
        version=Version(3, 11, 4),
        include_dirs=(Path("/usr/include/python3.11"),),
        library_dirs=(Path("/usr/lib"),),
        libraries=("python3.11", "dl"),
        extra_compile_flags=("-fPIC",),
        extra_link_flags=("-Wl,--export-dynamic",),
        is_static=False,
        abi_tag="d",
        implementation="CPython",
        base_prefix="/usr",
        libdir="/usr/lib",
        ld_version="3.11d",
        pointer_size=8,
    )


class TestConfig:
    """Tests for Config dataclass."""

    def test_minimal_config(self):
        """Test creating a Config with only required fields."""
        config = Config(executable=Path("/usr/bin/python3"), version=Version(3, 9))

        assert config.include_dirs == ()
        assert config.libraries == ()
        assert config.abi_tag is None
        assert config.implementation == "CPython"
        assert config.pointer_size is None

    def test_frozen(self, config):
        """Test that Config fields cannot be reassigned."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.version = Version(3, 12)

    def test_replace_creates_new_instance(self, config):
        """Test that changes produce a separate instance."""
        changed = dataclasses.replace(config, is_static=True)

        assert changed is not config
        assert config.is_static is False
        assert changed.is_static is True

    def test_extra_flags(self, config):
        """Test that extra_flags lists compile then link flags."""
        assert config.extra_flags == ("-fPIC", "-Wl,--export-dynamic")

    def test_is_shared(self, config):
        """Test is_shared mirrors is_static."""
        assert config.is_shared is True

    def test_str_representation(self, config):
        """Test string representation."""
        result = str(config)

        assert "CPython" in result
        assert "3.11.4" in result
        assert "python3.11" in result

    def test_to_dict(self, config):
        """Test converting to a dictionary of plain values."""
        result = config.to_dict()

        assert result["executable"] == str(Path("/usr/bin/python3.11"))
        assert result["version"] == "3.11.4"
        assert result["include_dirs"] == [str(Path("/usr/include/python3.11"))]
        assert result["libraries"] == ["python3.11", "dl"]
        assert result["extra_link_flags"] == ["-Wl,--export-dynamic"]
        assert result["abi_tag"] == "d"
        assert result["is_static"] is False
        assert result["pointer_size"] == 8

    def test_equality(self, config):
        """Test that configs with equal fields compare equal."""
        assert config == dataclasses.replace(config)
        assert config != dataclasses.replace(config, abi_tag=None)
