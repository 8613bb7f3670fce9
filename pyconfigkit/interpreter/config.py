"""
Normalized build configuration of one Python interpreter installation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .version import Version


@dataclass(frozen=True)
class Config:
    """
    Build configuration extracted from a probed interpreter.

    Instances are immutable; every successful probe produces its own instance.

    Attributes:
        executable: Absolute path of the interpreter
        version: Interpreter version
        include_dirs: Header directories, in the order the interpreter reported them
        library_dirs: Library search directories
        libraries: Library names to link (without the -l prefix)
        extra_compile_flags: Unrecognized compiler flags, passed through verbatim
        extra_link_flags: Unrecognized linker flags, passed through verbatim
        is_static: True if the runtime library is linked statically
        abi_tag: ABI flags such as 'm' or 'd', None when the interpreter reports none
        implementation: Interpreter implementation ('CPython', 'PyPy', ...)
        base_prefix: Installation prefix of the base interpreter (outside any venv)
        libdir: Directory holding the interpreter's shared library, if reported
        ld_version: Version string used in the library name (e.g. '3.11', '3.13t')
        pointer_size: Pointer width in bytes (8 on 64-bit builds)
    """

    executable: Path
    version: Version
    include_dirs: Tuple[Path, ...] = ()
    library_dirs: Tuple[Path, ...] = ()
    libraries: Tuple[str, ...] = ()
    extra_compile_flags: Tuple[str, ...] = ()
    extra_link_flags: Tuple[str, ...] = ()
    is_static: bool = False
    abi_tag: Optional[str] = None
    implementation: str = "CPython"
    base_prefix: Optional[str] = None
    libdir: Optional[str] = None
    ld_version: Optional[str] = None
    pointer_size: Optional[int] = None

    @property
    def extra_flags(self) -> Tuple[str, ...]:
        """All pass-through flags: compiler flags followed by linker flags."""
        return self.extra_compile_flags + self.extra_link_flags

    @property
    def is_shared(self) -> bool:
        """True if the runtime library is a shared library."""
        return not self.is_static

    def __str__(self) -> str:
        """String representation."""
        return f"{self.implementation} {self.version} at {self.executable}"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary of plain values.

        Returns:
            Dictionary representation suitable for JSON or YAML output
        """
        return {
            "executable": str(self.executable),
            "version": str(self.version),
            "implementation": self.implementation,
            "abi_tag": self.abi_tag,
            "is_static": self.is_static,
            "include_dirs": [str(path) for path in self.include_dirs],
            "library_dirs": [str(path) for path in self.library_dirs],
            "libraries": list(self.libraries),
            "extra_compile_flags": list(self.extra_compile_flags),
            "extra_link_flags": list(self.extra_link_flags),
            "base_prefix": self.base_prefix,
            "libdir": self.libdir,
            "ld_version": self.ld_version,
            "pointer_size": self.pointer_size,
        }
