"""
pyconfigkit/interpreter/candidates.py

Candidate discovery - enumerates Python executables on the search path.

Nothing is executed here; candidates are validated later by probing.
"""

import os
import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ..core.exceptions import PathUnreadableError
from ..core.platform import detect_host

logger = logging.getLogger(__name__)

# Search order for interpreter families within one directory
DEFAULT_FAMILIES: Tuple[str, ...] = ("python", "pypy")


@dataclass(frozen=True)
class NamePattern:
    """
    A file name pattern for one interpreter family.

    Attributes:
        label: Short identifier reported on matching candidates
        template: Regular expression with '{name}' standing for the family
            name and an optional 'version' group holding the version suffix
    """

    label: str
    template: str

    def compile(self, family: str) -> "re.Pattern[str]":
        """Compile the pattern for a family name."""
        return re.compile(self.template.replace("{name}", re.escape(family)))


DEFAULT_NAME_PATTERNS: Tuple[NamePattern, ...] = (
    NamePattern("exact", r"{name}"),
    NamePattern("major", r"{name}(?P<version>[0-9]+)"),
    NamePattern("major-minor", r"{name}(?P<version>[0-9]+\.[0-9]+)"),
)


@dataclass(frozen=True)
class Candidate:
    """
    An executable that might be a Python interpreter.

    Attributes:
        path: Absolute path as found on the search path (symlinks not resolved)
        name: File name
        version_hint: Version suffix parsed from the file name ('3.11', '3') or None
        pattern: Label of the name pattern that matched ('explicit' for
            caller-supplied paths)
        search_index: Position of the directory in the search path, -1 for
            caller-supplied paths
    """

    path: Path
    name: str
    version_hint: Optional[str] = None
    pattern: str = "exact"
    search_index: int = 0

    def __str__(self) -> str:
        """String representation."""
        return str(self.path)


SearchPath = Union[str, os.PathLike, Sequence[Union[str, os.PathLike]]]


class CandidateLocator:
    """
    Enumerate interpreter candidates in search-path order.

    Each call to list_candidates() re-reads the search path and re-scans the
    filesystem. Candidates resolving to the same file are reported once, at
    the position of their first occurrence.

    Example:
        >>> locator = CandidateLocator(search_path="/usr/local/bin:/usr/bin")
        >>> [c.name for c in locator.list_candidates()]
        ['python3', 'python3.11', 'python3.12']
    """

    def __init__(
        self,
        search_path: Optional[SearchPath] = None,
        families: Sequence[str] = DEFAULT_FAMILIES,
        patterns: Sequence[NamePattern] = DEFAULT_NAME_PATTERNS,
        executable_suffixes: Optional[Sequence[str]] = None,
        explicit: Sequence[Union[str, os.PathLike]] = (),
    ):
        """
        Initialize locator.

        Args:
            search_path: os.pathsep-joined string or sequence of directories.
                None reads PATH from the environment on every scan.
            families: Interpreter family names, in preference order
            patterns: Name patterns tried for every family, in preference order
            executable_suffixes: Suffixes marking executables (defaults to the host's)
            explicit: Interpreter paths reported before any search-path entry
        """
        self.search_path = search_path
        self.families = tuple(families)
        self.patterns = tuple(patterns)
        if executable_suffixes is None:
            host = detect_host()
            logger.debug(f"Detected host: {host}")
            executable_suffixes = host.executable_suffixes
        self.executable_suffixes = tuple(s.lower() for s in executable_suffixes)
        self.explicit = tuple(explicit)
        self._uses_permission_bit = self.executable_suffixes == ("",)
        self._matchers = [
            (pattern, pattern.compile(family))
            for family in self.families
            for pattern in self.patterns
        ]

    def list_candidates(self) -> Iterator[Candidate]:
        """
        Lazily yield candidates.

        Yields:
            Candidate for every executable matching a name pattern, in search order

        Raises:
            PathUnreadableError: If the search path value cannot be read
        """
        directories = self._read_search_path()
        seen = set()

        for candidate in self._explicit_candidates():
            key = os.path.realpath(candidate.path)
            if key not in seen:
                seen.add(key)
                yield candidate

        for index, directory in enumerate(directories):
            for candidate in self._scan_directory(directory, index):
                key = os.path.realpath(candidate.path)
                if key in seen:
                    logger.debug(f"Skipping {candidate.path}: duplicate of {key}")
                    continue
                seen.add(key)
                yield candidate

    __iter__ = list_candidates

    def match_name(self, filename: str) -> Optional[Tuple[int, NamePattern, Optional[str]]]:
        """
        Match a file name against the configured patterns.

        Args:
            filename: File name (no directory)

        Returns:
            (pattern rank, pattern, version hint) or None if nothing matches
        """
        lowered = filename.lower()
        for suffix in self.executable_suffixes:
            if suffix and not lowered.endswith(suffix):
                continue
            stem = filename[: len(filename) - len(suffix)] if suffix else filename
            for rank, (pattern, matcher) in enumerate(self._matchers):
                match = matcher.fullmatch(stem)
                if match:
                    version = match.groupdict().get("version")
                    return rank, pattern, version
        return None

    def is_executable(self, path: Path) -> bool:
        """
        Check if path is an executable regular file.

        Symbolic links are followed. POSIX hosts require the execute permission
        bit; other hosts require a recognized executable suffix.
        """
        try:
            if not path.is_file():
                return False
        except OSError:
            return False

        if self._uses_permission_bit:
            return os.access(path, os.X_OK)
        return path.suffix.lower() in self.executable_suffixes

    def _read_search_path(self) -> List[str]:
        """
        Split the configured search path into directories.

        Raises:
            PathUnreadableError: If the value is not a path string or sequence of paths
        """
        value = self.search_path
        if value is None:
            value = os.environ.get("PATH", os.defpath)

        try:
            if isinstance(value, (str, os.PathLike)):
                entries = os.fspath(value).split(os.pathsep)
            elif isinstance(value, (list, tuple)):
                entries = [os.fspath(entry) for entry in value]
            else:
                raise TypeError(f"unsupported type {type(value).__name__}")
        except TypeError as e:
            raise PathUnreadableError(value, str(e)) from e

        directories = []
        for entry in entries:
            if not isinstance(entry, str):
                raise PathUnreadableError(value, f"entry {entry!r} is not a text path")
            if "\0" in entry:
                raise PathUnreadableError(value, f"entry {entry!r} contains a NUL byte")
            if entry:
                directories.append(entry)
        return directories

    def _explicit_candidates(self) -> Iterator[Candidate]:
        """Yield caller-supplied interpreter paths that exist and are executable."""
        for entry in self.explicit:
            path = Path(os.path.abspath(os.fspath(entry)))
            if not self.is_executable(path):
                logger.debug(f"Explicit interpreter is not an executable file: {path}")
                continue
            matched = self.match_name(path.name)
            yield Candidate(
                path=path,
                name=path.name,
                version_hint=matched[2] if matched else None,
                pattern="explicit",
                search_index=-1,
            )

    def _scan_directory(self, directory: str, index: int) -> List[Candidate]:
        """
        Find matching executables in one search-path directory.

        Args:
            directory: Directory to scan
            index: Position of the directory in the search path

        Returns:
            Candidates ordered by (pattern rank, file name); empty if unreadable
        """
        base = Path(os.path.abspath(directory))
        try:
            names = os.listdir(base)
        except OSError as e:
            logger.debug(f"Skipping unreadable search path entry {base}: {e}")
            return []

        matches = []
        for name in names:
            matched = self.match_name(name)
            if matched is None:
                continue
            rank, pattern, version = matched
            path = base / name
            if not self.is_executable(path):
                logger.debug(f"Skipping {path}: not an executable file")
                continue
            matches.append((rank, name, pattern, version, path))

        matches.sort(key=lambda item: (item[0], item[1]))
        return [
            Candidate(
                path=path,
                name=name,
                version_hint=version,
                pattern=pattern.label,
                search_index=index,
            )
            for _, name, pattern, version, path in matches
        ]


def list_candidates(search_path: Optional[SearchPath] = None, **kwargs) -> Iterator[Candidate]:
    """
    Enumerate interpreter candidates.

    Args:
        search_path: Search path override (defaults to PATH)
        **kwargs: Further CandidateLocator options

    Returns:
        Lazy iterator of candidates in search order
    """
    return CandidateLocator(search_path=search_path, **kwargs).list_candidates()
