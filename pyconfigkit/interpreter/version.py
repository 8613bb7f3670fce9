"""
Interpreter version parsing and ordering.

Accepted formats are MAJOR.MINOR, MAJOR.MINOR.PATCH and MAJOR.MINOR.PATCHsuffix,
where the suffix is a release tag such as "rc2", "a1" or a local marker "+".
"""

import functools
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..core.exceptions import MalformedVersionError

_VERSION_RE = re.compile(
    r"(?P<major>[0-9]+)\.(?P<minor>[0-9]+)"
    r"(?:\.(?P<patch>[0-9]+)(?P<suffix>[A-Za-z+~\-][0-9A-Za-z.+~\-]*)?)?"
)

# Suffixes that mark a release before the final one (3.13.0rc2 < 3.13.0)
PRERELEASE_TAGS = ("dev", "a", "alpha", "b", "beta", "c", "pre", "rc")

_SUFFIX_PART_RE = re.compile(r"[0-9]+|[^0-9]+")


def _suffix_key(suffix: str) -> Tuple:
    """Sort key for a release suffix; final releases have the empty suffix."""
    if not suffix:
        return (1, (), "")

    parts = tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in _SUFFIX_PART_RE.findall(suffix)
    )
    leading = re.match(r"[A-Za-z]+", suffix)
    rank = 0 if leading and leading.group(0).lower() in PRERELEASE_TAGS else 2
    return (rank, parts, suffix)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """
    Interpreter version: (major, minor, patch-or-absent) plus an optional suffix.

    Ordering compares major, then minor, then patch, with an absent patch
    sorting before any present patch. Pre-release suffixes sort before the
    final release, other suffixes after it.

    Example:
        >>> Version.parse("3.9.7") < Version.parse("3.10")
        True
        >>> Version.parse("3.13.0rc2") < Version.parse("3.13.0")
        True
    """

    major: int
    minor: int
    patch: Optional[int] = None
    suffix: str = ""

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a version string.

        Args:
            text: Version string, surrounding whitespace is ignored

        Returns:
            Parsed Version

        Raises:
            MalformedVersionError: If the text is not an accepted format
        """
        if not isinstance(text, str):
            raise MalformedVersionError(repr(text))

        match = _VERSION_RE.fullmatch(text.strip())
        if not match:
            raise MalformedVersionError(text)

        patch = match.group("patch")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(patch) if patch is not None else None,
            suffix=match.group("suffix") or "",
        )

    def sort_key(self) -> Tuple:
        """Key implementing the version total order."""
        patch = -1 if self.patch is None else self.patch
        return (self.major, self.minor, patch, _suffix_key(self.suffix))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    @property
    def short(self) -> str:
        """MAJOR.MINOR form, e.g. '3.11'."""
        return f"{self.major}.{self.minor}"

    @property
    def is_prerelease(self) -> bool:
        """True for alpha, beta, release candidate and dev builds."""
        return _suffix_key(self.suffix)[0] == 0

    def at_least(self, major: int, minor: int = 0, patch: int = 0) -> bool:
        """
        Check the version against a minimum (major, minor, patch).

        An absent patch counts as 0, so 3.9 satisfies at_least(3, 9).
        """
        return (self.major, self.minor, self.patch or 0) >= (major, minor, patch)

    def matches_major(self, major: int) -> bool:
        """True if the major version equals major."""
        return self.major == major

    def __str__(self) -> str:
        text = self.short
        if self.patch is not None:
            text += f".{self.patch}{self.suffix}"
        return text

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"


VersionLike = Union[Version, str]


def coerce_version(value: VersionLike) -> Version:
    """Return value as a Version, parsing strings."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)
