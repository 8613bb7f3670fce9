"""
pyconfigkit/interpreter/parser.py

Probe output parsing - turns raw interpreter output into a Config.

Two independent parsers are composed:

- The flags parser tokenizes a python-config style line into include
  directories, library directories, library names and opaque flags. Opaque
  flags are kept in their original order so that flags added by newer
  interpreters are passed through instead of dropped.
- The introspection parser reads key/value lines. Keys may appear in any
  order, unknown keys are ignored, and required keys must be present.

Parsing is pure: no I/O, and identical input always gives an identical result.
"""

import re
import shlex
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import MalformedFieldError, MalformedFlagsError, MissingFieldError
from .config import Config
from .prober import RawProbeOutput
from .version import Version

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("version", "abi", "static")

_TRUE_VALUES = ("true", "yes", "on", "1")
_FALSE_VALUES = ("false", "no", "off", "0")

# key=value, key: value or key value; a bare key has an empty value
_PAIR_RE = re.compile(r"\s*(?P<key>[A-Za-z_][A-Za-z0-9_.\-]*)(?:\s*[=:]\s*|\s+|\s*$)(?P<value>.*)")

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

# Opaque flags that only make sense on the linker command line
_LINK_FLAG_PREFIXES = ("-Wl,", "-Xlinker", "-framework", "-F")
_LINK_FLAGS = ("-rdynamic", "-shared", "-static", "-export-dynamic", "-pie", "-no-pie")
_LIBRARY_FILE_RE = re.compile(r".+\.(a|lib|dylib|so(\.[0-9]+)*)$")

# Flags whose argument may follow as a separate token
_DETACHED_ARGUMENT_FLAGS = ("-framework", "-Xlinker")


class TokenKind(Enum):
    """Kinds of flag tokens."""

    INCLUDE_PATH = "include_path"
    LIB_PATH = "lib_path"
    LIB_NAME = "lib_name"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class FlagToken:
    """
    One recognized unit of a flags line.

    Attributes:
        kind: Token kind
        value: Path or library name for recognized kinds, the flag itself for OPAQUE
        raw: Original text of the token (both parts for detached arguments)
    """

    kind: TokenKind
    value: str
    raw: str


@dataclass(frozen=True)
class FlagSet:
    """Flags line split into its parts, each in original order."""

    include_dirs: Tuple[str, ...] = ()
    library_dirs: Tuple[str, ...] = ()
    libraries: Tuple[str, ...] = ()
    compile_flags: Tuple[str, ...] = ()
    link_flags: Tuple[str, ...] = ()


def tokenize_flags(text: str) -> List[FlagToken]:
    """
    Tokenize a whitespace-separated flags line.

    Tokens containing whitespace are quoted with double or single quotes.
    Backslashes are literal so Windows paths survive unchanged.

    Recognizes -I<dir>, -isystem<dir>, -L<dir> and -l<name>, each also with
    the argument as the following token. -framework and -Xlinker keep their
    argument in the same opaque token.

    Args:
        text: Flags output; multiple lines are treated as one line

    Returns:
        Tokens in input order

    Raises:
        MalformedFlagsError: If a flag is missing its argument, a quote is
            not closed or a token contains control characters
    """
    words = _split_words(text)
    tokens = []
    index = 0

    while index < len(words):
        word = words[index]
        if _CONTROL_RE.search(word):
            raise MalformedFlagsError(word, "contains control characters")

        kind, value = _classify(word)
        raw = word

        if kind is not None and not value:
            # Argument in the next token: "-I /usr/include"
            if index + 1 >= len(words) or words[index + 1].startswith("-"):
                raise MalformedFlagsError(word, "missing argument")
            value = words[index + 1]
            raw = f"{word} {value}"
            index += 1
            if _CONTROL_RE.search(value):
                raise MalformedFlagsError(value, "contains control characters")
        elif kind is None and word in _DETACHED_ARGUMENT_FLAGS:
            if index + 1 >= len(words):
                raise MalformedFlagsError(word, "missing argument")
            raw = f"{word} {words[index + 1]}"
            index += 1

        if kind is None:
            tokens.append(FlagToken(TokenKind.OPAQUE, raw, raw))
        else:
            tokens.append(FlagToken(kind, value, raw))
        index += 1

    return tokens


def _split_words(text: str) -> List[str]:
    """Split a flags line like a POSIX shell, without backslash escapes."""
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""
    try:
        return list(lexer)
    except ValueError as e:
        raise MalformedFlagsError(text.strip(), str(e).lower()) from e


def _classify(word: str) -> Tuple[Optional[TokenKind], str]:
    """Return the recognized kind of a flag and its attached argument."""
    if word.startswith("-isystem"):
        return TokenKind.INCLUDE_PATH, word[len("-isystem"):]
    if word.startswith("-I"):
        return TokenKind.INCLUDE_PATH, word[2:]
    if word.startswith("-L"):
        return TokenKind.LIB_PATH, word[2:]
    if word.startswith("-l"):
        return TokenKind.LIB_NAME, word[2:]
    return None, word


def is_link_flag(flag: str) -> bool:
    """
    Check if an opaque flag belongs on the linker command line.

    Args:
        flag: Opaque flag (detached arguments included)

    Returns:
        True for linker options and direct library files
    """
    if flag.startswith(_LINK_FLAG_PREFIXES) or flag in _LINK_FLAGS:
        return True
    return bool(_LIBRARY_FILE_RE.match(flag))


def parse_flags(text: str) -> FlagSet:
    """
    Parse a flags line into a FlagSet.

    Args:
        text: Flags output

    Returns:
        FlagSet with every token accounted for

    Raises:
        MalformedFlagsError: If the line cannot be tokenized

    Example:
        >>> flags = parse_flags("-I/usr/include/python3.11 -lpython3.11 -ldl")
        >>> flags.libraries
        ('python3.11', 'dl')
    """
    include_dirs = []
    library_dirs = []
    libraries = []
    compile_flags = []
    link_flags = []

    for token in tokenize_flags(text):
        if token.kind is TokenKind.INCLUDE_PATH:
            include_dirs.append(token.value)
        elif token.kind is TokenKind.LIB_PATH:
            library_dirs.append(token.value)
        elif token.kind is TokenKind.LIB_NAME:
            libraries.append(token.value)
        elif is_link_flag(token.value):
            link_flags.append(token.value)
        else:
            compile_flags.append(token.value)

    return FlagSet(
        include_dirs=tuple(include_dirs),
        library_dirs=tuple(library_dirs),
        libraries=tuple(libraries),
        compile_flags=tuple(compile_flags),
        link_flags=tuple(link_flags),
    )


def parse_introspection(text: str) -> Dict[str, str]:
    """
    Parse key/value introspection output.

    Each non-blank line holds one pair separated by '=', ':' or whitespace.
    Keys are case-insensitive and stored lowercased; values are stripped.
    Lines starting with '#' are comments. A later duplicate key replaces
    an earlier one.

    Args:
        text: Introspection output

    Returns:
        Mapping of key to value, unknown keys included

    Example:
        >>> parse_introspection("version = 3.9.7\\nabi:m\\n")
        {'version': '3.9.7', 'abi': 'm'}
    """
    fields = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _PAIR_RE.fullmatch(line)
        if not match:
            logger.debug(f"Ignoring unrecognized introspection line: {line!r}")
            continue
        fields[match.group("key").lower()] = match.group("value").strip()
    return fields


def parse_bool(name: str, value: str) -> bool:
    """
    Parse a boolean field.

    Raises:
        MalformedFieldError: If the value is not a recognized boolean literal
    """
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise MalformedFieldError(name, value, "a boolean (true/false)")


def parse_positive_int(name: str, value: str) -> int:
    """
    Parse a positive decimal integer field.

    Raises:
        MalformedFieldError: If the value is not a positive decimal integer
    """
    if not re.fullmatch(r"[0-9]+", value.strip()) or int(value) <= 0:
        raise MalformedFieldError(name, value, "a positive integer")
    return int(value)


def build_config(executable: Path, flags: FlagSet, fields: Dict[str, str]) -> Config:
    """
    Combine parsed flags and introspection fields into a Config.

    Args:
        executable: Interpreter path used when the output reports none
        flags: Parsed flags line
        fields: Parsed introspection fields

    Returns:
        Config

    Raises:
        MissingFieldError: If a required field is absent
        MalformedVersionError: If the version field is invalid
        MalformedFieldError: If a typed field is invalid
    """
    for name in REQUIRED_FIELDS:
        if name not in fields:
            raise MissingFieldError(name)

    version = Version.parse(fields["version"])
    is_static = parse_bool("static", fields["static"])

    pointer_size = None
    if fields.get("pointer_size"):
        pointer_size = parse_positive_int("pointer_size", fields["pointer_size"])

    reported = fields.get("executable")
    if reported:
        executable = Path(reported)

    return Config(
        executable=executable,
        version=version,
        include_dirs=tuple(Path(path) for path in flags.include_dirs),
        library_dirs=tuple(Path(path) for path in flags.library_dirs),
        libraries=flags.libraries,
        extra_compile_flags=flags.compile_flags,
        extra_link_flags=flags.link_flags,
        is_static=is_static,
        abi_tag=fields["abi"] or None,
        implementation=fields.get("implementation") or "CPython",
        base_prefix=fields.get("base_prefix") or None,
        libdir=fields.get("libdir") or None,
        ld_version=fields.get("ld_version") or None,
        pointer_size=pointer_size,
    )


def parse(raw: RawProbeOutput) -> Config:
    """
    Parse raw probe output into a Config.

    Args:
        raw: Output captured by a Prober

    Returns:
        Config for the probed interpreter

    Raises:
        MalformedFlagsError: If the flags line cannot be tokenized
        MalformedVersionError: If the version is not MAJOR.MINOR[.PATCH[suffix]]
        MissingFieldError: If version, abi or static is absent
        MalformedFieldError: If a typed field cannot be converted
    """
    flags = parse_flags(raw.flags_output)
    fields = parse_introspection(raw.introspection_output)
    return build_config(raw.executable, flags, fields)
