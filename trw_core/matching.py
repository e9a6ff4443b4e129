"""
Matching - Match model and matchers over byte buffers

A Matcher scans a buffer and yields the leftmost-first sequence of
non-overlapping matches. Three kinds exist:

- LiteralSearch: exact byte-sequence occurrences
- PatternSearch: regular expression (``re`` in bytes mode) occurrences
- CountLimit: stops another matcher after its n-th match

Matchers are immutable values. A count limit is a local of each scan, so the
same matcher can be applied to any number of buffers.

Author: TRW maintainers | 2026-10-18
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from itertools import islice
from typing import Iterator, List, Optional, Pattern, Tuple, Union

from .buffer import Buffer
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Span = Tuple[int, int]

NO_SPAN: Span = (-1, -1)


# =============================================================================
# Match Model
# =============================================================================

@dataclass(frozen=True)
class Match:
    """One occurrence: the half-open interval ``[begin, end)`` plus capture spans."""

    begin: int
    end: int
    groups: Tuple[Span, ...] = ()  # spans of groups 1..n, NO_SPAN if not participating

    @property
    def span(self) -> Span:
        return (self.begin, self.end)

    @property
    def length(self) -> int:
        return self.end - self.begin

    def group_span(self, index: int) -> Span:
        """Span of capture group ``index`` (0 is the whole match)."""
        if index == 0:
            return (self.begin, self.end)
        if 0 < index <= len(self.groups):
            return self.groups[index - 1]
        return NO_SPAN


MatchSequence = List[Match]


# =============================================================================
# Matchers
# =============================================================================

class Matcher(ABC):
    """Maps a byte buffer to its sequence of matches."""

    @abstractmethod
    def iter_matches(self, data: Union[bytes, bytearray], end: Optional[int] = None) -> Iterator[Match]:
        """
        Lazily scan ``data[:end]`` from the left.

        Args:
            data: Bytes to scan
            end: Logical end of the content (defaults to ``len(data)``)
        """
        pass

    def find(self, data: Union[bytes, bytearray, Buffer], end: Optional[int] = None) -> MatchSequence:
        """Compute the complete match sequence of ``data`` (bytes or Buffer)."""
        if isinstance(data, Buffer):
            data, end = data.data, len(data)
        return list(self.iter_matches(data, end))


@dataclass(frozen=True)
class LiteralSearch(Matcher):
    """Non-overlapping occurrences of a byte string (``aa`` in ``aaa`` matches once)."""

    needle: bytes

    def __post_init__(self):
        if not isinstance(self.needle, bytes):
            raise ConfigurationError(f"literal pattern must be bytes, got {type(self.needle).__name__}")
        if not self.needle:
            raise ConfigurationError("empty literal pattern")

    def iter_matches(self, data, end=None):
        if end is None:
            end = len(data)
        size = len(self.needle)
        pos = data.find(self.needle, 0, end)
        while pos >= 0:
            yield Match(pos, pos + size)
            pos = data.find(self.needle, pos + size, end)


@dataclass(frozen=True)
class PatternSearch(Matcher):
    """
    Occurrences of a regular expression.

    Anchors refer to the whole buffer. After an empty match the scan resumes
    one byte further (not one character: offsets are byte offsets, even inside
    UTF-8 text), and an empty match abutting the previous match is skipped.
    """

    expression: str
    regex: Pattern = field(repr=False, compare=False)

    def iter_matches(self, data, end=None):
        if end is None:
            end = len(data)
        search = self.regex.search
        group_count = self.regex.groups
        pos, last_end = 0, -1

        while pos <= end:
            m = search(data, pos, end)
            if m is None:
                return
            begin, stop = m.span()
            if begin == stop == last_end:
                pos = stop + 1
                continue
            groups = tuple(m.span(g) for g in range(1, group_count + 1))
            yield Match(begin, stop, groups)
            last_end = stop
            pos = stop if stop > begin else stop + 1


@dataclass(frozen=True)
class CountLimit(Matcher):
    """Stops ``inner`` after ``count`` matches (negative count means unbounded)."""

    inner: Matcher
    count: int

    def __post_init__(self):
        _require_matcher(self.inner)
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise ConfigurationError(f"match limit must be an integer, got {self.count!r}")

    def iter_matches(self, data, end=None):
        matches = self.inner.iter_matches(data, end)
        if self.count < 0:
            return matches
        return islice(matches, self.count)


# =============================================================================
# Pattern compilation
# =============================================================================

# POSIX bracket classes, expressed as ``re`` class items
POSIX_CLASSES = {
    "alnum": "0-9A-Za-z",
    "alpha": "A-Za-z",
    "ascii": "\\x00-\\x7f",
    "blank": "\\t ",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "!-~",
    "lower": "a-z",
    "print": " -~",
    "punct": "!-/:-@\\[-`{-~",
    "space": "\\t\\n\\v\\f\\r ",
    "upper": "A-Z",
    "word": "0-9A-Za-z_",
    "xdigit": "0-9A-Fa-f",
}

_POSIX_CLASS_RE = re.compile(r"\[:(\^?)([A-Za-z]+):\]")


def translate_posix_classes(expression: str) -> str:
    """
    Rewrite POSIX bracket classes (``[[:space:]]``) into ``re`` syntax.

    Only occurrences inside a character class are translated; escapes are
    copied untouched. Negated forms (``[:^space:]``) are not supported, use
    ``[^[:space:]]`` instead.

    Raises:
        ConfigurationError: Unknown or negated POSIX class
    """
    if "[:" not in expression:
        return expression

    out: List[str] = []
    i, n = 0, len(expression)
    in_class = False

    while i < n:
        ch = expression[i]

        if ch == "\\":
            out.append(expression[i:i + 2])
            i += 2
            continue

        if not in_class:
            out.append(ch)
            i += 1
            if ch == "[":
                in_class = True
                if expression.startswith("^", i):
                    out.append("^")
                    i += 1
                # A leading ']' is a literal member
                if expression.startswith("]", i):
                    out.append("\\]")
                    i += 1
            continue

        if ch == "]":
            in_class = False
            out.append(ch)
            i += 1
        elif ch == "[":
            m = _POSIX_CLASS_RE.match(expression, i)
            if m is None:
                out.append("\\[")
                i += 1
                continue
            negated, name = m.groups()
            if name not in POSIX_CLASSES:
                raise ConfigurationError(f"unknown POSIX class '[:{name}:]' in pattern {expression!r}")
            if negated:
                raise ConfigurationError(
                    f"negated POSIX class '[:^{name}:]' is not supported in pattern {expression!r}"
                )
            out.append(POSIX_CLASSES[name])
            i = m.end()
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def compile_pattern(expression: str) -> Pattern:
    """
    Compile a pattern string into a bytes regular expression.

    Raises:
        ConfigurationError: Missing, empty or malformed pattern
    """
    if expression is None:
        raise ConfigurationError("pattern is required")
    if not isinstance(expression, str):
        raise ConfigurationError(f"pattern must be a string, got {type(expression).__name__}")
    if not expression:
        raise ConfigurationError("empty pattern")

    translated = translate_posix_classes(expression)
    try:
        return re.compile(translated.encode("utf-8"))
    except re.error as e:
        raise ConfigurationError(f"invalid pattern {expression!r}: {e}") from e


# =============================================================================
# Builders
# =============================================================================

def build_literal_matcher(pattern: Union[bytes, str]) -> LiteralSearch:
    """
    Build a matcher for a literal byte sequence.

    Args:
        pattern: Bytes to search for (str is encoded as UTF-8)

    Raises:
        ConfigurationError: Missing or empty pattern
    """
    if pattern is None:
        raise ConfigurationError("literal pattern is required")
    if isinstance(pattern, str):
        pattern = pattern.encode("utf-8")
    elif isinstance(pattern, (bytearray, memoryview)):
        pattern = bytes(pattern)
    return LiteralSearch(pattern)


def build_pattern_matcher(pattern: str) -> PatternSearch:
    """
    Build a matcher for a regular expression.

    Raises:
        ConfigurationError: Missing, empty or malformed pattern
    """
    return PatternSearch(pattern, compile_pattern(pattern))


def with_limit(matcher: Matcher, count: int) -> Matcher:
    """Limit ``matcher`` to its first ``count`` matches (``count < 0``: unbounded)."""
    return CountLimit(matcher, count)


def literal(pattern: Union[bytes, str], limit: int = -1) -> Matcher:
    """Shorthand for a literal matcher, optionally count-limited."""
    matcher = build_literal_matcher(pattern)
    return matcher if limit < 0 else with_limit(matcher, limit)


def pattern(expression: str, limit: int = -1) -> Matcher:
    """Shorthand for a pattern matcher, optionally count-limited."""
    matcher = build_pattern_matcher(expression)
    return matcher if limit < 0 else with_limit(matcher, limit)


def _require_matcher(matcher) -> None:
    if matcher is None:
        raise ConfigurationError("matcher is required")
    if not isinstance(matcher, Matcher):
        raise ConfigurationError(f"expected a Matcher, got {type(matcher).__name__}")
