"""
Rewriters - Delete, Replace, Expand and their sequential composition

Every rewriter implements ``rewrite(current, spare) -> (result, spare)``:

- ``current`` holds the data to transform, ``spare`` is a buffer available for
  reuse (its content is ignored). Ownership of both moves into the call.
- Exactly one returned buffer holds the output; the other is the new spare.

Decisions per operation:

- Delete compacts ``current`` in place and never allocates.
- Replace works in place when no match is shorter than the substitution,
  otherwise it writes into a destination drawn from the spare.
- Expand always writes into a destination drawn from the spare.
- A Pipeline threads the (current, spare) pair through its stages, so a chain
  of any length keeps two live buffers.

A scan that finds nothing returns the input untouched: no copy, no allocation.

Author: TRW maintainers | 2026-10-18
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from .buffer import Buffer, ensure_capacity
from .errors import ConfigurationError
from .matching import (
    CountLimit,
    Matcher,
    MatchSequence,
    PatternSearch,
    _require_matcher,
    build_pattern_matcher,
)
from .template import Template, compile_template

logger = logging.getLogger(__name__)

BufferPair = Tuple[Buffer, Buffer]


# =============================================================================
# Rewriter base
# =============================================================================

class Rewriter(ABC):
    """A text rewriting operation over owned buffers."""

    @abstractmethod
    def rewrite(self, current: Buffer, spare: Buffer) -> BufferPair:
        """
        Transform ``current``, possibly reusing ``spare``.

        Both buffers are consumed: the handles passed in are released and must
        not be used afterwards.

        Returns:
            (result, spare) pair of fresh handles
        """
        pass

    def apply(self, data: Union[bytes, bytearray]) -> bytes:
        """Rewrite a private copy of ``data`` and return the result."""
        result, _ = self.rewrite(Buffer.from_bytes(data), Buffer.empty())
        return result.getvalue()

    def apply_file(self, path: Union[str, Path]) -> bytes:
        """Rewrite the content of a file."""
        content = bytearray(Path(path).read_bytes())
        result, _ = self.rewrite(Buffer(content), Buffer.empty())
        return result.getvalue()


# =============================================================================
# Shared copy loops
# =============================================================================

def rewrite_in_place(buffer: Buffer, matches: MatchSequence, substitution: bytes = b"") -> None:
    """
    Replace every match by ``substitution`` inside ``buffer`` itself.

    Each unmatched gap is moved left over the consumed prefix. This is only
    valid when the write cursor never passes the read cursor, i.e. when no
    match is shorter than the substitution.
    """
    size = len(substitution)
    write = matches[0].begin
    last = len(matches) - 1

    with memoryview(buffer.data) as view:
        for i, match in enumerate(matches):
            # write cursor <= read cursor
            assert write + size <= match.end, (
                f"write cursor {write + size} passed read cursor {match.end}"
            )
            if size:
                view[write:write + size] = substitution
                write += size

            gap_end = matches[i + 1].begin if i < last else len(buffer)
            gap = gap_end - match.end
            if gap:
                view[write:write + gap] = view[match.end:gap_end]
                write += gap

    buffer.truncate(write)


def rewrite_into(dest: Buffer, source: Buffer, matches: MatchSequence, substitution: bytes = b"") -> None:
    """Append ``source`` to ``dest`` with every match replaced by ``substitution``."""
    pos = 0
    with memoryview(source.data) as view:
        for match in matches:
            dest.append(view[pos:match.begin])
            dest.append(substitution)
            pos = match.end
        dest.append(view[pos:len(source)])


def replaced_size(length: int, matches: MatchSequence, substitution_size: int) -> int:
    """Length after replacing every match by a substitution of the given size."""
    spans = sum(m.length for m in matches)
    return length - spans + len(matches) * substitution_size


# =============================================================================
# Operations
# =============================================================================

@dataclass(frozen=True)
class Delete(Rewriter):
    """Removes every match, compacting the buffer in place."""

    matcher: Matcher

    def __post_init__(self):
        _require_matcher(self.matcher)

    def rewrite(self, current, spare):
        current, spare = current.take(), spare.take()
        matches = self.matcher.find(current)
        if matches:
            rewrite_in_place(current, matches)
        return current, spare


@dataclass(frozen=True)
class Replace(Rewriter):
    """Substitutes every match with a fixed byte string."""

    matcher: Matcher
    substitution: bytes

    def __post_init__(self):
        _require_matcher(self.matcher)
        if not isinstance(self.substitution, bytes):
            raise ConfigurationError(
                f"substitution must be bytes, got {type(self.substitution).__name__}"
            )

    def rewrite(self, current, spare):
        current, spare = current.take(), spare.take()
        matches = self.matcher.find(current)
        if not matches:
            return current, spare

        size = len(self.substitution)
        if all(size <= m.length for m in matches):
            rewrite_in_place(current, matches, self.substitution)
            return current, spare

        # Some substitution is longer than its match: writing in place would
        # overwrite bytes that are still to be read.
        dest = ensure_capacity(spare, replaced_size(len(current), matches, size))
        rewrite_into(dest, current, matches, self.substitution)
        return dest, current


@dataclass(frozen=True)
class Expand(Rewriter):
    """Substitutes every match with a template expanded from its capture groups."""

    matcher: Matcher
    template: Template

    def __post_init__(self):
        _require_matcher(self.matcher)

    def rewrite(self, current, spare):
        current, spare = current.take(), spare.take()
        matches = self.matcher.find(current)
        if not matches:
            return current, spare

        # Output size is unknown before expanding: start from the input size
        dest = ensure_capacity(spare, len(current))
        pos = 0
        with memoryview(current.data) as view:
            for match in matches:
                dest.append(view[pos:match.begin])
                self.template.expand_into(dest, view, match)
                pos = match.end
            dest.append(view[pos:len(current)])
        return dest, current


@dataclass(frozen=True)
class Pipeline(Rewriter):
    """Sequential composition, ping-ponging the (current, spare) pair between stages."""

    stages: Tuple[Rewriter, ...]

    def __post_init__(self):
        if not self.stages:
            raise ConfigurationError("empty rewriter list in pipeline")

    def rewrite(self, current, spare):
        for stage in self.stages:
            current, spare = stage.rewrite(current, spare)
            spare.reset()
        return current, spare

    def __len__(self) -> int:
        return len(self.stages)


# =============================================================================
# Builders
# =============================================================================

def build_delete(matcher: Matcher) -> Rewriter:
    """Rewriter removing all matches of ``matcher``."""
    return Delete(matcher)


def build_replace(matcher: Matcher, substitution: Union[bytes, str]) -> Rewriter:
    """
    Rewriter substituting all matches of ``matcher`` with ``substitution``.

    An empty substitution yields a Delete.
    """
    if substitution is None:
        raise ConfigurationError("substitution is required")
    if isinstance(substitution, str):
        substitution = substitution.encode("utf-8")
    elif isinstance(substitution, (bytearray, memoryview)):
        substitution = bytes(substitution)
    if not substitution:
        return Delete(matcher)
    return Replace(matcher, substitution)


def build_expand(pattern: str, template: str, limit: int = -1) -> Rewriter:
    """
    Rewriter expanding ``template`` for every match of the regular expression.

    Args:
        pattern: Regular expression with capture groups
        template: Template using ``$1``, ``${1}``, ``$name`` or ``${name}``
        limit: Expand only the first ``limit`` matches (negative: all)

    Raises:
        ConfigurationError: Empty or malformed pattern
    """
    search: PatternSearch = build_pattern_matcher(pattern)
    matcher: Matcher = search if limit < 0 else CountLimit(search, limit)

    if template is None:
        raise ConfigurationError("template is required")
    if not template:
        return Delete(matcher)

    return Expand(matcher, compile_template(template, search.regex))


def build_pipeline(*rewriters: Rewriter) -> Rewriter:
    """
    Compose rewriters into one, applied left to right.

    A single rewriter is returned as is.

    Raises:
        ConfigurationError: Empty list or non-rewriter element
    """
    if len(rewriters) == 1 and isinstance(rewriters[0], (list, tuple)):
        rewriters = tuple(rewriters[0])
    if not rewriters:
        raise ConfigurationError("empty rewriter list in pipeline")

    for i, rw in enumerate(rewriters):
        if not isinstance(rw, Rewriter):
            raise ConfigurationError(
                f"pipeline stage {i + 1} is not a Rewriter: {type(rw).__name__}"
            )

    if len(rewriters) == 1:
        return rewriters[0]

    logger.debug(f"Building pipeline of {len(rewriters)} stages")
    return Pipeline(tuple(rewriters))


def apply(rewriter: Rewriter, data: Union[bytes, bytearray]) -> bytes:
    """Apply ``rewriter`` to ``data``; no match leaves the content unchanged."""
    return rewriter.apply(data)


def apply_file(rewriter: Rewriter, path: Union[str, Path]) -> bytes:
    """Apply ``rewriter`` to the content of the file at ``path``."""
    return rewriter.apply_file(path)
