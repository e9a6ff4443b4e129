"""
Template - Expansion templates with capture group references

Syntax:
    $1, ${1}        capture group by number ($0 is the whole match)
    $name, ${name}  capture group by name
    $$              literal '$'

In the ``$name`` form the name is taken as long as possible: ``$1x`` means
``${1x}``, not ``${1}x``. A reference to a group that does not exist or did
not participate in the match expands to nothing. A '$' that does not start a
valid reference is copied as is.

Templates are parsed once, against the pattern they will be used with, into a
tuple of literal chunks and group indices.

Author: TRW maintainers | 2026-10-18
"""

import re
from dataclasses import dataclass
from typing import Pattern, Tuple, Union

from .buffer import Buffer
from .matching import Match

TemplatePart = Union[bytes, int]

_NAME_CHARS = re.compile(rb"[A-Za-z0-9_]+")


@dataclass(frozen=True)
class Template:
    """A parsed template: literal byte chunks interleaved with group indices."""

    source: str
    parts: Tuple[TemplatePart, ...]

    @property
    def is_empty(self) -> bool:
        return not self.parts

    @property
    def references(self) -> Tuple[int, ...]:
        return tuple(p for p in self.parts if isinstance(p, int))

    def expand_into(self, dest: Buffer, source: memoryview, match: Match) -> None:
        """Append the expansion for ``match`` (whose spans index ``source``) to ``dest``."""
        for part in self.parts:
            if isinstance(part, bytes):
                dest.append(part)
                continue
            begin, end = match.group_span(part)
            if begin >= 0:
                dest.append(source[begin:end])

    def expand(self, source: bytes, match: Match) -> bytes:
        """Expansion for ``match`` as a new bytes object."""
        dest = Buffer.empty()
        with memoryview(source) as view:
            self.expand_into(dest, view, match)
        return dest.getvalue()


def _resolve(name: bytes, regex: Pattern) -> int:
    """Group index for a reference name, or -1 when it refers to nothing."""
    if name.isdigit():
        # Leading zeros are not a number; look the name up instead
        if name[:1] != b"0" or len(name) == 1:
            index = int(name)
            return index if index <= regex.groups else -1
    return regex.groupindex.get(name.decode("ascii"), -1)


def compile_template(template: str, regex: Pattern) -> Template:
    """
    Parse ``template`` for use with matches of ``regex``.

    Args:
        template: Template text (encoded as UTF-8)
        regex: Compiled bytes pattern the template refers to

    Returns:
        Template with references resolved to group indices
    """
    raw = template.encode("utf-8") if isinstance(template, str) else bytes(template)
    parts = []
    literal = bytearray()
    i, n = 0, len(raw)

    while i < n:
        dollar = raw.find(b"$", i)
        if dollar < 0:
            literal += raw[i:]
            break
        literal += raw[i:dollar]
        i = dollar + 1

        if raw.startswith(b"$", i):
            literal += b"$"
            i += 1
            continue

        braced = raw.startswith(b"{", i)
        start = i + 1 if braced else i
        m = _NAME_CHARS.match(raw, start)
        if m is None or (braced and not raw.startswith(b"}", m.end())):
            # Malformed reference: keep the '$' as text
            literal += b"$"
            continue

        i = m.end() + 1 if braced else m.end()
        index = _resolve(m.group(), regex)
        if index < 0:
            continue
        if literal:
            parts.append(bytes(literal))
            literal.clear()
        parts.append(index)

    if literal:
        parts.append(bytes(literal))

    return Template(source=template, parts=tuple(parts))
