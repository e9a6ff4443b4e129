"""
TRW Core - Composable text rewriting over byte buffers

Matchers find occurrences, rewriters delete, replace or template-expand them,
and pipelines chain rewriters while keeping at most two live buffers.

    >>> rw = build_pipeline(
    ...     build_delete(with_limit(build_literal_matcher("Some"), 1)),
    ...     build_replace(build_pattern_matcher("[[:space:]]+"), " "),
    ...     build_expand("_([^_]+)_", "<i>${1}</i>"),
    ...     build_expand(r"\\*([^\\*]+)\\*", "<b>${1}</b>"),
    ... )
    >>> apply(rw, b"*SomeSome*  example    _text_")
    b'<b>Some</b> example <i>text</i>'

Author: TRW maintainers | 2026-10-18
"""

from .version import __version__
from .errors import TRWError, ConfigurationError, RulesError, BufferReleasedError
from .buffer import Buffer, ensure_capacity, grown_capacity
from .matching import (
    Match,
    MatchSequence,
    Matcher,
    LiteralSearch,
    PatternSearch,
    CountLimit,
    build_literal_matcher,
    build_pattern_matcher,
    with_limit,
    literal,
    pattern,
    compile_pattern,
    translate_posix_classes,
)
from .template import Template, compile_template
from .rewriters import (
    Rewriter,
    Delete,
    Replace,
    Expand,
    Pipeline,
    build_delete,
    build_replace,
    build_expand,
    build_pipeline,
    apply,
    apply_file,
)
from .rules import RuleSpec, parse_rules, read_rules, load_rules, save_rules, build_rules_pipeline

__all__ = [
    "__version__",
    # Errors
    "TRWError",
    "ConfigurationError",
    "RulesError",
    "BufferReleasedError",
    # Buffers
    "Buffer",
    "ensure_capacity",
    "grown_capacity",
    # Matching
    "Match",
    "MatchSequence",
    "Matcher",
    "LiteralSearch",
    "PatternSearch",
    "CountLimit",
    "build_literal_matcher",
    "build_pattern_matcher",
    "with_limit",
    "literal",
    "pattern",
    "compile_pattern",
    "translate_posix_classes",
    # Templates
    "Template",
    "compile_template",
    # Rewriters
    "Rewriter",
    "Delete",
    "Replace",
    "Expand",
    "Pipeline",
    "build_delete",
    "build_replace",
    "build_expand",
    "build_pipeline",
    "apply",
    "apply_file",
    # Rules
    "RuleSpec",
    "parse_rules",
    "read_rules",
    "load_rules",
    "save_rules",
    "build_rules_pipeline",
]
