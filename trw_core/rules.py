"""
Rules - Build rewriting pipelines from YAML documents

A rules document is a list of rules, either at the top level or under a
``rules`` key. Each rule names one operation:

    rules:
      - delete:  {literal: "Some", limit: 1}
      - replace: {pattern: "[[:space:]]+", with: " "}
      - expand:  {pattern: "_([^_]+)_", template: "<i>${1}</i>"}

``delete`` and ``replace`` take exactly one of ``literal`` or ``pattern``;
``expand`` always takes a ``pattern``. ``limit`` bounds the number of matches.

Author: TRW maintainers | 2026-10-18
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigurationError, RulesError
from .matching import Matcher, literal as literal_matcher, pattern as pattern_matcher
from .rewriters import Rewriter, build_delete, build_expand, build_pipeline, build_replace

logger = logging.getLogger(__name__)

OPERATIONS = ("delete", "replace", "expand")

# Options accepted by each operation
OPTIONS = {
    "delete": {"literal", "pattern", "limit"},
    "replace": {"literal", "pattern", "limit", "with"},
    "expand": {"pattern", "limit", "template", "literal"},
}


@dataclass
class RuleSpec:
    """One parsed rule."""

    index: int
    operation: str
    literal: Optional[str] = None
    pattern: Optional[str] = None
    substitution: str = ""
    limit: int = -1

    def matcher(self) -> Matcher:
        if self.literal is not None:
            return literal_matcher(self.literal, self.limit)
        return pattern_matcher(self.pattern, self.limit)

    def build(self) -> Rewriter:
        """Build the rewriter for this rule."""
        try:
            if self.operation == "delete":
                return build_delete(self.matcher())
            if self.operation == "replace":
                return build_replace(self.matcher(), self.substitution)
            return build_expand(self.pattern, self.substitution, self.limit)
        except RulesError:
            raise
        except ConfigurationError as e:
            raise RulesError(str(e), index=self.index) from e

    def describe(self) -> str:
        """One-line human readable summary."""
        target = f"literal {self.literal!r}" if self.literal is not None else f"pattern {self.pattern!r}"
        text = f"{self.operation} {target}"
        if self.operation == "replace":
            text += f" with {self.substitution!r}"
        elif self.operation == "expand":
            text += f" as {self.substitution!r}"
        if self.limit >= 0:
            text += f" (first {self.limit})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.literal is not None:
            body["literal"] = self.literal
        else:
            body["pattern"] = self.pattern
        if self.operation == "replace":
            body["with"] = self.substitution
        elif self.operation == "expand":
            body["template"] = self.substitution
        if self.limit >= 0:
            body["limit"] = self.limit
        return {self.operation: body}


def _parse_rule(rule: Any, index: int) -> RuleSpec:
    """Parse one ``{operation: {...}}`` mapping."""
    if not isinstance(rule, dict) or len(rule) != 1:
        raise RulesError("a rule must be a mapping with exactly one operation", index=index)

    operation, body = next(iter(rule.items()))
    if operation not in OPERATIONS:
        raise RulesError(f"unknown operation '{operation}' (expected one of {', '.join(OPERATIONS)})", index=index)
    if not isinstance(body, dict):
        raise RulesError(f"'{operation}' expects a mapping of options", index=index)

    unknown = sorted(set(body) - OPTIONS[operation])
    if unknown:
        raise RulesError(f"unknown option(s) for '{operation}': {', '.join(unknown)}", index=index)

    spec = RuleSpec(index=index, operation=operation)

    has_literal, has_pattern = "literal" in body, "pattern" in body
    if operation == "expand":
        if has_literal:
            raise RulesError("'expand' works on patterns only", index=index)
        if not has_pattern:
            raise RulesError("'expand' requires a 'pattern'", index=index)
    elif has_literal == has_pattern:
        raise RulesError(f"'{operation}' requires exactly one of 'literal' or 'pattern'", index=index)

    for key in ("literal", "pattern"):
        if key in body:
            value = body[key]
            if not isinstance(value, str):
                raise RulesError(f"'{key}' must be a string", index=index)
            setattr(spec, key, value)

    if operation == "replace":
        if "with" not in body:
            raise RulesError("'replace' requires a 'with' value", index=index)
        spec.substitution = _as_text(body["with"], "with", index)
    elif operation == "expand":
        if "template" not in body:
            raise RulesError("'expand' requires a 'template'", index=index)
        spec.substitution = _as_text(body["template"], "template", index)

    if "limit" in body:
        limit = body["limit"]
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise RulesError("'limit' must be an integer", index=index)
        spec.limit = limit

    return spec


def _as_text(value: Any, key: str, index: int) -> str:
    # YAML turns an empty value into None
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RulesError(f"'{key}' must be a string", index=index)
    return value


def parse_rules(data: Any) -> List[RuleSpec]:
    """
    Parse a loaded rules document.

    Args:
        data: List of rules, or mapping with a ``rules`` list

    Returns:
        List of RuleSpec in application order

    Raises:
        RulesError: Malformed document or rule
    """
    if isinstance(data, dict):
        if "rules" not in data:
            raise RulesError("rules document has no 'rules' list")
        data = data["rules"]
    if not isinstance(data, list):
        raise RulesError("rules document must contain a list of rules")
    if not data:
        raise RulesError("rules document contains no rules")

    return [_parse_rule(rule, i) for i, rule in enumerate(data)]


def build_rules_pipeline(specs: List[RuleSpec]) -> Rewriter:
    """Build the pipeline for parsed rules (all rules are validated first)."""
    rewriters = [spec.build() for spec in specs]
    return build_pipeline(*rewriters)


def read_rules(path: Union[str, Path]) -> List[RuleSpec]:
    """
    Read and parse a YAML rules file.

    Raises:
        OSError: File cannot be read
        RulesError: Invalid YAML or malformed rules
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RulesError(f"invalid YAML in {path}: {e}") from e

    specs = parse_rules(data)
    logger.info(f"Loaded {len(specs)} rule(s) from {path}")
    return specs


def load_rules(path: Union[str, Path]) -> Rewriter:
    """Read a YAML rules file and build its pipeline."""
    return build_rules_pipeline(read_rules(path))


def save_rules(specs: List[RuleSpec], path: Union[str, Path]) -> None:
    """Write rules back to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"rules": [s.to_dict() for s in specs]}, f, default_flow_style=False, sort_keys=False)
