"""
Pytest Configuration and Fixtures

Author: TRW maintainers | 2026-10-18
"""

import sys
from pathlib import Path
from typing import List

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from trw_core import Buffer  # noqa: E402


SCENARIO_INPUT = b"*SomeSome*  example    _text_"
SCENARIO_OUTPUT = b"<b>Some</b> example <i>text</i>"

SCENARIO_RULES = """\
rules:
  - delete:
      literal: "Some"
      limit: 1
  - replace:
      pattern: "[[:space:]]+"
      with: " "
  - expand:
      pattern: "_([^_]+)_"
      template: "<i>${1}</i>"
  - expand:
      pattern: "\\\\*([^\\\\*]+)\\\\*"
      template: "<b>${1}</b>"
"""


@pytest.fixture
def allocations(monkeypatch) -> List[int]:
    """Record the capacity of every buffer allocated through Buffer.allocate."""
    calls: List[int] = []
    original = Buffer.allocate.__func__

    def counting(cls, capacity):
        calls.append(capacity)
        return original(cls, capacity)

    monkeypatch.setattr(Buffer, "allocate", classmethod(counting))
    return calls


@pytest.fixture
def scenario_pipeline():
    """The four-stage markup pipeline."""
    from trw_core import build_delete, build_expand, build_literal_matcher, build_pattern_matcher
    from trw_core import build_pipeline, build_replace, with_limit

    return build_pipeline(
        build_delete(with_limit(build_literal_matcher("Some"), 1)),
        build_replace(build_pattern_matcher("[[:space:]]+"), " "),
        build_expand("_([^_]+)_", "<i>${1}</i>"),
        build_expand(r"\*([^\*]+)\*", "<b>${1}</b>"),
    )


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """A YAML rules file describing the four-stage markup pipeline."""
    path = tmp_path / "rules.yaml"
    path.write_text(SCENARIO_RULES, encoding="utf-8")
    return path


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch) -> Path:
    """Run in an empty directory with no TRW environment overrides."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("TRW_LOG_LEVEL", "TRW_RULES", "TRW_BACKUP_SUFFIX"):
        monkeypatch.delenv(name, raising=False)
    return work
