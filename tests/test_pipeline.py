"""
Tests for pipelines (sequential composition)

Author: TRW maintainers | 2026-10-18
"""

import pytest

from trw_core import (
    Buffer,
    ConfigurationError,
    Delete,
    Pipeline,
    apply,
    apply_file,
    build_delete,
    build_expand,
    build_literal_matcher,
    build_pattern_matcher,
    build_pipeline,
    build_replace,
    with_limit,
)

from conftest import SCENARIO_INPUT, SCENARIO_OUTPUT


class TestScenarios:
    """End-to-end examples."""

    def test_delete_first_occurrence(self):
        rw = build_delete(with_limit(build_literal_matcher("Some"), 1))
        assert apply(rw, b"SomeSome text") == b"Some text"

    def test_delete_every_occurrence(self):
        rw = build_delete(build_literal_matcher("Some"))
        assert apply(rw, b"SomeSome text") == b" text"

    def test_collapse_whitespace(self):
        rw = build_replace(build_pattern_matcher("[[:space:]]+"), " ")
        assert apply(rw, b"a   b\tc") == b"a b c"

    def test_italic_markup(self):
        assert apply(build_expand("_([^_]+)_", "<i>${1}</i>"), b"a _b_ c") == b"a <i>b</i> c"

    def test_markup_pipeline(self, scenario_pipeline):
        assert apply(scenario_pipeline, SCENARIO_INPUT) == SCENARIO_OUTPUT

    def test_no_match_identity(self):
        assert apply(build_delete(build_literal_matcher("z")), b"abc") == b"abc"

    def test_pipeline_is_reusable(self, scenario_pipeline):
        assert apply(scenario_pipeline, SCENARIO_INPUT) == SCENARIO_OUTPUT
        assert apply(scenario_pipeline, SCENARIO_INPUT) == SCENARIO_OUTPUT
        assert apply(scenario_pipeline, b"plain") == b"plain"


class TestMultiStage:
    """Chains of the same operation."""

    @pytest.mark.parametrize("src,needles,expected", [
        ("abc", ["a", "b"], "c"),
        ("abc", ["a", "c"], "b"),
        ("abc", ["b", "c"], "a"),
        ("abc", ["a", "z"], "bc"),
        ("abc", ["a", "b", "c"], ""),
        ("abc", ["x", "y", "z"], "abc"),
    ])
    def test_delete_chain(self, src, needles, expected):
        rw = build_pipeline(*[build_delete(build_literal_matcher(n)) for n in needles])
        assert apply(rw, src.encode()) == expected.encode()

    @pytest.mark.parametrize("src,substitutions,expected", [
        ("abc", [("a", "X"), ("b", "Y"), ("c", "Z")], "XYZ"),
        ("abc", [("a", ""), ("b", "Y"), ("c", "Z")], "YZ"),
        ("aa bb cc aa bb cc", [("aa", "XXX"), ("bb", "YYY"), ("cc", "ZZZ")], "XXX YYY ZZZ XXX YYY ZZZ"),
        ("aa bb cc aa bb cc", [("aa ", ""), ("bb", "YYY"), ("cc", "ZZZ")], "YYY ZZZ YYY ZZZ"),
        ("aa bb cc aa bb cc", [("aa", "XXX"), (" bb", ""), ("cc", "ZZZ")], "XXX ZZZ XXX ZZZ"),
        ("aa bb cc aa bb cc", [("aa", "XXX"), ("bb", "YYY"), (" cc", "")], "XXX YYY XXX YYY"),
        ("aa bb cc aa bb cc", [("bb", "XXX"), ("XXX", "Y"), ("Y", "ZZZ")], "aa ZZZ cc aa ZZZ cc"),
    ])
    def test_replace_chain(self, src, substitutions, expected):
        rw = build_pipeline([build_replace(build_literal_matcher(p), r) for p, r in substitutions])
        assert apply(rw, src.encode()) == expected.encode()

    @pytest.mark.parametrize("src,substitutions,expected", [
        ("aa bb cc aa bb cc", [("a+", "XXX"), ("b+", "YYY"), ("c+", "ZZZ")], "XXX YYY ZZZ XXX YYY ZZZ"),
        ("aa bb cc aa bb cc", [("a+[[:space:]]+", ""), ("b+", "YYY"), ("c+", "ZZZ")], "YYY ZZZ YYY ZZZ"),
    ])
    def test_replace_pattern_chain(self, src, substitutions, expected):
        rw = build_pipeline([build_replace(build_pattern_matcher(p), r) for p, r in substitutions])
        assert apply(rw, src.encode()) == expected.encode()

    @pytest.mark.parametrize("src,substitutions,expected", [
        ("aa bb cc aa bb cc", [("aa", "X${0}X"), ("bb", "Y${0}Y"), ("cc", "Z${0}Z")],
         "XaaX YbbY ZccZ XaaX YbbY ZccZ"),
        ("aa bb cc aa bb cc", [("aa ", ""), ("bb", "Y${0}Y"), ("cc", "Z${0}Z")], "YbbY ZccZ YbbY ZccZ"),
        ("aa bb cc aa bb cc", [("aa", "X${0}X"), (" bb", ""), ("cc", "Z${0}Z")], "XaaX ZccZ XaaX ZccZ"),
        ("aa bb cc aa bb cc", [("aa", "X${0}X"), ("bb", "Y${0}Y"), (" cc", "")], "XaaX YbbY XaaX YbbY"),
        ("aa bb cc aa bb cc", [("bb", "X${0}X"), ("XbbX", "Y"), ("Y", "ZZZ")], "aa ZZZ cc aa ZZZ cc"),
    ])
    def test_expand_chain(self, src, substitutions, expected):
        rw = build_pipeline([build_expand(p, t) for p, t in substitutions])
        assert apply(rw, src.encode()) == expected.encode()


class TestComposition:
    """Properties of build_pipeline."""

    def test_composition_law(self):
        stages = [
            build_replace(build_pattern_matcher("[0-9]+"), "<n>"),
            build_expand("<(n)>", "[$1]"),
            build_delete(build_literal_matcher(" ")),
        ]
        src = b"a 1 b 22 c 333"

        stepwise = src
        for stage in stages:
            stepwise = apply(stage, stepwise)

        assert apply(build_pipeline(*stages), src) == stepwise == b"a[n]b[n]c[n]"

    def test_empty_pipeline_rejected(self):
        with pytest.raises(ConfigurationError):
            build_pipeline()
        with pytest.raises(ConfigurationError):
            build_pipeline([])
        with pytest.raises(ConfigurationError):
            Pipeline(())

    def test_single_stage_returned_as_is(self):
        rw = build_delete(build_literal_matcher("a"))
        assert build_pipeline(rw) is rw
        assert build_pipeline([rw]) is rw

    def test_non_rewriter_stage_rejected(self):
        rw = build_delete(build_literal_matcher("a"))
        with pytest.raises(ConfigurationError, match="stage 2"):
            build_pipeline(rw, "b")

    def test_stage_count(self, scenario_pipeline):
        assert isinstance(scenario_pipeline, Pipeline)
        assert len(scenario_pipeline) == 4
        assert isinstance(scenario_pipeline.stages[0], Delete)

    def test_nested_pipelines(self):
        inner = build_pipeline(build_delete(build_literal_matcher("a")), build_delete(build_literal_matcher("b")))
        outer = build_pipeline(inner, build_replace(build_literal_matcher("c"), "CC"))
        assert apply(outer, b"abcabc") == b"CCCC"


class TestBufferUsage:
    """Allocation behavior of a pipeline run."""

    def test_markup_pipeline_allocates_once(self, scenario_pipeline, allocations):
        assert apply(scenario_pipeline, SCENARIO_INPUT) == SCENARIO_OUTPUT
        # The first Expand needs a destination; the second reuses the input storage
        assert len(allocations) == 1

    def test_in_place_stages_never_allocate(self, allocations):
        rw = build_pipeline(
            build_delete(build_literal_matcher("x")),
            build_replace(build_pattern_matcher("[[:space:]]+"), " "),
            build_replace(build_literal_matcher("abc"), "A"),
        )
        assert apply(rw, b"xabc   xabc\t\tx") == b"A A "
        assert allocations == []

    def test_growing_chain_allocates_once(self, allocations):
        rw = build_pipeline(
            build_replace(build_literal_matcher("a"), "aaaa"),
            build_replace(build_literal_matcher("b"), "bbbb"),
            build_replace(build_literal_matcher("c"), "cccc"),
        )
        assert apply(rw, b"abc" * 10) == b"aaaabbbbcccc" * 10
        # Only the empty starting spare is replaced; later stages grow their spare
        assert allocations == [72]

    def test_growing_expand_chain_allocates_once(self, allocations):
        rw = build_pipeline(
            build_expand("(x)", "<$1>"),
            build_expand("(<x>)", "[$1]"),
            build_expand(r"(\[<x>\])", "{$1}"),
            build_replace(build_literal_matcher("x"), "xyz"),
        )
        assert apply(rw, b"x-x-x") == b"{[<xyz>]}-{[<xyz>]}-{[<xyz>]}"
        assert len(allocations) <= 1

    def test_two_live_buffers(self, scenario_pipeline):
        current = Buffer.from_bytes(SCENARIO_INPUT)
        input_storage = current.data

        result, spare = scenario_pipeline.rewrite(current, Buffer.empty())

        assert result.getvalue() == SCENARIO_OUTPUT
        assert result.data is input_storage
        assert len(spare) == 0
        assert spare.capacity > 0


class TestApplyFile:
    """Pipelines applied to files."""

    def test_apply_file(self, tmp_path, scenario_pipeline):
        path = tmp_path / "doc.txt"
        path.write_bytes(SCENARIO_INPUT)
        assert apply_file(scenario_pipeline, path) == SCENARIO_OUTPUT
        assert apply_file(scenario_pipeline, str(path)) == SCENARIO_OUTPUT
