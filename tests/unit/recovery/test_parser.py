"""Unit tests for the recovery ladder.

These tests verify that:
- Each strategy recovers the input shape it exists for.
- The first successful strategy wins and later ones never run.
- Structurally invalid JSON is treated as a failed strategy.
- Quoted unwrapping is bounded on adversarial nesting.
"""

import json

import pytest

from vision_tags.core.types import ParsedPayload
from vision_tags.recovery.parser import JsonRecoveryParser
from vision_tags.recovery.strategies import StrategySpec, default_strategies

EXPECTED = ParsedPayload(caption="c", objects=({"name": "a", "confidence": "high"},))


@pytest.fixture
def parser() -> JsonRecoveryParser:
    return JsonRecoveryParser()


@pytest.mark.unit
class TestStrategies:
    def test_direct_parse(self, parser, payload_text):
        payload, diag = parser.recover_with_diagnostics(payload_text)
        assert payload == EXPECTED
        assert diag.successful_strategy == "direct_parse"
        assert diag.attempted_strategies == ["direct_parse"]

    def test_direct_parse_ignores_surrounding_whitespace(self, parser, payload_text):
        assert parser.recover(f"\n\n  {payload_text}  \n") == EXPECTED

    def test_quoted_string_unwrap(self, parser, payload_text):
        wrapped = json.dumps(payload_text)
        payload, diag = parser.recover_with_diagnostics(wrapped)
        assert payload == EXPECTED
        assert diag.successful_strategy == "quoted_string_unwrap"
        assert diag.max_depth_reached == 1

    def test_single_quoted_unwrap(self, parser, payload_text):
        payload, diag = parser.recover_with_diagnostics(f"'{payload_text}'")
        assert payload == EXPECTED
        assert diag.successful_strategy == "quoted_string_unwrap"

    def test_double_wrapped_string(self, parser, payload_text):
        wrapped = json.dumps(json.dumps(payload_text))
        payload, diag = parser.recover_with_diagnostics(wrapped)
        assert payload == EXPECTED
        assert diag.max_depth_reached == 2

    def test_escape_repair(self, parser, payload_text):
        escaped = payload_text.replace('"', '\\"')
        payload, diag = parser.recover_with_diagnostics(escaped)
        assert payload == EXPECTED
        assert diag.successful_strategy == "escape_repair"

    def test_escape_repair_with_literal_newline_escapes(self, parser):
        text = '{\\n  \\"objects\\": [{\\"name\\": \\"lešení\\"}]\\n}'
        payload = parser.recover(text)
        assert payload is not None
        assert payload.objects == ({"name": "lešení"},)

    def test_brace_extraction_from_prose(self, parser):
        text = (
            'Here is the result: {"objects":[{"name":"helmet","confidence":"low"}]}'
            " Thanks!"
        )
        payload, diag = parser.recover_with_diagnostics(text)
        assert payload is not None
        assert payload.objects == ({"name": "helmet", "confidence": "low"},)
        assert diag.successful_strategy == "brace_extraction"

    def test_brace_extraction_from_code_fence(self, parser, payload_text):
        assert parser.recover(f"```json\n{payload_text}\n```") == EXPECTED

    def test_brace_extraction_falls_back_to_normalized_fragment(self, parser):
        text = 'Output: {\\"objects\\": [{\\"name\\": \\"jeřáb\\"}]} end'
        payload = parser.recover(text)
        assert payload is not None
        assert payload.objects == ({"name": "jeřáb"},)

    def test_caption_is_optional(self, parser):
        payload = parser.recover('{"objects": []}')
        assert payload == ParsedPayload(caption="", objects=())

    def test_non_string_caption_becomes_empty(self, parser):
        payload = parser.recover('{"caption": 5, "objects": []}')
        assert payload is not None
        assert payload.caption == ""


@pytest.mark.unit
class TestStructuralValidity:
    @pytest.mark.parametrize(
        "text",
        [
            "42",
            '"just a string"',
            '["a", "b"]',
            '{"caption": "no objects here"}',
            '{"objects": "not a list"}',
            '{"objects": {"name": "a"}}',
        ],
    )
    def test_invalid_shapes_do_not_recover(self, parser, text):
        assert parser.recover(text) is None

    def test_failed_strategies_are_recorded(self, parser):
        payload, diag = parser.recover_with_diagnostics('{"caption": "x"}')
        assert payload is None
        assert diag.successful_strategy is None
        assert "direct_parse" in diag.strategy_errors
        assert "PayloadShapeError" in diag.strategy_errors["direct_parse"]

    @pytest.mark.parametrize("text", ["", "   ", "no json here at all"])
    def test_unrecoverable_text_returns_none(self, parser, text):
        assert parser.recover(text) is None

    def test_non_string_input_returns_none(self, parser):
        assert parser.recover(None) is None  # type: ignore[arg-type]

    def test_brace_order_must_be_open_then_close(self, parser):
        assert parser.recover('} "objects": [] {') is None


@pytest.mark.unit
class TestLadderOrdering:
    def test_first_success_wins_and_later_strategies_never_run(self):
        calls: list[str] = []

        def make(name: str, priority: int, succeed: bool) -> StrategySpec:
            def extractor(text, ctx):
                calls.append(name)
                if not succeed:
                    raise ValueError(f"{name} failed")
                return ParsedPayload(caption=name, objects=())

            return StrategySpec(name, lambda t: True, extractor, priority=priority)

        parser = JsonRecoveryParser(
            (make("third", 1, True), make("first", 3, False), make("second", 2, True))
        )
        payload = parser.recover("anything")
        assert payload is not None
        assert payload.caption == "second"
        assert calls == ["first", "second"]

    def test_ties_are_broken_by_name(self):
        specs = (
            StrategySpec("b", lambda t: True, lambda t, c: None, priority=1),  # type: ignore[arg-type,return-value]
            StrategySpec("a", lambda t: True, lambda t, c: None, priority=1),  # type: ignore[arg-type,return-value]
        )
        parser = JsonRecoveryParser(specs)
        assert [s.name for s in parser.strategies] == ["a", "b"]

    def test_default_ladder_order(self):
        parser = JsonRecoveryParser()
        assert [s.name for s in parser.strategies] == [
            "direct_parse",
            "quoted_string_unwrap",
            "escape_repair",
            "brace_extraction",
        ]
        assert len(default_strategies()) == 4

    def test_unexpected_exceptions_propagate(self):
        def boom(text, ctx):
            raise KeyError("bug")

        parser = JsonRecoveryParser((StrategySpec("boom", lambda t: True, boom),))
        with pytest.raises(KeyError):
            parser.recover("x")

    def test_strategy_spec_validation(self):
        with pytest.raises(ValueError):
            StrategySpec("", lambda t: True, lambda t, c: None)  # type: ignore[arg-type,return-value]
        with pytest.raises(TypeError):
            StrategySpec("x", "not callable", lambda t, c: None)  # type: ignore[arg-type,return-value]


@pytest.mark.unit
class TestUnwrapDepth:
    def test_nesting_beyond_limit_is_not_unwrapped(self, payload_text):
        unwrap_only = tuple(
            s
            for s in default_strategies()
            if s.name in {"direct_parse", "quoted_string_unwrap"}
        )
        text = payload_text
        for _ in range(4):
            text = json.dumps(text)
        assert JsonRecoveryParser(unwrap_only, max_unwrap_depth=4).recover(text)
        assert JsonRecoveryParser(unwrap_only, max_unwrap_depth=3).recover(text) is None

    def test_inner_levels_still_use_the_full_ladder(self, payload_text):
        """Past the unwrap limit, escape repair and brace extraction still apply."""
        text = payload_text
        for _ in range(4):
            text = json.dumps(text)
        payload, diag = JsonRecoveryParser(max_unwrap_depth=3).recover_with_diagnostics(
            text
        )
        assert payload == EXPECTED
        assert diag.max_depth_reached == 3

    def test_deep_adversarial_nesting_terminates(self):
        text = "x"
        for _ in range(12):
            text = json.dumps(text)
        payload, diag = JsonRecoveryParser().recover_with_diagnostics(text)
        assert payload is None
        assert diag.max_depth_reached <= 5

    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError):
            JsonRecoveryParser(max_unwrap_depth=-1)

    def test_nested_errors_use_qualified_keys(self, parser):
        _, diag = parser.recover_with_diagnostics(json.dumps("not json"))
        assert "quoted_string_unwrap>direct_parse" in diag.strategy_errors
