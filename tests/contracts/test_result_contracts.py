"""Behavioral contracts of the public result shape.

Layer 1: Contract Compliance
Prove that every input, however malformed, yields a result callers can rely on.
"""

import json

import pytest

from vision_tags import ObjectSanitizer, ResultAssembler, SanitizedResult
from vision_tags.config import RecoveryConfig
from vision_tags.core.types import CONFIDENCE_LEVELS

PAYLOAD = {
    "caption": "Staveniště s jeřábem",
    "objects": [
        {"name": "jeřáb", "confidence": "high"},
        {"name": "lešení", "confidence": "medium"},
        {"name": "helma", "confidence": "low"},
    ],
}
EXPECTED_NAMES = ["jeřáb", "lešení", "helma"]

MALFORMED_INPUTS = [
    "",
    "   ",
    None,
    0,
    [],
    {},
    b"\x00\xff",
    b"   ",
    "{",
    "}{",
    '"',
    "'''",
    "\\\\\\",
    '{"objects": null}',
    '{"objects": [1, 2, null, [], {}]}',
    "x" * 5000,
    json.dumps("x" * 100),
    {"choices": [{"message": {"content": ["not a part"]}}]},
    {"response": {"objects": "nope"}},
]


@pytest.fixture
def assembler() -> ResultAssembler:
    return ResultAssembler(RecoveryConfig())


def assert_well_formed(result: SanitizedResult) -> None:
    assert isinstance(result, SanitizedResult)
    assert isinstance(result.caption, str)
    keys = [o.name.lower() for o in result.objects]
    assert len(keys) == len(set(keys))
    assert all(o.name == o.name.strip() and o.name for o in result.objects)
    assert all(o.confidence in CONFIDENCE_LEVELS for o in result.objects)
    assert result.ok or result.error


class TestRecoveryContracts:
    @pytest.mark.contract
    def test_well_formed_payload_round_trips(self, assembler):
        result = assembler.assemble(json.dumps(PAYLOAD, ensure_ascii=False))
        assert result.ok
        assert result.caption == PAYLOAD["caption"]
        assert [o.to_dict() for o in result.objects] == PAYLOAD["objects"]

    @pytest.mark.contract
    @pytest.mark.parametrize(
        "wrap",
        [
            pytest.param(lambda s: json.dumps(s), id="quoted"),
            pytest.param(lambda s: json.dumps(json.dumps(s)), id="double-quoted"),
            pytest.param(lambda s: s.replace('"', '\\"'), id="escaped"),
            pytest.param(lambda s: f"Here you go:\n{s}\nHope it helps.", id="prose"),
            pytest.param(lambda s: f"```json\n{s}\n```", id="fenced"),
            pytest.param(lambda s: {"output_text": s}, id="envelope"),
        ],
    )
    def test_damaged_payloads_recover_identically(self, assembler, wrap):
        text = json.dumps(PAYLOAD, ensure_ascii=False)
        result = assembler.assemble(wrap(text))
        assert result.ok
        assert result.caption == PAYLOAD["caption"]
        assert [o.name for o in result.objects] == EXPECTED_NAMES

    @pytest.mark.contract
    @pytest.mark.parametrize("raw", MALFORMED_INPUTS)
    def test_malformed_input_never_raises(self, assembler, raw):
        assert_well_formed(assembler.assemble(raw))

    @pytest.mark.contract
    @pytest.mark.parametrize("raw", MALFORMED_INPUTS)
    def test_response_is_json_serializable(self, raw):
        assembler = ResultAssembler(RecoveryConfig(enable_diagnostics=True))
        response = assembler.to_response(assembler.assemble(raw))
        json.dumps(response)
        assert set(response) >= {"ok", "caption", "objects", "method"}

    @pytest.mark.contract
    def test_only_missing_text_is_a_failure(self, assembler):
        assert assembler.assemble("").ok is False
        assert assembler.assemble("definitely not json").ok is True


class TestSanitizationContracts:
    @pytest.mark.contract
    def test_duplicates_keep_first_occurrence(self, assembler):
        result = assembler.assemble(
            {
                "objects": [
                    {"name": "Crane", "confidence": "high"},
                    {"name": "crane", "confidence": "low"},
                ]
            }
        )
        assert [o.to_dict() for o in result.objects] == [
            {"name": "Crane", "confidence": "high"}
        ]

    @pytest.mark.contract
    def test_unknown_confidence_defaults_to_low(self, assembler):
        result = assembler.assemble({"objects": [{"name": "a", "confidence": "maybe"}]})
        assert result.objects[0].confidence == "low"

    @pytest.mark.contract
    def test_policy_terms_never_survive(self, assembler):
        raw = {
            "objects": [
                {"name": "pláž"},
                {"name": "xxx"},
                {"name": "..."},
                {"name": "konkrétní český název"},
                {"name": "scéna"},
                {"name": "rodina"},
                {"name": "bagr"},
            ]
        }
        assert [o.name for o in assembler.assemble(raw).objects] == ["bagr"]

    @pytest.mark.contract
    def test_sanitizing_clean_output_is_a_no_op(self, assembler):
        first = assembler.assemble(json.dumps(PAYLOAD, ensure_ascii=False))
        again = ObjectSanitizer().sanitize([o.to_dict() for o in first.objects])
        assert again == first.objects

    @pytest.mark.contract
    def test_fallback_is_capped_and_low_confidence(self, assembler):
        text = "\n".join(f"- věc číslo {i}" for i in range(100))
        result = assembler.assemble(text)
        assert result.ok
        assert len(result.objects) == 30
        assert {o.confidence for o in result.objects} == {"low"}

    @pytest.mark.contract
    def test_results_are_immutable(self, assembler):
        result = assembler.assemble(json.dumps(PAYLOAD, ensure_ascii=False))
        with pytest.raises(AttributeError):
            result.ok = False  # type: ignore[misc]
        assert isinstance(result.objects, tuple)
