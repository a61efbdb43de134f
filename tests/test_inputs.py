"""
Tests for input alias resolution and the strict input models.
"""

import pytest
from pydantic import ValidationError

from hybridops.configuration import AUTOMATION_CHECK_ID, BACK_CASTING_ID, COHERENCE_SCAN_ID
from hybridops.errors import InvalidInputError
from hybridops.heuristics import (
    STRICT_INPUTS,
    AutomationInput,
    BackCastingInput,
    CoherenceInput,
    canonicalize,
)
from hybridops.heuristics.inputs import (
    AUTOMATION_ALIASES,
    BACK_CASTING_ALIASES,
    adapt_automation,
    adapt_back_casting,
    adapt_coherence,
)


class TestCanonicalize:
    """Test alias lookup."""

    def test_nested_alias(self):
        """Test dotted aliases walk nested mappings."""
        raw = canonicalize(
            {"endStateVision": {"clarity": 0.7}, "marketSignals": {"alignment": 0.4}},
            BACK_CASTING_ALIASES,
        )
        assert raw == {"end_state_clarity": 0.7, "market_alignment": 0.4}

    def test_first_alias_wins(self):
        """Test aliases are tried in order."""
        raw = canonicalize({"frequency": 3, "executionsPerMonth": 9}, AUTOMATION_ALIASES)
        assert raw["frequency"] == 3

    def test_unresolved_is_none(self):
        """Test absent fields resolve to None."""
        raw = canonicalize({}, BACK_CASTING_ALIASES)
        assert raw == {"end_state_clarity": None, "market_alignment": None}

    def test_nested_alias_on_scalar(self):
        """Test a scalar where a mapping is expected does not match."""
        raw = canonicalize({"endStateVision": 0.9, "endStateClarity": 0.5}, BACK_CASTING_ALIASES)
        assert raw["end_state_clarity"] == 0.5


class TestLenientAdapters:
    """Test the adapters used by compiled functions."""

    def test_defaults_to_zero(self):
        """Test absent numbers become 0.0."""
        assert adapt_back_casting({}) == {"end_state_clarity": 0.0, "market_alignment": 0.0}

    def test_guardrails_truthiness(self):
        """Test guardrail lists and booleans collapse to a flag."""
        assert adapt_automation({"guardrails": ["limit"]})["has_guardrails"] is True
        assert adapt_automation({"hasGuardrails": False})["has_guardrails"] is False
        assert adapt_automation({})["has_guardrails"] is False

    def test_guardrails_must_be_flag_or_list(self):
        """Test other guardrail values are rejected."""
        for value in ("false", 1, {"rollback": True}):
            with pytest.raises(InvalidInputError):
                adapt_automation({"hasGuardrails": value})

    def test_out_of_range(self):
        """Test ratio and count bounds."""
        with pytest.raises(InvalidInputError):
            adapt_coherence({"truthfulness": 1.2})
        with pytest.raises(InvalidInputError):
            adapt_automation({"frequency": -1})
        assert adapt_automation({"frequency": 40})["frequency"] == 40.0

    def test_integers_become_floats(self):
        """Test integer inputs are accepted as numbers."""
        adapted = adapt_automation({"frequency": 4, "standardizable": 1})
        assert adapted["frequency"] == 4.0
        assert isinstance(adapted["frequency"], float)


class TestStrictInputs:
    """Test the validated models used by the command-line tools."""

    def test_registry(self):
        """Test every built-in heuristic has a strict model."""
        assert STRICT_INPUTS[BACK_CASTING_ID] is BackCastingInput
        assert STRICT_INPUTS[COHERENCE_SCAN_ID] is CoherenceInput
        assert STRICT_INPUTS[AUTOMATION_CHECK_ID] is AutomationInput

    def test_back_casting_market_optional(self):
        """Test market alignment defaults to 0."""
        model = BackCastingInput.from_context({"endStateVision": {"clarity": 0.9}})
        assert model.end_state_clarity == 0.9
        assert model.market_alignment == 0.0

    def test_back_casting_requires_clarity(self):
        """Test end-state clarity is required."""
        with pytest.raises(ValidationError) as exc_info:
            BackCastingInput.from_context({"marketAlignment": 0.5})
        assert exc_info.value.errors()[0]["loc"] == ("end_state_clarity",)

    def test_range_enforced(self):
        """Test ratios outside [0, 1] are rejected."""
        with pytest.raises(ValidationError):
            CoherenceInput.from_context({"truthfulness": 1.5, "systemAdherence": 0.5, "skill": 0.5})

    def test_bool_is_not_a_ratio(self):
        """Test booleans do not pass as numbers."""
        with pytest.raises(ValidationError):
            CoherenceInput.from_context({"truthfulness": True, "systemAdherence": 0.5, "skill": 0.5})

    def test_string_is_not_a_ratio(self):
        """Test numeric strings are not coerced."""
        with pytest.raises(ValidationError):
            BackCastingInput.from_context({"endStateClarity": "0.9"})

    def test_coherence_all_required(self):
        """Test every coherence field is required."""
        with pytest.raises(ValidationError) as exc_info:
            CoherenceInput.from_context({"truthfulness": 0.9})
        missing = {error["loc"][0] for error in exc_info.value.errors()}
        assert missing == {"system_adherence", "skill"}

    def test_automation_guardrails(self):
        """Test guardrails accept a bool or a list."""
        model = AutomationInput.from_context(
            {"executionsPerMonth": 12, "standardization": 0.8, "guardrails": ["rollback"]}
        )
        assert model.frequency == 12
        assert model.has_guardrails == ["rollback"]

        model = AutomationInput.from_context(
            {"frequency": 2, "standardizable": 0.5, "hasGuardrails": False}
        )
        assert model.has_guardrails is False

    def test_automation_negative_frequency(self):
        """Test frequency must not be negative."""
        with pytest.raises(ValidationError):
            AutomationInput.from_context({"frequency": -1, "standardizable": 0.5, "hasGuardrails": True})

    def test_automation_guardrails_required(self):
        """Test the guardrails flag is required."""
        with pytest.raises(ValidationError):
            AutomationInput.from_context({"frequency": 2, "standardizable": 0.5})
