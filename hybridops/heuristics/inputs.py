"""
Input adaptation for the built-in heuristics.

Callers name the same quantity in several ways (``frequency`` vs
``executionsPerMonth``, nested ``endStateVision.clarity`` vs flat
``endStateClarity``). Every alias is resolved here, once, into canonical
snake_case fields. Two adapters share the alias table:

- ``adapt_*`` functions are lenient: absent values become 0 / False. They
  back the compiled decision functions.
- ``*Input`` models are strict: required fields, types and ranges are
  enforced by pydantic. They back the command-line tools.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, StrictBool, StrictFloat

from hybridops.configuration.defaults import (
    AUTOMATION_CHECK_ID,
    BACK_CASTING_ID,
    COHERENCE_SCAN_ID,
)
from hybridops.errors import InvalidInputError

# canonical field -> aliases, tried in order; dotted names walk nested mappings
BACK_CASTING_ALIASES: dict[str, tuple[str, ...]] = {
    "end_state_clarity": ("endStateVision.clarity", "endStateClarity", "end_state_clarity"),
    "market_alignment": ("marketSignals.alignment", "marketAlignment", "market_alignment"),
}

COHERENCE_ALIASES: dict[str, tuple[str, ...]] = {
    "truthfulness": ("truthfulness", "truthfulnessCoherence"),
    "system_adherence": ("systemAdherence", "systemAdherencePotential", "system_adherence"),
    "skill": ("skill", "technicalSkill", "technical_skill"),
}

AUTOMATION_ALIASES: dict[str, tuple[str, ...]] = {
    "frequency": ("frequency", "executionsPerMonth", "executions_per_month"),
    "standardizable": ("standardizable", "standardization"),
    "has_guardrails": ("hasGuardrails", "guardrails", "has_guardrails"),
}


def _lookup(context: Mapping[str, Any], dotted: str) -> Any:
    node: Any = context
    for part in dotted.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def canonicalize(context: Mapping[str, Any], aliases: dict[str, tuple[str, ...]]) -> dict[str, Any]:
    """Resolve aliases to canonical names; unresolved fields map to None."""
    resolved: dict[str, Any] = {}
    for field, names in aliases.items():
        resolved[field] = None
        for name in names:
            value = _lookup(context, name)
            if value is not None:
                resolved[field] = value
                break
    return resolved


def _require_mapping(context: Any, purpose: str) -> Mapping[str, Any]:
    if context is None or not isinstance(context, Mapping):
        raise InvalidInputError(f"{purpose} required (got {type(context).__name__})")
    return context


def _number(value: Any, field: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(
            f"Field '{field}' must be a number (got {type(value).__name__})", field=field
        )
    return float(value)


def _ratio(value: Any, field: str) -> float:
    number = _number(value, field)
    if number < 0 or number > 1:
        raise InvalidInputError(
            f"Field '{field}' must be between 0 and 1 (got {number})", field=field
        )
    return number


def _count(value: Any, field: str) -> float:
    number = _number(value, field)
    if number < 0:
        raise InvalidInputError(
            f"Field '{field}' must be non-negative (got {number})", field=field
        )
    return number


def _guardrails(value: Any) -> bool:
    if value is None:
        return False
    # a guardrail list counts as present when non-empty
    if isinstance(value, (bool, list)):
        return bool(value)
    raise InvalidInputError(
        f"Field 'has_guardrails' must be a boolean or a list (got {type(value).__name__})",
        field="has_guardrails",
    )


def adapt_back_casting(context: Any) -> dict[str, float]:
    raw = canonicalize(_require_mapping(context, "Context for back-casting"), BACK_CASTING_ALIASES)
    return {field: _ratio(value, field) for field, value in raw.items()}


def adapt_coherence(context: Any) -> dict[str, float]:
    raw = canonicalize(_require_mapping(context, "Person for coherence scan"), COHERENCE_ALIASES)
    return {field: _ratio(value, field) for field, value in raw.items()}


def adapt_automation(context: Any) -> dict[str, Any]:
    raw = canonicalize(_require_mapping(context, "Task for automation check"), AUTOMATION_ALIASES)
    return {
        "frequency": _count(raw["frequency"], "frequency"),
        "standardizable": _ratio(raw["standardizable"], "standardizable"),
        "has_guardrails": _guardrails(raw["has_guardrails"]),
    }


# =============================================================================
# Strict models
# =============================================================================


class BackCastingInput(BaseModel):
    """Validated input for Future Back-Casting."""

    end_state_clarity: StrictFloat = Field(ge=0, le=1)
    market_alignment: StrictFloat = Field(0.0, ge=0, le=1)

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> "BackCastingInput":
        raw = canonicalize(context, BACK_CASTING_ALIASES)
        return cls(**{k: v for k, v in raw.items() if v is not None})


class CoherenceInput(BaseModel):
    """Validated input for the Systemic Coherence Scan."""

    truthfulness: StrictFloat = Field(ge=0, le=1)
    system_adherence: StrictFloat = Field(ge=0, le=1)
    skill: StrictFloat = Field(ge=0, le=1)

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> "CoherenceInput":
        raw = canonicalize(context, COHERENCE_ALIASES)
        return cls(**{k: v for k, v in raw.items() if v is not None})


class AutomationInput(BaseModel):
    """Validated input for the Automation Tipping Point check."""

    frequency: StrictFloat = Field(ge=0)
    standardizable: StrictFloat = Field(ge=0, le=1)
    has_guardrails: StrictBool | list[Any]

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> "AutomationInput":
        raw = canonicalize(context, AUTOMATION_ALIASES)
        return cls(**{k: v for k, v in raw.items() if v is not None})


# heuristic id -> strict input model
STRICT_INPUTS: dict[str, type[BaseModel]] = {
    BACK_CASTING_ID: BackCastingInput,
    COHERENCE_SCAN_ID: CoherenceInput,
    AUTOMATION_CHECK_ID: AutomationInput,
}
