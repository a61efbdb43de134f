"""
Pydantic models for checkpoint specs and gate results.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from .criteria import Criterion


# =============================================================================
# Enums
# =============================================================================


class GateSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    MAJOR = "MAJOR"


class GateRecommendation(str, Enum):
    FIX_REQUIRED = "FIX_REQUIRED"
    REVIEW_AND_FIX = "REVIEW_AND_FIX"
    CHECK_CONFIGURATION = "CHECK_CONFIGURATION"


class VetoType(str, Enum):
    TRUTHFULNESS = "truthfulness"
    GUARDRAILS = "guardrails"
    AXIOM_MINIMUM = "axiom_minimum"
    AXIOM_VETO = "axiom_veto"
    MISSING_FIELDS = "missing_fields"


# =============================================================================
# Checkpoint specs
# =============================================================================


class ValidationSpec(BaseModel):
    """What a checkpoint runs and what it must satisfy.

    Exactly one of ``heuristic`` / ``validator`` is set.
    """

    checkpoint: str
    heuristic: str | None = None
    validator: str | None = None
    criteria: list[Criterion | dict[str, Any] | str] = Field(default_factory=list)
    dimensions: list[str] | None = None
    required_fields: list[str] | None = None
    min_dimension_score: float | None = None
    feedback_on_failure: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _one_target(self) -> "ValidationSpec":
        if bool(self.heuristic) == bool(self.validator):
            raise ValueError("Checkpoint must name exactly one of 'heuristic' or 'validator'")
        return self


class PhaseSpec(BaseModel):
    """A workflow phase; ``validation`` of None or ``"none"`` skips the gate."""

    name: str = "phase"
    validation: ValidationSpec | Literal["none"] | None = None

    @property
    def skips_validation(self) -> bool:
        return self.validation is None or self.validation == "none"


# =============================================================================
# Results
# =============================================================================


class Veto(BaseModel):
    """One veto condition found by a gate."""

    type: VetoType
    message: str
    executor: str | None = None
    task: str | None = None
    dimension: str | None = None
    value: float | None = None
    threshold: float | None = None
    missing: list[str] | None = None
    required: str | None = None


class CriterionResult(BaseModel):
    criterion: str
    field: str
    passed: bool
    actual: Any = None
    expected: str
    message: str | None = None


class GateResult(BaseModel):
    """Verdict of one checkpoint."""

    gate: str
    passed: bool
    skipped: bool = False
    veto: bool = False
    error: bool = False
    severity: GateSeverity | None = None
    recommendation: GateRecommendation | None = None
    message: str | None = None
    heuristic_id: str | None = None
    validator: str | None = None
    score: float | None = None
    min_score: float | None = None
    dimensions: dict[str, float] | None = None
    missing_fields: dict[str, list[str]] | None = None
    vetoes: list[Veto] = Field(default_factory=list)
    criteria_results: list[CriterionResult] = Field(default_factory=list)
    feedback: str | None = None
