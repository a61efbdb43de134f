"""Result models produced by compiled decision functions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================


class HeuristicKind(str, Enum):
    """Closed set of template variants."""

    BACK_CASTING = "back_casting"
    COHERENCE_SCAN = "coherence_scan"
    AUTOMATION_CHECK = "automation_check"
    CUSTOM = "custom"


class Priority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BackCastingRecommendation(str, Enum):
    PROCEED = "PROCEED"
    REVIEW = "REVIEW"
    DEFER = "DEFER"


class CoherenceRecommendation(str, Enum):
    APPROVE = "APPROVE"
    REVIEW = "REVIEW"
    REJECT = "REJECT"


class AutomationRecommendation(str, Enum):
    AUTOMATE_NOW = "AUTOMATE_NOW"
    PLAN_AUTOMATION = "PLAN_AUTOMATION"
    STANDARDIZE_FIRST = "STANDARDIZE_FIRST"
    ADD_GUARDRAILS = "ADD_GUARDRAILS"
    ADD_GUARDRAILS_FIRST = "ADD_GUARDRAILS_FIRST"
    KEEP_MANUAL = "KEEP_MANUAL"


# =============================================================================
# Results
# =============================================================================


class DecisionResult(BaseModel):
    """Common shape of every decision function result.

    Python attributes are snake_case; the JSON form (``to_json_dict``) uses
    camelCase keys such as ``vetoReason``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    heuristic: str
    score: float
    veto: bool = False
    veto_reason: str | None = None
    recommendation: str
    breakdown: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BackCastingResult(DecisionResult):
    """Future Back-Casting outcome."""

    recommendation: BackCastingRecommendation
    priority: Priority
    confidence: Confidence


class CoherenceResult(DecisionResult):
    """Systemic Coherence Scan outcome."""

    recommendation: CoherenceRecommendation


class AutomationResult(DecisionResult):
    """Automation Tipping Point outcome."""

    recommendation: AutomationRecommendation
    ready_to_automate: bool
    tipping_point: bool
