"""Pydantic models for axiom validation results."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .catalog import Severity


class AxiomRecommendation(str, Enum):
    APPROVE = "APPROVE"
    REVIEW = "REVIEW"
    REJECT_LOW_SCORE = "REJECT_LOW_SCORE"
    REJECT_VETO = "REJECT_VETO"


class Finding(BaseModel):
    """A strength or violation attributed to one belief."""

    axiom: str
    reason: str
    level: str | None = None
    severity: Severity | None = None
    score_impact: str | None = None


class LevelScore(BaseModel):
    """Score and findings for one axiom level."""

    score: float = Field(ge=0.0, le=10.0)
    violations: list[Finding] = Field(default_factory=list)
    strengths: list[Finding] = Field(default_factory=list)
    veto: bool = False
    veto_reason: str | None = None


class AxiomValidationResult(BaseModel):
    """Outcome of validating content against the requested levels."""

    overall_score: float = Field(ge=0.0, le=10.0)
    level_scores: dict[str, LevelScore]
    violations: list[Finding] = Field(default_factory=list)
    strengths: list[Finding] = Field(default_factory=list)
    recommendation: AxiomRecommendation
    veto: bool = False
    timestamp: datetime


class HistoryEntry(BaseModel):
    content: str
    result: AxiomValidationResult
    timestamp: datetime
