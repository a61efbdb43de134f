"""Request/response models for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# Heuristics
# =============================================================================


class EvaluateRequest(BaseModel):
    """Context for one decision function call."""

    context: dict[str, Any] = Field(default_factory=dict)
    strict: bool = Field(
        default=False,
        description="Validate built-in inputs against their typed schema first",
    )


class HeuristicSummary(BaseModel):
    id: str
    name: str
    domain: str
    kind: str
    custom: bool
    compiled: bool


# =============================================================================
# Axioms and gates
# =============================================================================


class AxiomValidateRequest(BaseModel):
    """Content to score against the axiom levels."""

    content: Any
    levels: list[str | int] | None = None
    min_score: float | None = Field(default=None, ge=0.0, le=10.0)
    strict: bool | None = None
    include_report: bool = False


class GateExecuteRequest(BaseModel):
    """A phase (or bare checkpoint) plus the context it produced."""

    phase: dict[str, Any] | None = None
    context: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Mind, config and sessions
# =============================================================================


class ConfigResponse(BaseModel):
    source: str | None
    config: dict[str, Any] | None
    validation: dict[str, Any]


class ReloadResponse(BaseModel):
    reloaded: bool
    config_source: str | None


class SessionResponse(BaseModel):
    session_id: str
    created_at: str
    last_accessed: str
    request_count: int
    mind_loaded: bool
