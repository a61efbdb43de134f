"""Axioms package - four-level belief hierarchy and content validation."""

from .catalog import ALL_LEVELS, AXIOM_CATALOG, AxiomLevel, Severity
from .schemas import (
    AxiomRecommendation,
    AxiomValidationResult,
    Finding,
    HistoryEntry,
    LevelScore,
)
from .validator import AxiomValidator, content_to_text

__all__ = [
    "ALL_LEVELS",
    "AXIOM_CATALOG",
    "AxiomLevel",
    "Severity",
    "AxiomRecommendation",
    "AxiomValidationResult",
    "Finding",
    "HistoryEntry",
    "LevelScore",
    "AxiomValidator",
    "content_to_text",
]
