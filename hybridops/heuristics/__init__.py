"""Heuristics package - templates, compiler and decision results."""

from .compiler import DecisionFunction, HeuristicCompiler
from .inputs import (
    STRICT_INPUTS,
    AutomationInput,
    BackCastingInput,
    CoherenceInput,
    canonicalize,
)
from .schemas import (
    AutomationRecommendation,
    AutomationResult,
    BackCastingRecommendation,
    BackCastingResult,
    CoherenceRecommendation,
    CoherenceResult,
    Confidence,
    DecisionResult,
    HeuristicKind,
    Priority,
)
from .templates import BUILTIN_TEMPLATES, HeuristicTemplate

__all__ = [
    "DecisionFunction",
    "HeuristicCompiler",
    "STRICT_INPUTS",
    "AutomationInput",
    "BackCastingInput",
    "CoherenceInput",
    "canonicalize",
    "AutomationRecommendation",
    "AutomationResult",
    "BackCastingRecommendation",
    "BackCastingResult",
    "CoherenceRecommendation",
    "CoherenceResult",
    "Confidence",
    "DecisionResult",
    "HeuristicKind",
    "Priority",
    "BUILTIN_TEMPLATES",
    "HeuristicTemplate",
]
