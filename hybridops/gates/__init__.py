"""Gates package - checkpoint specs, criteria grammar and the validation gate."""

from .criteria import (
    Criterion,
    CriterionKind,
    Operator,
    parse_criteria,
    parse_criterion,
    to_snake,
)
from .feedback import generate_feedback
from .gate import (
    DEFAULT_AXIOM_DIMENSIONS,
    DEFAULT_TASK_FIELDS,
    VALIDATOR_ALIASES,
    ValidationGate,
    flatten,
)
from .schemas import (
    CriterionResult,
    GateRecommendation,
    GateResult,
    GateSeverity,
    PhaseSpec,
    ValidationSpec,
    Veto,
    VetoType,
)

__all__ = [
    "Criterion",
    "CriterionKind",
    "Operator",
    "parse_criteria",
    "parse_criterion",
    "to_snake",
    "generate_feedback",
    "DEFAULT_AXIOM_DIMENSIONS",
    "DEFAULT_TASK_FIELDS",
    "VALIDATOR_ALIASES",
    "ValidationGate",
    "flatten",
    "CriterionResult",
    "GateRecommendation",
    "GateResult",
    "GateSeverity",
    "PhaseSpec",
    "ValidationSpec",
    "Veto",
    "VetoType",
]
