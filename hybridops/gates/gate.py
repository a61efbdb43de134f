"""
Validation gate: runs one workflow checkpoint and returns a verdict.

A checkpoint names either a heuristic (run through its compiled decision
function) or a structural validator. Vetoes are checked first and stop the
gate without evaluating criteria; otherwise every criterion must pass.
Configuration mistakes (unknown ids, malformed criteria) and execution
failures come back as error results, never as exceptions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from hybridops.axioms import AxiomValidator, Severity
from hybridops.configuration import AUTOMATION_CHECK_ID, COHERENCE_SCAN_ID
from hybridops.errors import (
    HeuristicExecutionError,
    HybridOpsError,
    InvalidInputError,
    UnknownValidatorError,
)
from hybridops.heuristics import DecisionFunction, HeuristicCompiler, canonicalize
from hybridops.heuristics.inputs import AUTOMATION_ALIASES
from hybridops.mind import MindLoader
from hybridops.observability import Telemetry

from .criteria import Criterion, CriterionKind, parse_criteria, to_snake
from .feedback import criteria_failure_feedback, success_feedback, veto_feedback
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

COMPONENT = "validation_gate"

AXIOM_COMPLIANCE = "axiom-compliance"
TASK_ANATOMY = "task-anatomy"

VALIDATOR_ALIASES: dict[str, str] = {
    AXIOM_COMPLIANCE: AXIOM_COMPLIANCE,
    "axioma-validator": AXIOM_COMPLIANCE,
    TASK_ANATOMY: TASK_ANATOMY,
}

TRUTHFULNESS_VETO = 0.7
DEFAULT_MIN_DIMENSION_SCORE = 6.0
DEFAULT_DIMENSION_SCORE = 7.0

DEFAULT_AXIOM_DIMENSIONS: tuple[str, ...] = (
    "Truthfulness",
    "Coherence",
    "Strategic Alignment",
    "Operational Excellence",
    "Innovation Capacity",
    "Risk Management",
    "Resource Optimization",
    "Stakeholder Value",
    "Sustainability",
    "Adaptability",
)

DEFAULT_TASK_FIELDS: tuple[str, ...] = (
    "Name",
    "Description",
    "Status",
    "Assignee",
    "Due Date",
    "Dependencies",
    "Automation Trigger",
    "Validation Criteria",
)


@dataclass
class _Outcome:
    """What a heuristic or validator produced, before criteria."""

    score: float | None
    vetoes: list[Veto] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)
    heuristic_id: str | None = None
    validator: str | None = None
    dimensions: dict[str, float] | None = None
    min_score: float | None = None
    missing_fields: dict[str, list[str]] | None = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_guardrails(context: Mapping[str, Any]) -> bool:
    return bool(canonicalize(context, AUTOMATION_ALIASES)["has_guardrails"])


def flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into snake_case keys joined with ``_``."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = to_snake(str(key))
        full = f"{prefix}_{name}" if prefix else name
        flat[full] = value
        if isinstance(value, Mapping):
            flat.update(flatten(value, full))
    return flat


class ValidationGate:
    """Executes checkpoints against compiled heuristics and validators."""

    def __init__(
        self,
        compiler: HeuristicCompiler,
        mind: MindLoader | None = None,
        axiom_validator: AxiomValidator | None = None,
        telemetry: Telemetry | None = None,
        enable_veto: bool | None = None,
    ):
        self._compiler = compiler
        self._mind = mind
        self._telemetry = telemetry or Telemetry()
        self._axiom_validator = axiom_validator or AxiomValidator(telemetry=self._telemetry)
        self._enable_veto = enable_veto

    @property
    def enable_veto(self) -> bool:
        if self._enable_veto is not None:
            return self._enable_veto
        if self._mind is not None:
            return bool(self._mind.validation_settings.get("enable_veto", True))
        return True

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def execute(self, phase: Any, context: Mapping[str, Any] | None = None) -> GateResult:
        """Run a phase's checkpoint against a context.

        Args:
            phase: ``PhaseSpec``, ``ValidationSpec``, an equivalent mapping,
                or None / ``"none"`` for a phase without validation.
            context: The phase output being validated.

        Returns:
            GateResult; never raises for configuration or execution errors.
        """
        try:
            spec, phase_name = self._coerce(phase)
        except ValueError as e:
            name = phase.get("name", "phase") if isinstance(phase, Mapping) else "phase"
            return self._error_result(str(name), e)

        if spec is None:
            return GateResult(
                gate=phase_name,
                passed=True,
                skipped=True,
                message="No validation configured for this phase",
            )

        context = context if context is not None else {}
        operation_id = f"gate_{uuid.uuid4().hex[:8]}"
        self._telemetry.start_timer(operation_id, "validation_gate", {"checkpoint": spec.checkpoint})
        self._telemetry.info(COMPONENT, "gate_started", {"checkpoint": spec.checkpoint})

        try:
            if not isinstance(context, Mapping):
                raise InvalidInputError("Gate context must be a mapping", field="context")
            criteria = parse_criteria(spec.criteria)
            if spec.heuristic:
                outcome = self._run_heuristic(spec.heuristic, context)
            else:
                outcome = self._run_validator(spec, context, criteria)
        except HybridOpsError as e:
            self._telemetry.end_timer(operation_id, {"success": False})
            return self._error_result(spec.checkpoint, e)

        if outcome.vetoes:
            result = self._veto_result(spec, outcome)
        else:
            results = [self._evaluate(c, outcome, context) for c in criteria]
            if all(cr.passed for cr in results):
                result = self._base_result(spec.checkpoint, outcome, passed=True)
                result.criteria_results = results
                result.message = success_feedback(result)
            else:
                result = self._base_result(spec.checkpoint, outcome, passed=False)
                result.criteria_results = results
                result.severity = GateSeverity.MAJOR
                result.recommendation = GateRecommendation.REVIEW_AND_FIX
                result.feedback = criteria_failure_feedback(result, spec.feedback_on_failure)

        self._telemetry.end_timer(operation_id, {"passed": result.passed, "veto": result.veto})
        self._telemetry.info(COMPONENT, "gate_completed", {
            "checkpoint": spec.checkpoint,
            "passed": result.passed,
            "veto": result.veto,
        })
        return result

    def _coerce(self, phase: Any) -> tuple[ValidationSpec | None, str]:
        if phase is None or phase == "none":
            return None, "phase"
        if isinstance(phase, ValidationSpec):
            return phase, phase.checkpoint
        if isinstance(phase, Mapping) and "checkpoint" in phase and "validation" not in phase:
            spec = ValidationSpec.model_validate(dict(phase))
            return spec, spec.checkpoint
        if isinstance(phase, Mapping):
            phase = PhaseSpec.model_validate(dict(phase))
        if not isinstance(phase, PhaseSpec):
            raise ValueError(f"Unsupported checkpoint definition: {type(phase).__name__}")
        if phase.skips_validation:
            return None, phase.name
        return phase.validation, phase.name

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def _base_result(self, checkpoint: str, outcome: _Outcome, passed: bool) -> GateResult:
        return GateResult(
            gate=checkpoint,
            passed=passed,
            heuristic_id=outcome.heuristic_id,
            validator=outcome.validator,
            score=outcome.score,
            min_score=outcome.min_score,
            dimensions=outcome.dimensions,
            missing_fields=outcome.missing_fields,
        )

    def _veto_result(self, spec: ValidationSpec, outcome: _Outcome) -> GateResult:
        result = self._base_result(spec.checkpoint, outcome, passed=False)
        result.veto = True
        result.vetoes = outcome.vetoes
        result.severity = GateSeverity.CRITICAL
        result.recommendation = GateRecommendation.FIX_REQUIRED
        result.feedback = veto_feedback(result)
        self._telemetry.record_fallback("gate_veto_triggered", {
            "component": COMPONENT,
            "checkpoint": spec.checkpoint,
            "vetoes": [v.type.value for v in outcome.vetoes],
        })
        self._telemetry.warn(COMPONENT, "gate_veto_triggered", {
            "checkpoint": spec.checkpoint,
            "vetoes_count": len(outcome.vetoes),
        })
        return result

    def _error_result(self, checkpoint: str, error: Exception) -> GateResult:
        if isinstance(error, ValidationError):
            message = f"Invalid checkpoint definition: {error.errors()[0]['msg']}"
        else:
            message = str(error)
        self._telemetry.error(COMPONENT, "gate_execution_failed", {
            "checkpoint": checkpoint,
            "error_type": type(error).__name__,
            "error": message,
        })
        return GateResult(
            gate=checkpoint,
            passed=False,
            error=True,
            severity=GateSeverity.CRITICAL,
            recommendation=GateRecommendation.CHECK_CONFIGURATION,
            message=message,
        )

    # ------------------------------------------------------------------
    # Heuristics
    # ------------------------------------------------------------------

    def _decision_function(self, heuristic_id: str) -> DecisionFunction:
        if self._mind is not None and self._mind.loaded:
            fn = self._mind.bundle.decision_function(heuristic_id)
            if fn is not None:
                return fn
        return self._compiler.compile(heuristic_id)

    def _run_heuristic(self, heuristic_id: str, context: Mapping[str, Any]) -> _Outcome:
        fn = self._decision_function(heuristic_id)
        try:
            raw = fn(context)
        except Exception as e:
            raise HeuristicExecutionError(heuristic_id, e) from e

        if isinstance(raw, BaseModel):
            details = raw.model_dump(mode="json")
        elif isinstance(raw, Mapping):
            details = dict(raw)
        else:
            details = {"value": raw}
        score = details.get("score")

        vetoes: list[Veto] = []
        if heuristic_id == COHERENCE_SCAN_ID:
            vetoes = self._truthfulness_vetoes(context)
        elif heuristic_id == AUTOMATION_CHECK_ID and not _has_guardrails(context):
            vetoes = [Veto(
                type=VetoType.GUARDRAILS,
                message="Missing safety guardrails (VETO)",
                required="At least one guardrail must be defined before automation",
            )]

        return _Outcome(
            score=float(score) if _is_number(score) else None,
            vetoes=vetoes,
            metrics=flatten(details),
            heuristic_id=heuristic_id,
        )

    @staticmethod
    def _truthfulness_vetoes(context: Mapping[str, Any]) -> list[Veto]:
        executors = context.get("executors") or []
        if not isinstance(executors, list):
            raise InvalidInputError("executors must be a list", field="executors")
        vetoes = []
        for idx, executor in enumerate(executors):
            if not isinstance(executor, Mapping):
                continue
            truthfulness = executor.get("truthfulness")
            if _is_number(truthfulness) and truthfulness < TRUTHFULNESS_VETO:
                name = executor.get("name") or f"Executor {idx + 1}"
                vetoes.append(Veto(
                    type=VetoType.TRUTHFULNESS,
                    executor=name,
                    value=truthfulness,
                    threshold=TRUTHFULNESS_VETO,
                    message=f'Executor "{name}" has truthfulness {truthfulness} < {TRUTHFULNESS_VETO} (VETO)',
                ))
        return vetoes

    # ------------------------------------------------------------------
    # Structural validators
    # ------------------------------------------------------------------

    def _run_validator(
        self,
        spec: ValidationSpec,
        context: Mapping[str, Any],
        criteria: list[Criterion],
    ) -> _Outcome:
        name = VALIDATOR_ALIASES.get(spec.validator or "")
        if name == AXIOM_COMPLIANCE:
            return self._axiom_compliance(spec, context, criteria)
        if name == TASK_ANATOMY:
            return self._task_anatomy(spec, context)
        raise UnknownValidatorError(f"Unknown validator: {spec.validator}")

    def _axiom_compliance(
        self,
        spec: ValidationSpec,
        context: Mapping[str, Any],
        criteria: list[Criterion],
    ) -> _Outcome:
        threshold = spec.min_dimension_score
        if threshold is None:
            floor = next((c for c in criteria if c.kind == CriterionKind.FLOOR), None)
            threshold = floor.threshold if floor is not None else DEFAULT_MIN_DIMENSION_SCORE

        vetoes: list[Veto] = []
        provided = context.get("axiom_scores", context.get("axioma"))
        if provided is None and "content" in context:
            validation = self._axiom_validator.validate(context["content"])
            dimensions = {level: ls.score for level, ls in validation.level_scores.items()}
            if validation.veto and self.enable_veto:
                critical = next(
                    (v for v in validation.violations if v.severity == Severity.CRITICAL), None
                )
                vetoes.append(Veto(
                    type=VetoType.AXIOM_VETO,
                    dimension=critical.level if critical else None,
                    message=critical.reason if critical else "Axiom veto applied",
                ))
        else:
            provided = provided or {}
            if not isinstance(provided, Mapping):
                raise InvalidInputError("axiom_scores must be a mapping of dimension -> score", field="axiom_scores")
            dimensions = {}
            for dim in spec.dimensions or DEFAULT_AXIOM_DIMENSIONS:
                value = provided.get(dim)
                if value is None:
                    value = DEFAULT_DIMENSION_SCORE
                if not _is_number(value):
                    raise InvalidInputError(f"Score for {dim} must be a number", field=dim)
                dimensions[dim] = float(value)

        scores = list(dimensions.values())
        overall = sum(scores) / len(scores) if scores else 0.0
        min_score = min(scores) if scores else None

        for dim, value in dimensions.items():
            if value < threshold:
                vetoes.append(Veto(
                    type=VetoType.AXIOM_MINIMUM,
                    dimension=dim,
                    value=value,
                    threshold=threshold,
                    message=f'Dimension "{dim}" scored {value} < {threshold} (VETO)',
                ))

        metrics: dict[str, Any] = {"overall_score": overall, "min_score": min_score}
        metrics.update({to_snake(dim): value for dim, value in dimensions.items()})
        return _Outcome(
            score=overall,
            vetoes=vetoes,
            metrics=metrics,
            validator=AXIOM_COMPLIANCE,
            dimensions=dimensions,
            min_score=min_score,
        )

    def _task_anatomy(self, spec: ValidationSpec, context: Mapping[str, Any]) -> _Outcome:
        required = spec.required_fields or list(DEFAULT_TASK_FIELDS)
        tasks = context.get("tasks") or []
        if not isinstance(tasks, list):
            raise InvalidInputError("tasks must be a list", field="tasks")

        vetoes: list[Veto] = []
        missing_fields: dict[str, list[str]] = {}
        for idx, task in enumerate(tasks):
            if not isinstance(task, Mapping):
                raise InvalidInputError(f"Task {idx + 1} must be a mapping", field="tasks")
            missing = [f for f in required if not task.get(f) and not task.get(f.lower())]
            if not missing:
                continue
            name = str(task.get("name") or task.get("Name") or f"Task {idx + 1}")
            missing_fields[name] = missing
            vetoes.append(Veto(
                type=VetoType.MISSING_FIELDS,
                task=name,
                missing=missing,
                message=f'Task "{name}" missing {len(missing)} required fields',
            ))

        total = len(tasks)
        compliant = total - len(vetoes)
        score = compliant / total * 10 if total else 0.0
        return _Outcome(
            score=score,
            vetoes=vetoes,
            metrics={
                "total_tasks": total,
                "compliant_tasks": compliant,
                "task_anatomy_fields": compliant == total,
            },
            validator=TASK_ANATOMY,
            missing_fields=missing_fields,
        )

    # ------------------------------------------------------------------
    # Criteria
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve(criterion: Criterion, outcome: _Outcome, context: Mapping[str, Any]) -> tuple[bool, Any]:
        name = criterion.field
        words = name.split("_")
        if criterion.kind == CriterionKind.FLOOR or any(
            w.startswith(("level", "dimension")) for w in words
        ):
            return outcome.min_score is not None, outcome.min_score
        if name in ("overall_score", "score"):
            return outcome.score is not None, outcome.score

        flat_context = flatten(context)
        if name in flat_context:
            return True, flat_context[name]
        if name in outcome.metrics:
            return True, outcome.metrics[name]
        return False, None

    def _evaluate(self, criterion: Criterion, outcome: _Outcome, context: Mapping[str, Any]) -> CriterionResult:
        found, actual = self._resolve(criterion, outcome, context)
        passed = found and criterion.compare(actual)
        if not found:
            message = f"{criterion.field}: no value found in context or results"
        elif criterion.kind == CriterionKind.PRESENCE:
            message = f"{criterion.field}: {'present' if passed else 'missing'}"
        else:
            message = f"{criterion.field}: {actual} (expected {criterion.expected})"
        return CriterionResult(
            criterion=criterion.label,
            field=criterion.field,
            passed=passed,
            actual=actual,
            expected=criterion.expected,
            message=message,
        )
