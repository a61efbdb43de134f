"""
Built-in heuristic templates.

A template turns a ``{weights, thresholds}`` section into a pure
``context -> DecisionResult`` function. Weights and thresholds are read once
at compile time; a configured value of 0 is honoured, only an absent value
falls back to the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from hybridops.configuration.defaults import (
    AUTOMATION_CHECK_ID,
    BACK_CASTING_ID,
    COHERENCE_SCAN_ID,
    DEFAULT_CONFIG,
)

from .inputs import adapt_automation, adapt_back_casting, adapt_coherence
from .schemas import (
    AutomationRecommendation,
    AutomationResult,
    BackCastingRecommendation,
    BackCastingResult,
    CoherenceRecommendation,
    CoherenceResult,
    Confidence,
    HeuristicKind,
    Priority,
)

# Fixed cut-offs that are not part of the configuration document
MEDIUM_PRIORITY_FACTOR = 0.625
MEDIUM_CONFIDENCE = 0.5
DEFER_BELOW = 0.4
PLAN_AUTOMATION_SCORE = 0.5
FREQUENCY_SATURATION = 20

GUARDRAIL_NEXT_STEPS = [
    "Define error handling procedures",
    "Create validation checkpoints",
    "Establish rollback mechanisms",
    "Document edge cases",
]


@dataclass(frozen=True)
class HeuristicTemplate:
    """A named factory turning configuration into a decision function."""

    id: str
    name: str
    domain: str
    kind: HeuristicKind
    compile: Callable[[dict[str, Any]], Callable[[Any], Any]]


def _param(section: dict[str, Any] | None, heuristic_id: str, group: str, key: str) -> Any:
    """Configured value, or the default when the key is absent."""
    values = (section or {}).get(group) or {}
    value = values.get(key) if isinstance(values, dict) else None
    if value is None:
        return DEFAULT_CONFIG["heuristics"][heuristic_id][group][key]
    return value


def _weighted_mean(parts: list[tuple[float, float]]) -> float:
    total_weight = sum(weight for _, weight in parts)
    if total_weight <= 0:
        return 0.0
    return sum(value * weight for value, weight in parts) / total_weight


# =============================================================================
# PV_BS_001 - Future System Back-Casting
# =============================================================================


def compile_back_casting(section: dict[str, Any] | None) -> Callable[[Any], BackCastingResult]:
    end_state_weight = _param(section, BACK_CASTING_ID, "weights", "end_state_vision")
    market_weight = _param(section, BACK_CASTING_ID, "weights", "current_market_signals")
    confidence_threshold = _param(section, BACK_CASTING_ID, "thresholds", "confidence")
    priority_threshold = _param(section, BACK_CASTING_ID, "thresholds", "priority")

    def back_casting(context: Any) -> BackCastingResult:
        inputs = adapt_back_casting(context)
        clarity = inputs["end_state_clarity"]
        alignment = inputs["market_alignment"]

        score = clarity * end_state_weight + alignment * market_weight

        if score >= priority_threshold:
            priority = Priority.HIGH
        elif score >= priority_threshold * MEDIUM_PRIORITY_FACTOR:
            priority = Priority.MEDIUM
        else:
            priority = Priority.LOW

        if clarity >= confidence_threshold:
            confidence = Confidence.HIGH
        elif clarity >= MEDIUM_CONFIDENCE:
            confidence = Confidence.MEDIUM
        else:
            confidence = Confidence.LOW

        if score >= priority_threshold and confidence == Confidence.HIGH:
            recommendation = BackCastingRecommendation.PROCEED
        elif score < DEFER_BELOW:
            recommendation = BackCastingRecommendation.DEFER
        else:
            recommendation = BackCastingRecommendation.REVIEW

        accuracy = {Confidence.HIGH: "85%", Confidence.MEDIUM: "70%", Confidence.LOW: "50%"}

        return BackCastingResult(
            heuristic=BACK_CASTING_ID,
            score=score,
            priority=priority,
            confidence=confidence,
            recommendation=recommendation,
            breakdown={
                "end_state_contribution": clarity * end_state_weight,
                "market_contribution": alignment * market_weight,
                "end_state_clarity": clarity,
                "market_alignment": alignment,
            },
            metadata={
                "decision_speed": "< 1 hour" if score >= confidence_threshold else "1-3 days",
                "accuracy_estimate": accuracy[confidence],
                "time_horizon": "3-5 years",
            },
        )

    return back_casting


# =============================================================================
# PV_PA_001 - Systemic Coherence Scan
# =============================================================================


def _hierarchy_rank(score: float) -> str:
    if score >= 0.9:
        return "EXCELLENT"
    if score >= 0.8:
        return "GOOD"
    if score >= 0.6:
        return "ACCEPTABLE"
    return "POOR"


def compile_coherence_scan(section: dict[str, Any] | None) -> Callable[[Any], CoherenceResult]:
    truthfulness_weight = _param(section, COHERENCE_SCAN_ID, "weights", "truthfulness")
    system_weight = _param(section, COHERENCE_SCAN_ID, "weights", "system_adherence")
    skill_weight = _param(section, COHERENCE_SCAN_ID, "weights", "skill")
    veto_threshold = _param(section, COHERENCE_SCAN_ID, "thresholds", "veto")
    approve_threshold = _param(section, COHERENCE_SCAN_ID, "thresholds", "approve")
    review_threshold = _param(section, COHERENCE_SCAN_ID, "thresholds", "review")

    def coherence_scan(person: Any) -> CoherenceResult:
        inputs = adapt_coherence(person)
        truthfulness = inputs["truthfulness"]
        system_adherence = inputs["system_adherence"]
        skill = inputs["skill"]

        # Truthfulness veto is independent of the other two inputs
        if truthfulness < veto_threshold:
            return CoherenceResult(
                heuristic=COHERENCE_SCAN_ID,
                score=0.0,
                veto=True,
                veto_reason=(
                    f"TRUTHFULNESS_BELOW_THRESHOLD ({truthfulness:.2f} < {veto_threshold})"
                ),
                recommendation=CoherenceRecommendation.REJECT,
                breakdown={
                    "truthfulness": truthfulness,
                    "system_adherence": system_adherence,
                    "skill": skill,
                },
                metadata={"veto_power": "TRUTHFULNESS", "critical_failure": True},
            )

        score = _weighted_mean([
            (truthfulness, truthfulness_weight),
            (system_adherence, system_weight),
            (skill, skill_weight),
        ])

        if score >= approve_threshold:
            recommendation = CoherenceRecommendation.APPROVE
        elif score >= review_threshold:
            recommendation = CoherenceRecommendation.REVIEW
        else:
            recommendation = CoherenceRecommendation.REJECT

        critical_factors = []
        if truthfulness >= 0.9:
            critical_factors.append("High truthfulness")
        if system_adherence >= 0.8:
            critical_factors.append("Good system fit")
        elif system_adherence < 0.5:
            critical_factors.append("Poor system fit")
        if skill >= 0.8:
            critical_factors.append("Strong skills")

        return CoherenceResult(
            heuristic=COHERENCE_SCAN_ID,
            score=score,
            veto=False,
            recommendation=recommendation,
            breakdown={
                "truthfulness": truthfulness,
                "truthfulness_weighted": truthfulness * truthfulness_weight,
                "system_adherence": system_adherence,
                "system_adherence_weighted": system_adherence * system_weight,
                "skill": skill,
                "skill_weighted": skill * skill_weight,
            },
            metadata={
                "hierarchy_rank": _hierarchy_rank(score),
                "critical_factors": critical_factors,
            },
        )

    return coherence_scan


# =============================================================================
# PV_PM_001 - Automation Tipping Point
# =============================================================================


def compile_automation_check(section: dict[str, Any] | None) -> Callable[[Any], AutomationResult]:
    frequency_weight = _param(section, AUTOMATION_CHECK_ID, "weights", "frequency")
    standardization_weight = _param(section, AUTOMATION_CHECK_ID, "weights", "standardization")
    guardrails_weight = _param(section, AUTOMATION_CHECK_ID, "weights", "guardrails")
    tipping_point_frequency = _param(section, AUTOMATION_CHECK_ID, "thresholds", "tipping_point")
    standardization_minimum = _param(section, AUTOMATION_CHECK_ID, "thresholds", "standardization")
    automate_threshold = _param(section, AUTOMATION_CHECK_ID, "thresholds", "automate")

    def automation_check(task: Any) -> AutomationResult:
        inputs = adapt_automation(task)
        frequency = inputs["frequency"]
        standardizable = inputs["standardizable"]
        has_guardrails = inputs["has_guardrails"]
        tipping_point = frequency > tipping_point_frequency

        # Missing guardrails veto regardless of frequency and standardization
        if not has_guardrails:
            return AutomationResult(
                heuristic=AUTOMATION_CHECK_ID,
                score=0.0,
                veto=True,
                veto_reason="MISSING_GUARDRAILS - Cannot automate without safety mechanisms",
                recommendation=AutomationRecommendation.ADD_GUARDRAILS_FIRST,
                ready_to_automate=False,
                tipping_point=tipping_point,
                breakdown={
                    "frequency": frequency,
                    "standardizable": standardizable,
                    "has_guardrails": False,
                },
                metadata={
                    "veto_power": "GUARDRAILS",
                    "critical_failure": True,
                    "next_steps": list(GUARDRAIL_NEXT_STEPS),
                },
            )

        normalized_frequency = min(frequency / FREQUENCY_SATURATION, 1.0)
        score = _weighted_mean([
            (normalized_frequency, frequency_weight),
            (standardizable, standardization_weight),
            (1.0, guardrails_weight),
        ])
        ready = tipping_point and standardizable >= standardization_minimum

        if score >= automate_threshold and ready:
            recommendation = AutomationRecommendation.AUTOMATE_NOW
        elif score >= PLAN_AUTOMATION_SCORE and tipping_point:
            recommendation = AutomationRecommendation.PLAN_AUTOMATION
        elif tipping_point and not ready:
            if standardizable < standardization_minimum:
                recommendation = AutomationRecommendation.STANDARDIZE_FIRST
            else:
                recommendation = AutomationRecommendation.ADD_GUARDRAILS
        else:
            recommendation = AutomationRecommendation.KEEP_MANUAL

        if standardizable >= 0.9:
            time_to_automate = "1-2 weeks"
        elif standardizable >= 0.7:
            time_to_automate = "2-4 weeks"
        else:
            time_to_automate = "1-2 months"

        return AutomationResult(
            heuristic=AUTOMATION_CHECK_ID,
            score=score,
            veto=False,
            recommendation=recommendation,
            ready_to_automate=ready,
            tipping_point=tipping_point,
            breakdown={
                "frequency": frequency,
                "frequency_normalized": normalized_frequency,
                "frequency_weighted": normalized_frequency * frequency_weight,
                "standardizable": standardizable,
                "standardizable_weighted": standardizable * standardization_weight,
                "has_guardrails": True,
                "guardrails_weighted": guardrails_weight,
            },
            metadata={
                "roi_estimate": "HIGH" if ready else "MEDIUM" if tipping_point else "LOW",
                "time_to_automate": time_to_automate,
                "risk_level": "LOW",
                "annual_savings": frequency * 12,
            },
        )

    return automation_check


BUILTIN_TEMPLATES: dict[str, HeuristicTemplate] = {
    BACK_CASTING_ID: HeuristicTemplate(
        id=BACK_CASTING_ID,
        name="Future System Back-Casting",
        domain="business_strategy",
        kind=HeuristicKind.BACK_CASTING,
        compile=compile_back_casting,
    ),
    COHERENCE_SCAN_ID: HeuristicTemplate(
        id=COHERENCE_SCAN_ID,
        name="Systemic Coherence Scan",
        domain="people_assessment",
        kind=HeuristicKind.COHERENCE_SCAN,
        compile=compile_coherence_scan,
    ),
    AUTOMATION_CHECK_ID: HeuristicTemplate(
        id=AUTOMATION_CHECK_ID,
        name="Automation Tipping Point",
        domain="process_management",
        kind=HeuristicKind.AUTOMATION_CHECK,
        compile=compile_automation_check,
    ),
}
