"""
Axiom validation: score content against the four-level belief hierarchy.

Each requested level starts at a neutral baseline, gains capped bonuses for
matched keyword groups, loses fixed penalties for negative phrases, and is
clamped to [0, 10]. The Social level can veto.
"""

from __future__ import annotations

import json
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Iterable

from hybridops.observability import Telemetry

from .catalog import (
    ALL_LEVELS,
    AXIOM_CATALOG,
    BASELINE_SCORE,
    MAX_LEVEL_SCORE,
    MIN_LEVEL_SCORE,
    AxiomLevel,
    LevelSpec,
    Severity,
    count_keywords,
)
from .schemas import (
    AxiomRecommendation,
    AxiomValidationResult,
    Finding,
    HistoryEntry,
    LevelScore,
)

COMPONENT = "axiom_validator"

HISTORY_SNIPPET_CHARS = 200
REVIEW_FACTOR = 0.8


def _coerce_level(level: Any) -> AxiomLevel:
    if isinstance(level, AxiomLevel):
        return level
    if isinstance(level, str):
        try:
            return AxiomLevel[level.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown axiom level: {level}") from None
    return AxiomLevel(level)


def content_to_text(content: Any) -> str:
    """Structured content is serialised to JSON before matching."""
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False, default=str)


def score_level(spec: LevelSpec, text: str) -> LevelScore:
    """Score one level for already lower-cased text."""
    score = BASELINE_SCORE
    strengths: list[Finding] = []
    violations: list[Finding] = []
    hits: dict[str, int] = {}

    for belief in spec.beliefs:
        count = count_keywords(text, belief.keywords)
        hits[belief.key] = count
        if count > 0:
            bonus = min(count * belief.per_hit, belief.cap)
            score += bonus
            strengths.append(Finding(
                axiom=belief.key,
                reason=belief.strength_reason,
                score_impact=f"+{bonus:.1f}",
            ))

    for rule in spec.penalties:
        if rule.matches(text):
            score -= rule.penalty
            violations.append(Finding(
                axiom=rule.belief,
                reason=rule.reason,
                severity=rule.severity,
                score_impact=f"-{rule.penalty:.1f}",
            ))

    veto = False
    veto_reason = None
    rule = spec.veto
    if rule is not None and hits.get(rule.belief, 0) == 0:
        if any(marker in text for marker in rule.markers):
            veto = True
            veto_reason = rule.reason
            score = MIN_LEVEL_SCORE
            violations.append(Finding(
                axiom=rule.belief,
                reason=rule.reason,
                severity=Severity.CRITICAL,
            ))

    return LevelScore(
        score=max(MIN_LEVEL_SCORE, min(MAX_LEVEL_SCORE, score)),
        violations=violations,
        strengths=strengths,
        veto=veto,
        veto_reason=veto_reason,
    )


class AxiomValidator:
    """Validates content against the axiom catalog and keeps a bounded history."""

    def __init__(
        self,
        telemetry: Telemetry | None = None,
        history_limit: int = 100,
        min_score: float = 7.0,
        strict: bool = False,
    ):
        self._telemetry = telemetry or Telemetry()
        self._history: deque[HistoryEntry] = deque(maxlen=history_limit)
        self.min_score = min_score
        self.strict = strict

    def validate(
        self,
        content: Any,
        levels: Iterable[Any] | None = None,
        min_score: float | None = None,
        strict: bool | None = None,
    ) -> AxiomValidationResult:
        """Score content against the requested levels.

        Args:
            content: Text, or any JSON-serialisable structure.
            levels: AxiomLevel members, their numeric codes or names.
                Defaults to all four.
            min_score: Approval threshold on the 0-10 scale.
            strict: When True, a Social veto yields REJECT_VETO.

        Returns:
            AxiomValidationResult; also appended to the history.
        """
        min_score = self.min_score if min_score is None else min_score
        strict = self.strict if strict is None else strict
        requested = {_coerce_level(level) for level in (levels if levels is not None else ALL_LEVELS)}

        raw_text = content_to_text(content)
        text = raw_text.lower()
        operation_id = f"validation_{uuid.uuid4().hex[:12]}"
        self._telemetry.start_timer(operation_id, "axiom_validation", {
            "content_length": len(raw_text),
            "levels_count": len(requested),
            "strict_mode": strict,
        })

        level_scores: dict[str, LevelScore] = {}
        violations: list[Finding] = []
        strengths: list[Finding] = []
        veto = False

        # catalog order keeps findings grouped from the deepest level up
        for level in ALL_LEVELS:
            if level not in requested:
                continue
            level_score = score_level(AXIOM_CATALOG[level], text)
            level_scores[level.key] = level_score
            veto = veto or level_score.veto
            violations.extend(v.model_copy(update={"level": level.key}) for v in level_score.violations)
            strengths.extend(s.model_copy(update={"level": level.key}) for s in level_score.strengths)

        overall = (
            sum(ls.score for ls in level_scores.values()) / len(level_scores)
            if level_scores else 0.0
        )

        if veto and strict:
            recommendation = AxiomRecommendation.REJECT_VETO
        elif overall >= min_score:
            recommendation = AxiomRecommendation.APPROVE
        elif overall >= min_score * REVIEW_FACTOR:
            recommendation = AxiomRecommendation.REVIEW
        else:
            recommendation = AxiomRecommendation.REJECT_LOW_SCORE

        timestamp = datetime.now(timezone.utc)
        result = AxiomValidationResult(
            overall_score=overall,
            level_scores=level_scores,
            violations=violations,
            strengths=strengths,
            recommendation=recommendation,
            veto=veto,
            timestamp=timestamp,
        )

        self._history.append(HistoryEntry(
            content=raw_text[:HISTORY_SNIPPET_CHARS],
            result=result,
            timestamp=timestamp,
        ))

        duration = self._telemetry.end_timer(operation_id, {
            "score": overall,
            "recommendation": recommendation.value,
            "veto": veto,
        })
        self._telemetry.info(COMPONENT, "validation_completed", {
            "overall_score": f"{overall:.1f}",
            "recommendation": recommendation.value,
            "veto": veto,
            "violations_count": len(violations),
            "duration_ms": duration,
        })

        if veto:
            critical = next((v for v in violations if v.severity == Severity.CRITICAL), None)
            self._telemetry.record_fallback("validation_veto_triggered", {
                "component": COMPONENT,
                "overall_score": overall,
                "veto_reason": critical.reason if critical else None,
                "veto_level": critical.level if critical else None,
            })
            self._telemetry.warn(COMPONENT, "validation_veto_triggered", {
                "overall_score": f"{overall:.1f}",
            })

        return result

    def get_history(self, limit: int = 10) -> list[HistoryEntry]:
        """Most recent ``limit`` entries, oldest first."""
        if limit <= 0:
            return []
        return list(self._history)[-limit:]

    def clear_history(self) -> None:
        self._history.clear()

    @property
    def history_size(self) -> int:
        return len(self._history)

    def generate_report(self, result: AxiomValidationResult) -> str:
        """Plain-text summary of a validation result."""
        lines = [
            "=== AXIOM VALIDATION REPORT ===",
            "",
            f"Overall Score: {result.overall_score:.1f}/10.0",
            f"Recommendation: {result.recommendation.value}",
        ]
        if result.veto:
            lines.append("VETO APPLIED - Critical coherence violation detected")
        lines += ["", "--- Level Scores ---"]
        for level, data in result.level_scores.items():
            lines.append(f"  {level.upper()}: {data.score:.1f}/10.0")
        lines.append("")

        if result.strengths:
            lines.append("--- Strengths ---")
            for s in result.strengths:
                lines.append(f"  + [{s.level}] {s.reason} ({s.score_impact})")
            lines.append("")

        if result.violations:
            lines.append("--- Violations ---")
            for v in result.violations:
                severity = v.severity.value if v.severity else "INFO"
                lines.append(f"  {severity}: [{v.level}] {v.reason}")
            lines.append("")

        lines.append("=" * 31)
        return "\n".join(lines) + "\n"
