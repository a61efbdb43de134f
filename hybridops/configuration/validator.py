"""
Structural and cross-field validation of the heuristics configuration.

Validation is a pure function: it never raises and never mutates its input.
All problems are accumulated in one pass so the operator can fix the file in
one edit. The only short-circuit is a missing ``heuristics`` section, since
nothing below it can be checked.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .defaults import (
    AUTOMATION_CHECK_ID,
    BACK_CASTING_ID,
    BUILTIN_HEURISTIC_IDS,
    COHERENCE_SCAN_ID,
)

WEIGHT_SUM_TOLERANCE = 0.01


class ValidationReport(BaseModel):
    """Outcome of validating one configuration document."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


def _is_number(value: Any) -> bool:
    # bool is an int subclass; YAML true/false must not pass as numbers
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _type_name(value: Any) -> str:
    return type(value).__name__


def validate_config(config: Any) -> ValidationReport:
    """Validate a parsed configuration document.

    Args:
        config: The parsed YAML/JSON document.

    Returns:
        ValidationReport with ``valid`` and every accumulated error.
    """
    if not config or not isinstance(config, dict):
        return ValidationReport(valid=False, errors=["Configuration object is required"])

    errors: list[str] = []

    version = config.get("version")
    if version is None or version == "":
        errors.append("Missing required field: version")
    elif not isinstance(version, str):
        errors.append('version: Must be a string (e.g., "1.0")')

    heuristics = config.get("heuristics")
    if not heuristics:
        errors.append("Missing required field: heuristics")
        return ValidationReport(valid=False, errors=errors)
    if not isinstance(heuristics, dict):
        errors.append("heuristics: Must be a mapping of heuristic id to settings")
        return ValidationReport(valid=False, errors=errors)

    for heuristic_id in BUILTIN_HEURISTIC_IDS:
        section = heuristics.get(heuristic_id)
        if not section:
            errors.append(f"Missing required heuristic: {heuristic_id}")
            continue
        if not isinstance(section, dict):
            errors.append(f"{heuristic_id}: Must be a mapping with weights and thresholds")
            continue
        _check_weights(heuristic_id, section.get("weights"), errors)
        _check_thresholds(heuristic_id, section.get("thresholds"), errors)

    _check_heuristic_specifics(heuristics, errors)

    validation = config.get("validation")
    if validation is not None:
        _check_validation_block(validation, errors)

    return ValidationReport(valid=not errors, errors=errors)


def _check_weights(heuristic_id: str, weights: Any, errors: list[str]) -> None:
    if not weights:
        errors.append(f"{heuristic_id}: Missing weights section")
        return
    if not isinstance(weights, dict):
        errors.append(f"{heuristic_id}.weights: Must be a mapping")
        return
    for key, value in weights.items():
        if not _is_number(value):
            errors.append(
                f"{heuristic_id}.weights.{key}: Must be a number (got {_type_name(value)})"
            )
        elif value < 0:
            errors.append(f"{heuristic_id}.weights.{key}: Cannot be negative (got {value})")


def _check_thresholds(heuristic_id: str, thresholds: Any, errors: list[str]) -> None:
    if not thresholds:
        errors.append(f"{heuristic_id}: Missing thresholds section")
        return
    if not isinstance(thresholds, dict):
        errors.append(f"{heuristic_id}.thresholds: Must be a mapping")
        return
    for key, value in thresholds.items():
        if not _is_number(value):
            errors.append(
                f"{heuristic_id}.thresholds.{key}: Must be a number (got {_type_name(value)})"
            )
        elif key == "tipping_point":
            if value < 1 or not float(value).is_integer():
                errors.append(
                    f"{heuristic_id}.thresholds.{key}: Must be integer ≥ 1 (got {value})"
                )
        elif value < 0 or value > 1:
            errors.append(
                f"{heuristic_id}.thresholds.{key}: Must be between 0 and 1 (got {value})"
            )


def _check_heuristic_specifics(heuristics: dict[str, Any], errors: list[str]) -> None:
    """Domain rules that span several fields of one heuristic."""
    back_casting = heuristics.get(BACK_CASTING_ID)
    if isinstance(back_casting, dict) and isinstance(back_casting.get("weights"), dict):
        weights = back_casting["weights"]
        parts = [weights.get("end_state_vision", 0), weights.get("current_market_signals", 0)]
        if all(_is_number(p) for p in parts):
            total = sum(parts)
            if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
                errors.append(
                    f"{BACK_CASTING_ID}.weights: Sum should equal 1.0 for proper "
                    f"weighting (got {total:.2f})"
                )

    coherence = heuristics.get(COHERENCE_SCAN_ID)
    if isinstance(coherence, dict) and isinstance(coherence.get("thresholds"), dict):
        thresholds = coherence["thresholds"]
        # veto bounds raw truthfulness, review and approve bound the weighted score
        review = thresholds.get("review")
        approve = thresholds.get("approve")
        if _is_number(review) and _is_number(approve) and review >= approve:
            errors.append(
                f"{COHERENCE_SCAN_ID}.thresholds: review ({review}) must be < approve ({approve})"
            )

    automation = heuristics.get(AUTOMATION_CHECK_ID)
    if isinstance(automation, dict) and isinstance(automation.get("thresholds"), dict):
        thresholds = automation["thresholds"]
        standardization = thresholds.get("standardization")
        automate = thresholds.get("automate")
        if _is_number(standardization) and _is_number(automate) and standardization > automate:
            errors.append(
                f"{AUTOMATION_CHECK_ID}.thresholds: standardization ({standardization}) "
                f"should be ≤ automate ({automate})"
            )


def _check_validation_block(validation: Any, errors: list[str]) -> None:
    if not isinstance(validation, dict):
        errors.append("validation: Must be a mapping")
        return

    strict_mode = validation.get("strict_mode")
    if strict_mode is not None and not isinstance(strict_mode, bool):
        errors.append("validation.strict_mode: Must be boolean (true/false)")

    minimum_score = validation.get("minimum_score")
    if minimum_score is not None:
        if not _is_number(minimum_score):
            errors.append("validation.minimum_score: Must be number")
        elif minimum_score < 0 or minimum_score > 10:
            errors.append("validation.minimum_score: Must be between 0 and 10 (axiom scale)")

    enable_veto = validation.get("enable_veto")
    if enable_veto is not None and not isinstance(enable_veto, bool):
        errors.append("validation.enable_veto: Must be boolean (true/false)")


def format_validation_errors(errors: list[str]) -> str:
    """Human-readable report of validation errors."""
    if not errors:
        return "Configuration is valid"
    lines = [f"Configuration validation failed with {len(errors)} error(s):"]
    lines.extend(f"  {idx}. {error}" for idx, error in enumerate(errors, start=1))
    return "\n".join(lines)
