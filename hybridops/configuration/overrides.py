"""
Environment-variable overrides for individual heuristic parameters.

Each variable maps to one path inside the configuration document. Values
from the environment win over the file; the file wins over the defaults.
"""

from __future__ import annotations

import copy
import math
import os
from typing import Any, Mapping

from .defaults import (
    AUTOMATION_CHECK_ID,
    BACK_CASTING_ID,
    COHERENCE_SCAN_ID,
    DEFAULT_CONFIG,
)

# variable name -> path inside the configuration document
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "HEURISTIC_BS001_END_STATE_WEIGHT": ("heuristics", BACK_CASTING_ID, "weights", "end_state_vision"),
    "HEURISTIC_BS001_MARKET_WEIGHT": ("heuristics", BACK_CASTING_ID, "weights", "current_market_signals"),
    "HEURISTIC_BS001_CONFIDENCE_THRESHOLD": ("heuristics", BACK_CASTING_ID, "thresholds", "confidence"),
    "HEURISTIC_BS001_PRIORITY_THRESHOLD": ("heuristics", BACK_CASTING_ID, "thresholds", "priority"),
    "HEURISTIC_PA001_TRUTHFULNESS_WEIGHT": ("heuristics", COHERENCE_SCAN_ID, "weights", "truthfulness"),
    "HEURISTIC_PA001_SYSTEM_WEIGHT": ("heuristics", COHERENCE_SCAN_ID, "weights", "system_adherence"),
    "HEURISTIC_PA001_SKILL_WEIGHT": ("heuristics", COHERENCE_SCAN_ID, "weights", "skill"),
    "HEURISTIC_PA001_VETO_THRESHOLD": ("heuristics", COHERENCE_SCAN_ID, "thresholds", "veto"),
    "HEURISTIC_PA001_APPROVE_THRESHOLD": ("heuristics", COHERENCE_SCAN_ID, "thresholds", "approve"),
    "HEURISTIC_PA001_REVIEW_THRESHOLD": ("heuristics", COHERENCE_SCAN_ID, "thresholds", "review"),
    "HEURISTIC_PM001_FREQUENCY_WEIGHT": ("heuristics", AUTOMATION_CHECK_ID, "weights", "frequency"),
    "HEURISTIC_PM001_STANDARDIZATION_WEIGHT": ("heuristics", AUTOMATION_CHECK_ID, "weights", "standardization"),
    "HEURISTIC_PM001_GUARDRAILS_WEIGHT": ("heuristics", AUTOMATION_CHECK_ID, "weights", "guardrails"),
    "HEURISTIC_PM001_TIPPING_POINT": ("heuristics", AUTOMATION_CHECK_ID, "thresholds", "tipping_point"),
    "HEURISTIC_PM001_STANDARDIZATION_THRESHOLD": ("heuristics", AUTOMATION_CHECK_ID, "thresholds", "standardization"),
    "HEURISTIC_PM001_AUTOMATE_THRESHOLD": ("heuristics", AUTOMATION_CHECK_ID, "thresholds", "automate"),
    "VALIDATION_STRICT_MODE": ("validation", "strict_mode"),
    "VALIDATION_MINIMUM_SCORE": ("validation", "minimum_score"),
}


def coerce_env_value(raw: str) -> bool | float | str:
    """Convert an environment string to bool, float, or leave it as text."""
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        number = float(raw)
    except ValueError:
        return raw
    return number if math.isfinite(number) else raw


def _set_path(target: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    node = target
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[path[-1]] = value


def apply_env_overrides(
    file_config: dict[str, Any] | None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any] | None:
    """Overlay mapped environment variables onto the configuration.

    Args:
        file_config: Configuration loaded from disk, or None.
        environ: Variable source; defaults to ``os.environ``.

    Returns:
        A new merged document, or None when no mapped variable is set.
        The input is never mutated.
    """
    env = os.environ if environ is None else environ
    present = {name: env[name] for name in ENV_OVERRIDES if name in env}
    if not present:
        return None

    base = file_config if file_config else DEFAULT_CONFIG
    merged = copy.deepcopy(base)
    for name, raw in present.items():
        _set_path(merged, ENV_OVERRIDES[name], coerce_env_value(raw))
    return merged
