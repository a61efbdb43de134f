"""Hardcoded heuristic defaults used when no valid configuration is available."""

from __future__ import annotations

import copy
from typing import Any

BACK_CASTING_ID = "PV_BS_001"
COHERENCE_SCAN_ID = "PV_PA_001"
AUTOMATION_CHECK_ID = "PV_PM_001"

BUILTIN_HEURISTIC_IDS: tuple[str, ...] = (
    BACK_CASTING_ID,
    COHERENCE_SCAN_ID,
    AUTOMATION_CHECK_ID,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "version": "1.0",
    "heuristics": {
        BACK_CASTING_ID: {
            "weights": {
                "end_state_vision": 0.9,
                "current_market_signals": 0.1,
            },
            "thresholds": {
                "confidence": 0.8,
                "priority": 0.8,
            },
        },
        COHERENCE_SCAN_ID: {
            "weights": {
                "truthfulness": 1.0,
                "system_adherence": 0.8,
                "skill": 0.3,
            },
            "thresholds": {
                "veto": 0.7,
                "approve": 0.8,
                "review": 0.6,
            },
        },
        AUTOMATION_CHECK_ID: {
            "weights": {
                "frequency": 0.7,
                "standardization": 0.9,
                "guardrails": 1.0,
            },
            "thresholds": {
                "tipping_point": 2,
                "standardization": 0.7,
                "automate": 0.75,
            },
        },
    },
    "validation": {
        "strict_mode": False,
        "minimum_score": 7.0,
        "enable_veto": True,
    },
}


def default_config() -> dict[str, Any]:
    """Return a fresh deep copy of the defaults (callers may mutate it)."""
    return copy.deepcopy(DEFAULT_CONFIG)


def heuristic_section(config: dict[str, Any] | None, heuristic_id: str) -> dict[str, Any]:
    """Per-heuristic ``{weights, thresholds}`` sub-object, or ``{}``."""
    if not config:
        return {}
    heuristics = config.get("heuristics") or {}
    section = heuristics.get(heuristic_id) if isinstance(heuristics, dict) else None
    return section if isinstance(section, dict) else {}
