"""Configuration package - heuristics document, validation and overrides."""

from .defaults import (
    AUTOMATION_CHECK_ID,
    BACK_CASTING_ID,
    BUILTIN_HEURISTIC_IDS,
    COHERENCE_SCAN_ID,
    DEFAULT_CONFIG,
    default_config,
    heuristic_section,
)
from .overrides import ENV_OVERRIDES, apply_env_overrides, coerce_env_value
from .resolver import resolve_config
from .store import ConfigStore
from .validator import ValidationReport, format_validation_errors, validate_config

__all__ = [
    "AUTOMATION_CHECK_ID",
    "BACK_CASTING_ID",
    "BUILTIN_HEURISTIC_IDS",
    "COHERENCE_SCAN_ID",
    "DEFAULT_CONFIG",
    "default_config",
    "heuristic_section",
    "ENV_OVERRIDES",
    "apply_env_overrides",
    "coerce_env_value",
    "resolve_config",
    "ConfigStore",
    "ValidationReport",
    "format_validation_errors",
    "validate_config",
]
