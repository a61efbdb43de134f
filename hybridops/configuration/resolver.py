"""Choose the effective configuration: env overrides, then file, then defaults."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from hybridops.observability import Telemetry

from .defaults import default_config
from .overrides import apply_env_overrides
from .validator import format_validation_errors, validate_config

COMPONENT = "config_resolver"


def resolve_config(
    file_config: dict[str, Any] | None,
    environ: Mapping[str, str] | None = None,
    telemetry: Telemetry | None = None,
) -> tuple[dict[str, Any], str]:
    """Return ``(config, source)`` with source one of file, env+file, env+defaults, defaults.

    An invalid document is reported and replaced by the defaults; it is
    never raised.
    """
    telemetry = telemetry or Telemetry()
    env_config = apply_env_overrides(file_config, environ)
    config = env_config or file_config

    if env_config is not None:
        source = "env+file" if file_config is not None else "env+defaults"
    elif file_config is not None:
        source = "file"
    else:
        telemetry.info(COMPONENT, "config_using_defaults", {"reason": "no_file_found"})
        return default_config(), "defaults"

    report = validate_config(config)
    if not report.valid:
        telemetry.record_fallback("config_validation_failed", {
            "component": COMPONENT,
            "errors_count": len(report.errors),
            "config_source": source,
        })
        telemetry.warn(COMPONENT, "config_validation_failed", {
            "errors": format_validation_errors(report.errors),
            "fallback": "defaults",
        })
        return default_config(), "defaults"

    telemetry.info(COMPONENT, "config_validated", {"source": source})
    return copy.deepcopy(config), source
