"""
Mind loader: assembles configuration, artifacts and compiled heuristics
into one immutable bundle shared by every session.

Load order is fixed: configuration is loaded, overridden from the
environment and validated before anything is compiled. On hot reload a new
bundle is built and swapped in whole; readers holding the previous bundle
keep a consistent view.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from hybridops.configuration import (
    AUTOMATION_CHECK_ID,
    BACK_CASTING_ID,
    COHERENCE_SCAN_ID,
    ConfigStore,
    DEFAULT_CONFIG,
    apply_env_overrides,
    format_validation_errors,
    heuristic_section,
    resolve_config,
    validate_config,
)
from hybridops.errors import HybridOpsError, MindLoadError, MindNotLoadedError
from hybridops.heuristics import DecisionFunction, HeuristicCompiler
from hybridops.observability import Telemetry

from .artifacts import ArtifactStore

COMPONENT = "mind_loader"

# bundle key -> heuristic id
DECISION_FUNCTION_IDS: dict[str, str] = {
    "back_casting": BACK_CASTING_ID,
    "coherence_scan": COHERENCE_SCAN_ID,
    "automation_check": AUTOMATION_CHECK_ID,
}

TASK_MANAGEMENT_RULES: dict[str, tuple[str, ...]] = {
    "anti_patterns": (
        "multiple_assignees_single_task",
        "missing_time_estimate",
        "vague_acceptance_criteria",
        "lack_of_documentation",
    ),
}

TASK_ANATOMY_RULES: dict[str, tuple[str, ...]] = {
    "required_fields": (
        "task_name",
        "status",
        "responsible_executor",
        "execution_type",
        "estimated_time",
        "input",
        "output",
        "action_items",
        "acceptance_criteria",
    ),
    "executor_types": ("Humano", "Agente", "Clone"),
    "execution_types": ("100% Humano", "Híbrido", "100% Agente"),
    "rules": (
        "one_task_one_executor",
        "must_have_time_estimate",
        "clear_input_output",
        "actionable_items",
        "measurable_criteria",
    ),
}


def _freeze(value: Any) -> Any:
    """Read-only view of nested mappings; lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Plain dict/list copy of a frozen structure, for serialisation."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class MindBundle:
    """Immutable snapshot of everything a session reads."""

    artifacts: Mapping[str, Any]
    decision_functions: Mapping[str, DecisionFunction]
    config: Mapping[str, Any]
    config_source: str
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def decision_function(self, heuristic_id: str) -> DecisionFunction | None:
        for fn in self.decision_functions.values():
            if fn.heuristic_id == heuristic_id:
                return fn
        return None


class MindLoader:
    """Loads the mind once and keeps it current across config reloads."""

    def __init__(
        self,
        store: ConfigStore,
        compiler: HeuristicCompiler,
        artifacts: ArtifactStore,
        telemetry: Telemetry | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._store = store
        self._compiler = compiler
        self._artifacts = artifacts
        self._telemetry = telemetry or Telemetry()
        self._environ = environ
        self._bundle: MindBundle | None = None
        self._store.watch(self._on_config_change)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._bundle is not None

    @property
    def bundle(self) -> MindBundle:
        if self._bundle is None:
            raise MindNotLoadedError("Mind must be loaded before use. Call load() first.")
        return self._bundle

    @property
    def config_source(self) -> str | None:
        return self._bundle.config_source if self._bundle else None

    @property
    def validation_settings(self) -> dict[str, Any]:
        """The active ``validation`` block merged over the defaults."""
        settings = dict(DEFAULT_CONFIG["validation"])
        if self._bundle is not None:
            settings.update(self._bundle.config.get("validation") or {})
        return settings

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _resolve_config(self) -> tuple[dict[str, Any], str]:
        return resolve_config(self._store.get(), self._environ, self._telemetry)

    def _compile_all(self, config: dict[str, Any]) -> dict[str, DecisionFunction]:
        return {
            key: self._compiler.compile(heuristic_id, heuristic_section(config, heuristic_id))
            for key, heuristic_id in DECISION_FUNCTION_IDS.items()
        }

    def load(self) -> MindBundle:
        """Load configuration, artifacts and decision functions once.

        Raises:
            MindLoadError: If artifacts cannot be read or compilation fails.
                The mind stays unloaded.
        """
        if self._bundle is not None:
            self._telemetry.record_cache_hit({"component": COMPONENT, "operation": "load"})
            return self._bundle

        operation_id = f"mind_load_{uuid.uuid4().hex[:8]}"
        self._telemetry.start_timer(operation_id, "mind_load")
        self._telemetry.info(COMPONENT, "mind_loading_started")

        config, source = self._resolve_config()
        try:
            artifacts = self._artifacts.load_all()
            functions = self._compile_all(config)
        except (HybridOpsError, OSError, ValueError, TypeError) as e:
            self._telemetry.end_timer(operation_id, {"success": False, "error": str(e)})
            self._telemetry.error(COMPONENT, "mind_loading_failed", {"error": str(e)})
            raise MindLoadError(f"Mind loading failed: {e}") from e

        self._bundle = MindBundle(
            artifacts=MappingProxyType(artifacts),
            decision_functions=MappingProxyType(functions),
            config=_freeze(config),
            config_source=source,
        )
        duration = self._telemetry.end_timer(operation_id, {"config_source": source})
        self._telemetry.info(COMPONENT, "mind_loaded", {
            "config_source": source,
            "cached_artifacts": self._artifacts.cache_size,
            "duration_ms": duration,
        })
        return self._bundle

    # ------------------------------------------------------------------
    # Hot reload
    # ------------------------------------------------------------------

    def _on_config_change(self, new_config: dict[str, Any], old_config: dict[str, Any] | None) -> None:
        env_config = apply_env_overrides(new_config, self._environ)
        candidate = env_config or new_config
        source = "env+file" if env_config is not None else "file"

        report = validate_config(candidate)
        if not report.valid:
            self._telemetry.record_fallback("config_reload_validation_failed", {
                "component": COMPONENT,
                "errors_count": len(report.errors),
            })
            self._telemetry.warn(COMPONENT, "config_reload_validation_failed", {
                "errors": format_validation_errors(report.errors),
                "action": "keeping_old_config",
            })
            return

        current = self._bundle
        if current is None:
            # next load() reads the refreshed store cache
            self._telemetry.info(COMPONENT, "config_reloaded_before_load", {"source": source})
            return

        config = copy.deepcopy(candidate)
        self._compiler.invalidate_on_config_change(config, recompile=True)
        try:
            functions = self._compile_all(config)
        except HybridOpsError as e:
            self._telemetry.error(COMPONENT, "hot_reload_recompile_failed", {"error": str(e)})
            return

        self._bundle = MindBundle(
            artifacts=current.artifacts,
            decision_functions=MappingProxyType(functions),
            config=_freeze(config),
            config_source=source,
        )
        self._telemetry.info(COMPONENT, "config_reloaded", {"source": source})

    def reload_config(self) -> bool:
        """Force a config re-read through the store's change queue."""
        self._store.notify_change("reload_request")
        return self._store.process_pending() > 0

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    def apply_to_agent(self, agent: Any) -> Any:
        """Attach read-only cognitive layer, functions and rules to an agent.

        Works with plain objects (attributes) and mutable mappings (keys).

        Raises:
            MindNotLoadedError: If ``load()`` has not succeeded.
        """
        if self._bundle is None:
            raise MindNotLoadedError("Mind must be loaded before applying to agent. Call load() first.")

        bundle = self._bundle
        layers = {
            "cognitive_layer": bundle.artifacts,
            "decision_functions": bundle.decision_functions,
            "validation_rules": MappingProxyType({
                "task_management": _freeze(TASK_MANAGEMENT_RULES),
                "task_anatomy": _freeze(TASK_ANATOMY_RULES),
            }),
        }
        for name, value in layers.items():
            if isinstance(agent, dict):
                agent[name] = value
            else:
                setattr(agent, name, value)
        return agent

    def get_metadata(self) -> dict[str, Any]:
        bundle = self._bundle
        return {
            "loaded": bundle is not None,
            "config_source": bundle.config_source if bundle else None,
            "loaded_at": bundle.loaded_at.isoformat() if bundle else None,
            "components": {
                key: bool(bundle and bundle.artifacts.get(key))
                for key in ("meta_axioms", "decision_heuristics", "task_playbook", "system_prompt")
            },
            "decision_functions": {
                key: fn.describe() for key, fn in (bundle.decision_functions.items() if bundle else [])
            },
            "cache_size": {
                "artifacts": self._artifacts.cache_size,
                "compiled_heuristics": self._compiler.get_stats()["compiled_count"],
            },
        }

    def reset(self) -> None:
        """Drop the bundle and artifact cache; the next load() starts over."""
        self._bundle = None
        self._artifacts.clear()
        self._compiler.clear_cache("Mind reset")

    def close(self) -> None:
        self._store.unsubscribe(self._on_config_change)
