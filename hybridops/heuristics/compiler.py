"""
Heuristic compiler with an in-memory cache of decision functions.

Compiled functions are cached by heuristic id. A cache hit returns the same
instance even when a different configuration is passed; callers that need
new weights must clear the cache first (``invalidate_on_config_change``
does this on hot reload).
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from hybridops.configuration.defaults import BUILTIN_HEURISTIC_IDS, heuristic_section
from hybridops.errors import TemplateRegistrationError, UnknownHeuristicError
from hybridops.observability import Telemetry

from .schemas import HeuristicKind
from .templates import BUILTIN_TEMPLATES, HeuristicTemplate

COMPONENT = "heuristic_compiler"


class DecisionFunction:
    """A compiled ``context -> result`` function tagged with its provenance."""

    def __init__(
        self,
        func: Callable[[Any], Any],
        template: HeuristicTemplate,
        config: dict[str, Any],
    ):
        self._func = func
        self.heuristic_id = template.id
        self.name = template.name
        self.domain = template.domain
        self.kind = template.kind
        self.config = copy.deepcopy(config)
        self.compiled_at = datetime.now(timezone.utc).isoformat()

    def __call__(self, context: Any) -> Any:
        return self._func(context)

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.heuristic_id,
            "name": self.name,
            "domain": self.domain,
            "kind": self.kind.value,
            "config": self.config,
            "compiled_at": self.compiled_at,
        }

    def __repr__(self) -> str:
        return f"DecisionFunction({self.heuristic_id!r}, compiled_at={self.compiled_at!r})"


class HeuristicCompiler:
    """Compiles heuristic templates and caches the results by id."""

    def __init__(self, telemetry: Telemetry | None = None):
        self._telemetry = telemetry or Telemetry()
        self._compiled: dict[str, DecisionFunction] = {}
        self._custom: dict[str, HeuristicTemplate] = {}
        self._hits = 0
        self._misses = 0

    def _template(self, heuristic_id: str) -> HeuristicTemplate | None:
        return BUILTIN_TEMPLATES.get(heuristic_id) or self._custom.get(heuristic_id)

    def compile(self, heuristic_id: str, config: dict[str, Any] | None = None) -> DecisionFunction:
        """Compile (or fetch from cache) the decision function for an id.

        Args:
            heuristic_id: Built-in or registered template id.
            config: The heuristic's ``{weights, thresholds}`` section.
                Ignored on a cache hit.

        Returns:
            The cached or newly compiled DecisionFunction.

        Raises:
            UnknownHeuristicError: If no template exists for the id.
        """
        cached = self._compiled.get(heuristic_id)
        if cached is not None:
            self._hits += 1
            self._telemetry.record_cache_hit({"component": COMPONENT, "heuristic_id": heuristic_id})
            return cached

        self._misses += 1
        self._telemetry.record_cache_miss({"component": COMPONENT, "heuristic_id": heuristic_id})

        template = self._template(heuristic_id)
        if template is None:
            self._telemetry.error(
                COMPONENT, "compilation_failed",
                {"heuristic_id": heuristic_id, "error": "Unknown heuristic ID"},
            )
            raise UnknownHeuristicError(heuristic_id)

        config = config or {}
        timer_id = f"compile:{heuristic_id}:{uuid.uuid4().hex[:8]}"
        self._telemetry.start_timer(timer_id, "heuristic_compile", {"heuristic_id": heuristic_id})
        self._telemetry.info(
            COMPONENT, "compilation_started",
            {
                "heuristic_id": heuristic_id,
                "heuristic_name": template.name,
                "config_source": "file" if config else "defaults",
            },
        )

        try:
            func = template.compile(config)
        except Exception as e:
            self._telemetry.end_timer(timer_id, {"success": False})
            self._telemetry.error(
                COMPONENT, "compilation_failed", {"heuristic_id": heuristic_id, "error": str(e)}
            )
            raise

        compiled = DecisionFunction(func, template, config)
        self._compiled[heuristic_id] = compiled
        duration = self._telemetry.end_timer(timer_id, {"success": True})
        self._telemetry.info(
            COMPONENT, "compilation_completed",
            {"heuristic_id": heuristic_id, "duration_ms": duration},
        )
        return compiled

    def compile_multiple(
        self,
        heuristics: Iterable[tuple[str, dict[str, Any] | None]],
    ) -> dict[str, DecisionFunction | None]:
        """Compile each ``(id, config)`` independently; failures map to None."""
        results: dict[str, DecisionFunction | None] = {}
        for heuristic_id, config in heuristics:
            try:
                results[heuristic_id] = self.compile(heuristic_id, config)
            except Exception as e:
                self._telemetry.warn(
                    COMPONENT, "compile_multiple_entry_failed",
                    {"heuristic_id": heuristic_id, "error": str(e)},
                )
                results[heuristic_id] = None
        return results

    def register_custom_template(self, heuristic_id: str, template: Any) -> HeuristicTemplate:
        """Register a custom template after validating its shape.

        ``template`` may be a HeuristicTemplate or any object/mapping with
        ``name``, ``domain`` and a callable ``compile``.

        Raises:
            TemplateRegistrationError: On a malformed template or an attempt
                to shadow a built-in id.
        """
        if heuristic_id in BUILTIN_TEMPLATES:
            raise TemplateRegistrationError(
                f"Cannot register custom template over built-in heuristic {heuristic_id}"
            )

        def field(key: str) -> Any:
            if isinstance(template, dict):
                return template.get(key)
            return getattr(template, key, None)

        name, domain, compile_fn = field("name"), field("domain"), field("compile")
        if not name or not domain or not callable(compile_fn):
            raise TemplateRegistrationError(
                "Custom template must have name, domain, and compile function"
            )

        registered = HeuristicTemplate(
            id=heuristic_id,
            name=str(name),
            domain=str(domain),
            kind=HeuristicKind.CUSTOM,
            compile=compile_fn,
        )
        self._custom[heuristic_id] = registered
        self._telemetry.info(COMPONENT, "custom_template_registered", {"heuristic_id": heuristic_id})
        return registered

    def available_heuristics(self) -> list[str]:
        return [*BUILTIN_TEMPLATES, *self._custom]

    def get_heuristic_metadata(self, heuristic_id: str) -> dict[str, Any] | None:
        template = self._template(heuristic_id)
        if template is None:
            return None
        return {
            "id": heuristic_id,
            "name": template.name,
            "domain": template.domain,
            "kind": template.kind.value,
            "compiled": heuristic_id in self._compiled,
        }

    def is_compiled(self, heuristic_id: str) -> bool:
        return heuristic_id in self._compiled

    def clear_cache(self, reason: str = "Manual cache clear") -> int:
        """Drop every compiled function. Returns the number removed."""
        count = len(self._compiled)
        self._compiled.clear()
        self._telemetry.info(COMPONENT, "cache_cleared", {"heuristics_count": count, "reason": reason})
        return count

    def invalidate_on_config_change(
        self,
        new_config: dict[str, Any] | None,
        recompile: bool = False,
    ) -> dict[str, DecisionFunction | None] | None:
        """Clear the cache and optionally recompile the built-ins.

        Returns:
            Per-id results (None for a failed id) when recompiling,
            otherwise None.
        """
        self.clear_cache("Configuration file changed")
        if not recompile or not new_config:
            return None

        results = self.compile_multiple(
            (heuristic_id, heuristic_section(new_config, heuristic_id))
            for heuristic_id in BUILTIN_HEURISTIC_IDS
        )
        succeeded = sum(1 for fn in results.values() if fn is not None)
        self._telemetry.info(
            COMPONENT, "recompilation_completed",
            {"total": len(results), "successful": succeeded, "failed": len(results) - succeeded},
        )
        return results

    def get_stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "predefined_heuristics": len(BUILTIN_TEMPLATES),
            "custom_heuristics": len(self._custom),
            "compiled_count": len(self._compiled),
            "available_total": len(self.available_heuristics()),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total > 0 else 0.0,
            "compiled_heuristics": list(self._compiled.keys()),
        }
