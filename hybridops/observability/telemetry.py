"""
Structured event logging and lightweight metrics for the core services.

Every component reports through the same small interface: ``log``,
``start_timer``/``end_timer``, ``record_cache_hit``/``record_cache_miss`` and
``record_fallback``. Reporting is best-effort. A telemetry call must never
raise into, or block, the caller's control flow.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger("hybridops").setLevel(LOG_LEVELS.get(level.upper(), logging.INFO))


class Telemetry:
    """Logger + metrics collaborator used by every core component.

    Counters and the fallback log live in memory so tests and the API can
    inspect them. All public methods swallow their own failures.
    """

    def __init__(
        self,
        logger_name: str = "hybridops",
        max_events: int = 1000,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._logger_name = logger_name
        self._clock = clock
        self._timers: dict[str, tuple[str, float, dict[str, Any]]] = {}
        self._durations: deque[dict[str, Any]] = deque(maxlen=max_events)
        self._fallbacks: deque[dict[str, Any]] = deque(maxlen=max_events)
        self.cache_hits = 0
        self.cache_misses = 0

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def log(
        self,
        level: str,
        component: str,
        event: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            logger = logging.getLogger(f"{self._logger_name}.{component}")
            numeric = LOG_LEVELS.get(level.upper(), logging.INFO)
            if not logger.isEnabledFor(numeric):
                return
            details = " ".join(f"{k}={v}" for k, v in (metadata or {}).items())
            logger.log(
                numeric,
                f"{event} {details}".rstrip(),
                extra={"component": component, "event": event, "metadata": metadata or {}},
            )
        except Exception:
            # Logging must never break the caller
            pass

    def debug(self, component: str, event: str, metadata: dict[str, Any] | None = None) -> None:
        self.log("DEBUG", component, event, metadata)

    def info(self, component: str, event: str, metadata: dict[str, Any] | None = None) -> None:
        self.log("INFO", component, event, metadata)

    def warn(self, component: str, event: str, metadata: dict[str, Any] | None = None) -> None:
        self.log("WARN", component, event, metadata)

    def error(self, component: str, event: str, metadata: dict[str, Any] | None = None) -> None:
        self.log("ERROR", component, event, metadata)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def start_timer(
        self,
        operation_id: str,
        operation_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            self._timers[operation_id] = (operation_type, self._clock(), dict(metadata or {}))
        except Exception:
            pass

    def end_timer(
        self,
        operation_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> float | None:
        """Stop a timer and return its duration in milliseconds.

        Returns None when the timer was never started.
        """
        try:
            started = self._timers.pop(operation_id, None)
            if started is None:
                return None
            operation_type, start, start_meta = started
            duration_ms = (self._clock() - start) * 1000.0
            self._durations.append({
                "operation_id": operation_id,
                "operation_type": operation_type,
                "duration_ms": duration_ms,
                "metadata": {**start_meta, **(metadata or {})},
            })
            return duration_ms
        except Exception:
            return None

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def record_cache_hit(self, metadata: dict[str, Any] | None = None) -> None:
        try:
            self.cache_hits += 1
            self.debug(str((metadata or {}).get("component", "cache")), "cache_hit", metadata)
        except Exception:
            pass

    def record_cache_miss(self, metadata: dict[str, Any] | None = None) -> None:
        try:
            self.cache_misses += 1
            self.debug(str((metadata or {}).get("component", "cache")), "cache_miss", metadata)
        except Exception:
            pass

    def record_fallback(self, reason: str, metadata: dict[str, Any] | None = None) -> None:
        try:
            self._fallbacks.append({
                "reason": reason,
                "metadata": dict(metadata or {}),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
        except Exception:
            pass

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def fallbacks(self) -> list[dict[str, Any]]:
        return list(self._fallbacks)

    @property
    def durations(self) -> list[dict[str, Any]]:
        return list(self._durations)

    def get_cache_hit_rate(self) -> float:
        total = self.cache_hits + self.cache_misses
        return self.cache_hits / total if total > 0 else 0.0

    def get_summary(self) -> dict[str, Any]:
        """Aggregate counters for the API and tests."""
        by_type: dict[str, list[float]] = {}
        for entry in self._durations:
            by_type.setdefault(entry["operation_type"], []).append(entry["duration_ms"])
        return {
            "cache": {
                "hits": self.cache_hits,
                "misses": self.cache_misses,
                "hit_rate": self.get_cache_hit_rate(),
            },
            "fallbacks": len(self._fallbacks),
            "timings_ms": {
                op: sum(values) / len(values) for op, values in by_type.items()
            },
            "open_timers": len(self._timers),
        }

    def reset(self) -> None:
        self._timers.clear()
        self._durations.clear()
        self._fallbacks.clear()
        self.cache_hits = 0
        self.cache_misses = 0
