"""
Cached, hot-reloadable heuristics configuration.

The store owns one YAML document on disk. Readers get the cached mapping;
a change signal (from the polling watcher or an explicit request) clears,
reloads and notifies subscribers with ``(new, old)`` as one synchronous
step, so no consumer ever observes a half-updated configuration.
"""

from __future__ import annotations

import asyncio
import os
from collections import deque
from pathlib import Path
from typing import Any, Callable

import yaml

from hybridops.observability import Telemetry

ConfigSubscriber = Callable[[dict[str, Any], "dict[str, Any] | None"], None]

COMPONENT = "config_store"


class ConfigStore:
    """Loads, caches and watches the heuristics configuration file."""

    def __init__(
        self,
        path: str | Path,
        telemetry: Telemetry | None = None,
        watch_interval: float = 1.0,
    ):
        """Initialize the store.

        Args:
            path: Location of the YAML configuration document.
            telemetry: Observability collaborator; a private one is created
                when omitted.
            watch_interval: Seconds between fingerprint polls.
        """
        self._path = Path(path)
        self._watch_interval = watch_interval
        self._telemetry = telemetry or Telemetry()
        self._config: dict[str, Any] | None = None
        self._subscribers: list[ConfigSubscriber] = []
        self._pending: deque[str] = deque()
        self._fingerprint: tuple[int, int] | None = None
        self._watching = False
        self._watch_task: asyncio.Task | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    @property
    def is_watching(self) -> bool:
        return self._watching

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, Any] | None:
        """Parse the document from disk; None on any failure."""
        try:
            with open(self._path, encoding="utf-8") as f:
                parsed = yaml.safe_load(f)
        except FileNotFoundError:
            self._telemetry.warn(COMPONENT, "config_file_missing", {"path": str(self._path)})
            return None
        except OSError as e:
            self._telemetry.warn(
                COMPONENT, "config_file_unreadable", {"path": str(self._path), "error": str(e)}
            )
            return None
        except yaml.YAMLError as e:
            self._telemetry.warn(
                COMPONENT, "config_parse_error", {"path": str(self._path), "error": str(e)}
            )
            return None

        if not isinstance(parsed, dict):
            self._telemetry.warn(
                COMPONENT,
                "config_not_a_mapping",
                {"path": str(self._path), "type": type(parsed).__name__},
            )
            return None
        return parsed

    def load(self) -> dict[str, Any] | None:
        """Read the file and replace the cache on success.

        Returns:
            The parsed configuration, or None when the file is missing or
            malformed. A failed load leaves the previous cache in place.
        """
        self._telemetry.start_timer("config_load", "config_load", {"path": str(self._path)})
        parsed = self._read()
        duration = self._telemetry.end_timer("config_load", {"success": parsed is not None})
        if parsed is None:
            return None

        self._config = parsed
        self._telemetry.info(
            COMPONENT,
            "config_loaded",
            {"path": str(self._path), "version": parsed.get("version"), "duration_ms": duration},
        )
        return parsed

    def get(self) -> dict[str, Any] | None:
        """Return the cached configuration, loading it on first use."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> dict[str, Any] | None:
        """Force a fresh read from disk, bypassing the cache."""
        return self.load()

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def watch(self, callback: ConfigSubscriber) -> None:
        """Register a change subscriber; the first one arms the watcher."""
        self._subscribers.append(callback)
        if self._watching:
            return

        self._watching = True
        self._fingerprint = self._stat()
        self._telemetry.info(COMPONENT, "watcher_started", {"path": str(self._path)})

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet: the host drives poll()/run_watcher() itself
            return
        self._watch_task = loop.create_task(self.run_watcher())

    def unsubscribe(self, callback: ConfigSubscriber) -> bool:
        """Remove one subscriber. Returns False if it was not registered."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            return False
        return True

    def unwatch(self) -> None:
        """Stop watching and drop every subscriber."""
        self._watching = False
        if self._watch_task is not None and not self._watch_task.done():
            self._watch_task.cancel()
        self._watch_task = None
        self._subscribers.clear()
        self._pending.clear()
        self._telemetry.info(COMPONENT, "watcher_stopped", {"path": str(self._path)})

    # ------------------------------------------------------------------
    # Change signals
    # ------------------------------------------------------------------

    def _stat(self) -> tuple[int, int] | None:
        try:
            st = os.stat(self._path)
        except OSError:
            return None
        return (st.st_mtime_ns, st.st_size)

    def notify_change(self, source: str = "manual") -> None:
        """Enqueue a change signal without consulting the file fingerprint."""
        self._pending.append(source)

    def poll(self) -> bool:
        """Compare the file fingerprint and enqueue a signal if it changed."""
        current = self._stat()
        if current == self._fingerprint:
            return False
        self._fingerprint = current
        if current is None:
            # Deleted files are not a reload; the next write will be
            return False
        self._pending.append("watcher")
        return True

    @property
    def pending_signals(self) -> int:
        return len(self._pending)

    def process_pending(self) -> int:
        """Drain queued change signals one at a time.

        Returns:
            Number of signals that produced a successful reload.
        """
        applied = 0
        while self._pending:
            source = self._pending.popleft()
            if self._apply_change(source):
                applied += 1
        return applied

    def _apply_change(self, source: str) -> bool:
        old = self._config
        self._telemetry.info(COMPONENT, "config_change_detected", {"source": source})

        new = self._read()
        if new is None:
            self._telemetry.warn(
                COMPONENT, "config_reload_failed", {"source": source, "kept_previous": old is not None}
            )
            return False

        self._config = new
        self._telemetry.info(COMPONENT, "config_reloaded", {"version": new.get("version")})

        for callback in list(self._subscribers):
            try:
                callback(new, old)
            except Exception as e:
                self._telemetry.error(
                    COMPONENT,
                    "subscriber_failed",
                    {"subscriber": getattr(callback, "__qualname__", repr(callback)), "error": str(e)},
                )
        return True

    def start_watcher_task(self) -> asyncio.Task | None:
        """Schedule ``run_watcher`` on the running loop if armed and idle."""
        if not self._watching:
            return None
        if self._watch_task is None or self._watch_task.done():
            self._watch_task = asyncio.get_running_loop().create_task(self.run_watcher())
        return self._watch_task

    async def run_watcher(self, interval: float | None = None) -> None:
        """Poll the file and apply changes until ``unwatch()`` is called."""
        interval = self._watch_interval if interval is None else interval
        while self._watching:
            await asyncio.sleep(interval)
            if not self._watching:
                break
            self.poll()
            self.process_pending()
