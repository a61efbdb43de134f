"""Lightweight sessions over the one shared mind."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from hybridops.observability import Telemetry

from .loader import MindLoader

COMPONENT = "session_manager"


@dataclass
class Session:
    """A caller's handle on the shared mind."""

    session_id: str
    mind: MindLoader
    created_at: datetime
    last_accessed: datetime
    request_count: int = 0

    def touch(self, now: datetime) -> None:
        self.last_accessed = now
        self.request_count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "last_accessed": self.last_accessed.isoformat(),
            "request_count": self.request_count,
            "mind_loaded": self.mind.loaded,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Maps session ids to sessions that all share one MindLoader."""

    def __init__(
        self,
        mind: MindLoader,
        ttl_hours: float = 8.0,
        telemetry: Telemetry | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._mind = mind
        self._ttl = timedelta(hours=ttl_hours)
        self._telemetry = telemetry or Telemetry()
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._sweeping = False

    def get_session(self, session_id: str) -> Session:
        """Return the session for an id, creating it on first access.

        The shared mind is loaded on the first session creation.
        """
        now = self._clock()
        session = self._sessions.get(session_id)
        if session is not None:
            session.touch(now)
            return session

        if not self._mind.loaded:
            self._mind.load()

        session = Session(
            session_id=session_id,
            mind=self._mind,
            created_at=now,
            last_accessed=now,
        )
        self._sessions[session_id] = session
        self._telemetry.info(COMPONENT, "session_created", {"session_id": session_id})
        return session

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    def end_session(self, session_id: str) -> bool:
        """Drop the mapping only; the shared mind is untouched."""
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            self._telemetry.info(COMPONENT, "session_ended", {"session_id": session_id})
        return removed

    def cleanup_stale_sessions(self, now: datetime | None = None) -> int:
        """End every session idle for longer than the TTL."""
        now = now or self._clock()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.last_accessed > self._ttl
        ]
        for sid in stale:
            self.end_session(sid)
        if stale:
            self._telemetry.info(COMPONENT, "stale_sessions_cleaned", {"count": len(stale)})
        return len(stale)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def destroy_all(self) -> None:
        """End all sessions and reset the shared mind."""
        self._sessions.clear()
        self._mind.reset()

    def get_stats(self) -> dict[str, Any]:
        return {
            "active_sessions": len(self._sessions),
            "shared_mind_loaded": self._mind.loaded,
            "ttl_hours": self._ttl.total_seconds() / 3600,
        }

    async def run_sweeper(self, interval: float = 300.0) -> None:
        """Periodically clean stale sessions until ``stop_sweeper()``."""
        self._sweeping = True
        while self._sweeping:
            await asyncio.sleep(interval)
            self.cleanup_stale_sessions()

    def stop_sweeper(self) -> None:
        self._sweeping = False
