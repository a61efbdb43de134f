"""
Tests for sessions sharing one mind.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from hybridops.errors import MindLoadError
from hybridops.mind import ArtifactStore, MindLoader, SessionManager


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sessions(mind, telemetry, clock) -> SessionManager:
    return SessionManager(mind, ttl_hours=8, telemetry=telemetry, clock=clock)


class TestSessionManager:
    """Test session creation, reuse and expiry."""

    def test_first_session_loads_mind(self, sessions, mind):
        """Test the shared mind is loaded on first use."""
        assert mind.loaded is False
        session = sessions.get_session("alice")
        assert mind.loaded is True
        assert session.mind is mind
        assert session.request_count == 0

    def test_sessions_share_one_mind(self, sessions):
        """Test every session sees the same bundle."""
        a = sessions.get_session("a")
        b = sessions.get_session("b")
        assert a is not b
        assert a.mind.bundle is b.mind.bundle
        assert sessions.session_count == 2

    def test_reuse_touches_session(self, sessions, clock):
        """Test a repeated access returns the same session and counts it."""
        first = sessions.get_session("alice")
        clock.advance(minutes=5)
        again = sessions.get_session("alice")
        assert again is first
        assert again.request_count == 1
        assert again.last_accessed == clock.now
        assert again.created_at == clock.now - timedelta(minutes=5)

    def test_end_session_keeps_mind(self, sessions, mind):
        """Test ending a session leaves the shared mind loaded."""
        sessions.get_session("alice")
        assert sessions.end_session("alice") is True
        assert sessions.end_session("alice") is False
        assert sessions.has_session("alice") is False
        assert mind.loaded is True

    def test_cleanup_stale_sessions(self, sessions, clock):
        """Test sessions idle beyond the TTL are removed."""
        sessions.get_session("old")
        clock.advance(hours=5)
        sessions.get_session("fresh")
        clock.advance(hours=4)

        assert sessions.cleanup_stale_sessions() == 1
        assert sessions.has_session("old") is False
        assert sessions.has_session("fresh") is True

    def test_ttl_boundary_is_kept(self, sessions, clock):
        """Test a session idle for exactly the TTL survives."""
        sessions.get_session("edge")
        clock.advance(hours=8)
        assert sessions.cleanup_stale_sessions() == 0

    def test_destroy_all(self, sessions, mind):
        """Test destroy_all ends sessions and resets the mind."""
        sessions.get_session("a")
        sessions.destroy_all()
        assert sessions.session_count == 0
        assert mind.loaded is False

    def test_stats(self, sessions):
        """Test the stats report."""
        sessions.get_session("a")
        stats = sessions.get_stats()
        assert stats == {"active_sessions": 1, "shared_mind_loaded": True, "ttl_hours": 8.0}

    def test_to_dict(self, sessions):
        """Test the session summary."""
        data = sessions.get_session("alice").to_dict()
        assert data["session_id"] == "alice"
        assert data["mind_loaded"] is True
        assert data["created_at"] == "2024-01-01T00:00:00+00:00"

    def test_mind_failure_creates_no_session(self, store, compiler, tmp_path, telemetry, clock):
        """Test a failed mind load does not register a session."""
        artifacts = ArtifactStore("operations_mind", tmp_path / "nowhere", telemetry=telemetry)
        loader = MindLoader(store, compiler, artifacts, telemetry=telemetry, environ={})
        manager = SessionManager(loader, telemetry=telemetry, clock=clock)
        with pytest.raises(MindLoadError):
            manager.get_session("alice")
        assert manager.session_count == 0
        store.unwatch()

    def test_sweeper(self, sessions, clock):
        """Test the background sweeper removes stale sessions."""
        sessions.get_session("old")
        clock.advance(hours=9)

        async def scenario():
            task = asyncio.create_task(sessions.run_sweeper(interval=0.01))
            for _ in range(100):
                if sessions.session_count == 0:
                    break
                await asyncio.sleep(0.01)
            sessions.stop_sweeper()
            await asyncio.wait_for(task, timeout=1)

        asyncio.run(scenario())
        assert sessions.session_count == 0
