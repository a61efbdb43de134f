"""Tests for the HTTP API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hybridops import services as services_module
from hybridops.configuration import BACK_CASTING_ID, default_config
from hybridops.main import create_app
from hybridops.services import build_services, set_services


# =============================================================================
# Test Client Setup
# =============================================================================


@pytest.fixture
def services(settings):
    """Fresh service graph isolated from the process environment."""
    original = services_module._services
    built = build_services(settings, environ={})
    set_services(built)
    yield built
    built.shutdown()
    set_services(original)


@pytest.fixture
def client(services) -> TestClient:
    # no context manager: the lifespan watcher and sweeper are not started
    return TestClient(create_app())


class TestRoot:
    """Test root and health endpoints."""

    def test_root(self, client):
        """Test the endpoint listing."""
        response = client.get("/")
        assert response.status_code == 200
        assert "heuristics" in response.json()["endpoints"]

    def test_health(self, client):
        """Test health reports load state."""
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["mind_loaded"] is False


class TestHeuristicRoutes:
    """Test /heuristics endpoints."""

    def test_list(self, client):
        """Test the built-in heuristics are listed."""
        response = client.get("/heuristics")
        assert response.status_code == 200
        ids = {h["id"] for h in response.json()}
        assert ids == {"PV_BS_001", "PV_PA_001", "PV_PM_001"}

    def test_get_one(self, client):
        """Test metadata for one heuristic."""
        data = client.get(f"/heuristics/{BACK_CASTING_ID}").json()
        assert data["name"] == "Future System Back-Casting"

    def test_get_unknown(self, client):
        """Test an unknown heuristic is a 404."""
        assert client.get("/heuristics/PV_XX_999").status_code == 404

    def test_evaluate(self, client, services):
        """Test evaluation loads the mind and returns camelCase JSON."""
        response = client.post(
            "/heuristics/PV_PM_001/evaluate",
            json={"context": {"frequency": 10, "standardizable": 0.9, "hasGuardrails": False}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["veto"] is True
        assert data["recommendation"] == "ADD_GUARDRAILS_FIRST"
        assert data["readyToAutomate"] is False
        assert services.mind.loaded is True

    def test_evaluate_lenient_defaults(self, client):
        """Test missing inputs default to zero without strict."""
        response = client.post("/heuristics/PV_BS_001/evaluate", json={"context": {}})
        assert response.status_code == 200
        assert response.json()["recommendation"] == "DEFER"

    def test_evaluate_strict(self, client):
        """Test strict mode rejects incomplete input."""
        response = client.post(
            "/heuristics/PV_BS_001/evaluate",
            json={"context": {"marketAlignment": 0.5}, "strict": True},
        )
        assert response.status_code == 422

    def test_evaluate_bad_type(self, client):
        """Test a non-numeric value is a 422 naming the field."""
        response = client.post(
            "/heuristics/PV_PA_001/evaluate",
            json={"context": {"truthfulness": "high"}},
        )
        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "truthfulness"

    def test_evaluate_unknown(self, client):
        """Test evaluating an unknown heuristic is a 404."""
        response = client.post("/heuristics/PV_XX_999/evaluate", json={"context": {}})
        assert response.status_code == 404

    def test_stats(self, client):
        """Test compiler stats after a load."""
        client.post("/mind/load")
        data = client.get("/heuristics/stats").json()
        assert data["compiled_count"] == 3


class TestValidationRoutes:
    """Test /axioms and /gates endpoints."""

    def test_validate_axioms(self, client):
        """Test scoring content with the configured minimum."""
        response = client.post(
            "/axioms/validate",
            json={"content": "o plano é incoerente", "include_report": True},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["veto"] is True
        assert data["recommendation"] == "REJECT_LOW_SCORE"
        assert "AXIOM VALIDATION REPORT" in data["report"]

    def test_validate_axioms_strict(self, client):
        """Test strict mode from the request."""
        data = client.post(
            "/axioms/validate",
            json={"content": "contraditório", "strict": True},
        ).json()
        assert data["recommendation"] == "REJECT_VETO"

    def test_validate_unknown_level(self, client):
        """Test an unknown level is a 422."""
        response = client.post("/axioms/validate", json={"content": "x", "levels": ["cosmic"]})
        assert response.status_code == 422

    def test_history(self, client):
        """Test history lists earlier validations."""
        client.post("/axioms/validate", json={"content": "first"})
        client.post("/axioms/validate", json={"content": "second"})
        data = client.get("/axioms/history", params={"limit": 1}).json()
        assert data["total"] == 2
        assert [e["content"] for e in data["entries"]] == ["second"]

    def test_execute_gate(self, client):
        """Test a checkpoint runs through the gate."""
        response = client.post("/gates/execute", json={
            "phase": {
                "checkpoint": "strategic-alignment",
                "heuristic": "PV_BS_001",
                "criteria": ["Score ≥ 0.8"],
            },
            "context": {"endStateClarity": 0.9, "marketAlignment": 0.3},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["passed"] is True
        assert data["gate"] == "strategic-alignment"

    def test_execute_gate_error(self, client):
        """Test configuration errors come back as results."""
        data = client.post("/gates/execute", json={
            "phase": {"checkpoint": "x", "validator": "spellcheck"},
        }).json()
        assert data["error"] is True
        assert data["recommendation"] == "CHECK_CONFIGURATION"

    def test_execute_gate_skip(self, client):
        """Test a missing phase skips validation."""
        data = client.post("/gates/execute", json={}).json()
        assert data["skipped"] is True


class TestMindRoutes:
    """Test mind, config and session endpoints."""

    def test_load_and_metadata(self, client):
        """Test loading the mind through the API."""
        assert client.get("/mind").json()["loaded"] is False
        response = client.post("/mind/load")
        assert response.status_code == 200
        assert response.json()["config_source"] == "file"
        assert client.get("/mind").json()["sessions"]["shared_mind_loaded"] is True

    def test_config(self, client):
        """Test the active configuration before and after load."""
        before = client.get("/config").json()
        assert before["source"] is None
        assert before["config"] == default_config()

        client.post("/mind/load")
        after = client.get("/config").json()
        assert after["source"] == "file"
        assert after["validation"]["minimum_score"] == 7.0

    def test_reload(self, client, config_path, write_yaml):
        """Test a forced reload picks up a file edit."""
        client.post("/mind/load")
        config = default_config()
        config["validation"]["minimum_score"] = 8.0
        write_yaml(config_path, config)

        data = client.post("/config/reload").json()
        assert data == {"reloaded": True, "config_source": "file"}
        assert client.get("/config").json()["validation"]["minimum_score"] == 8.0

    def test_sessions(self, client):
        """Test opening, touching and ending a session."""
        first = client.post("/sessions/alice").json()
        assert first["request_count"] == 0
        assert first["mind_loaded"] is True
        assert client.post("/sessions/alice").json()["request_count"] == 1

        response = client.delete("/sessions/alice")
        assert response.json() == {"session_id": "alice", "ended": True}
        assert client.delete("/sessions/alice").status_code == 404
        assert client.get("/health").json()["mind_loaded"] is True

    def test_telemetry(self, client):
        """Test the telemetry summary."""
        client.post("/mind/load")
        data = client.get("/telemetry").json()
        assert data["cache"]["misses"] >= 3
        assert isinstance(data["recent_fallbacks"], list)
