"""
Integration Tests for the HTTP API

Exercises the FastAPI application with the lifespan running and an
in-memory escalation backend.
"""

from fastapi.testclient import TestClient

from crisisguard.services.safety.escalation_backend import InMemoryEscalationBackend

ANALYZE_URL = "/api/v1/crisis/analyze"
ESCALATIONS_URL = "/api/v1/crisis/escalations"


def _escalate(client: TestClient) -> str:
    response = client.post(
        ANALYZE_URL,
        json={"text": "I'm going to kill myself tonight", "user_id": "u1"},
    )
    return response.json()["escalation_workflow"]["escalation_id"]


class TestAnalyzeEndpoint:
    """Tests for POST /crisis/analyze."""

    def test_emergency(self, client: TestClient) -> None:
        response = client.post(
            ANALYZE_URL,
            json={"text": "I'm going to kill myself tonight", "user_id": "u1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["overall_severity"] == "emergency"
        assert body["emergency_services_required"] is True
        assert body["escalation_workflow"]["escalation_initiated"] is True
        assert body["escalation_workflow"]["recommended_tier"] == "emergency-services"
        assert body["intervention_recommendations"][0]["type"] == "immediate"

    def test_benign(self, client: TestClient) -> None:
        response = client.post(ANALYZE_URL, json={"text": "I'm feeling a bit stressed about work"})

        body = response.json()
        assert body["overall_severity"] == "none"
        assert body["escalation_workflow"] is None

    def test_empty_text(self, client: TestClient) -> None:
        response = client.post(ANALYZE_URL, json={"text": ""})

        assert response.status_code == 200
        assert response.json()["has_crisis_indicators"] is False

    def test_missing_text(self, client: TestClient) -> None:
        response = client.post(ANALYZE_URL, json={"user_id": "u1"})

        assert response.status_code == 422

    def test_oversized_text_is_analyzed(self, client: TestClient) -> None:
        """Test long input is truncated and analyzed instead of rejected."""
        preamble = "I have been struggling for a long time. " * 600
        text = preamble + "I'm going to kill myself tonight"

        response = client.post(ANALYZE_URL, json={"text": text, "user_id": "u1"})

        assert response.status_code == 200
        body = response.json()
        assert body["overall_severity"] == "emergency"
        assert "input truncated; review manually" in body["analysis_metadata"]["flagged_concerns"]

    def test_backend_failure_in_body(
        self,
        client: TestClient,
        backend: InMemoryEscalationBackend,
    ) -> None:
        """Test escalation failures never surface as an HTTP error."""
        from crisisguard.domain.exceptions import BackendUnavailableError

        backend.fail_next(BackendUnavailableError(), BackendUnavailableError())

        response = client.post(
            ANALYZE_URL,
            json={"text": "I'm going to kill myself tonight", "user_id": "u1"},
        )

        assert response.status_code == 200
        workflow = response.json()["escalation_workflow"]
        assert workflow["escalation_initiated"] is False
        assert workflow["escalation_error"] == "Escalation backend unavailable"

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.post(
            ANALYZE_URL,
            json={"text": "hello"},
            headers={"X-Correlation-ID": "corr-123"},
        )

        assert response.headers["X-Correlation-ID"] == "corr-123"


class TestEscalationEndpoints:
    """Tests for escalation tracking."""

    def test_get_escalation(self, client: TestClient) -> None:
        escalation_id = _escalate(client)

        response = client.get(f"{ESCALATIONS_URL}/{escalation_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "initiated"
        assert body["responder_type"] == "medical-professional"
        assert body["response_targets_ms"]["acknowledgment"] == 30_000

    def test_unknown_escalation(self, client: TestClient) -> None:
        response = client.get(f"{ESCALATIONS_URL}/esc_missing")

        assert response.status_code == 404

    def test_update_status(self, client: TestClient) -> None:
        escalation_id = _escalate(client)

        response = client.patch(
            f"{ESCALATIONS_URL}/{escalation_id}",
            json={"status": "responder-assigned", "responder_id": "r1", "note": "On call"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["escalation"]["status"] == "responder-assigned"
        assert body["escalation"]["responder_id"] == "r1"
        assert body["escalation"]["notes"] == ["On call"]
        assert body["follow_up"] is None

    def test_escalate_further(self, client: TestClient) -> None:
        escalation_id = _escalate(client)

        response = client.patch(
            f"{ESCALATIONS_URL}/{escalation_id}",
            json={"status": "escalated-further"},
        )

        follow_up = response.json()["follow_up"]
        assert follow_up["escalation_initiated"] is True
        assert follow_up["escalation_id"] != escalation_id

    def test_illegal_transition(self, client: TestClient) -> None:
        escalation_id = _escalate(client)
        client.patch(f"{ESCALATIONS_URL}/{escalation_id}", json={"status": "resolved"})

        response = client.patch(
            f"{ESCALATIONS_URL}/{escalation_id}",
            json={"status": "in-progress"},
        )

        assert response.status_code == 409

    def test_unknown_status_value(self, client: TestClient) -> None:
        escalation_id = _escalate(client)

        response = client.patch(f"{ESCALATIONS_URL}/{escalation_id}", json={"status": "paused"})

        assert response.status_code == 422

    def test_metrics(self, client: TestClient) -> None:
        _escalate(client)

        response = client.get(f"{ESCALATIONS_URL}/metrics")

        body = response.json()
        assert body["total_escalations"] == 1
        assert body["active_escalations"] == 1
        assert body["common_triggers"] == ["suicide-attempt"]


class TestContactsEndpoint:

    def test_contacts(self, client: TestClient) -> None:
        response = client.get("/api/v1/crisis/contacts", params={"location": "US"})

        assert response.status_code == 200
        assert [c["contact_id"] for c in response.json()][0] == "emergency-911"

    def test_unknown_location(self, client: TestClient) -> None:
        response = client.get("/api/v1/crisis/contacts", params={"location": "Atlantis"})

        assert response.json() == []


class TestHealthEndpoints:
    """Tests for health and metrics endpoints."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client: TestClient) -> None:
        body = client.get("/api/v1/health/ready").json()

        assert body["ready"] is True
        assert body["components"] == {
            "analysis_service": True,
            "statistical_scorer": True,
            "escalation_backend": True,
        }

    def test_live(self, client: TestClient) -> None:
        assert client.get("/api/v1/health/live").json()["status"] == "alive"

    def test_prometheus_metrics(self, client: TestClient) -> None:
        client.post(ANALYZE_URL, json={"text": "hello"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "crisisguard_analyses_total" in response.text

    def test_root(self, client: TestClient) -> None:
        assert client.get("/").json()["status"] == "operational"
