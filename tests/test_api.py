"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

import redline.main
from redline.main import app, parser


class TestParseAPI:
    """Test /v1 endpoints."""

    @pytest.fixture
    def client(self) -> TestClient:
        return TestClient(app)

    def test_health(self, client: TestClient) -> None:
        """Health check reports the version."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_parse_success(self, client: TestClient) -> None:
        """Segments come back in wire form."""
        response = client.post(
            "/v1/parse",
            json={"text": '["Hello ", {"original":"teh","replacement":"the","reason":"typo"}, " world."]'},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "success"
        assert body["stage"] == "validation"
        assert body["segments"] == [
            "Hello ",
            {"original": "teh", "replacement": "the", "reason": "typo"},
            " world.",
        ]
        assert body["prognosis"] is None

    def test_parse_fallback_includes_prognosis(self, client: TestClient) -> None:
        """Recovered parses report how they were recovered."""
        response = client.post(
            "/v1/parse",
            json={"text": '[ "a", {original:"x",replacement:"y",reason:"z"} ]'},
        )

        body = response.json()
        assert body["outcome"] == "fallback"
        assert body["repairs_applied"] == ["quoted_keys"]
        assert body["prognosis"]["recommended_approach"] == "json_repair"

    def test_parse_failure(self, client: TestClient) -> None:
        """Failures return the tiered error without debug info."""
        response = client.post("/v1/parse", json={"text": ""})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["error_type"] == "empty_response"
        assert error["user_message"].startswith("The AI returned an empty response")
        assert "debug" not in error

    def test_parse_failure_debug(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        """Debug mode adds the debug tier."""
        monkeypatch.setattr(redline.main.settings, "debug", True)

        response = client.post("/v1/parse", json={"text": '"abc'})

        error = response.json()["error"]
        assert error["error_type"] == "unclosed_string"
        assert error["debug"]["raw_response_preview"] == '"abc'

    def test_telemetry(self, client: TestClient) -> None:
        """Telemetry reflects calls made through the API."""
        before = parser.get_telemetry().total_attempts

        client.post("/v1/parse", json={"text": '["a"]'})
        response = client.get("/v1/telemetry")

        assert response.status_code == 200
        body = response.json()
        assert body["total_attempts"] == before + 1
        assert isinstance(body["success_rate"], str)
