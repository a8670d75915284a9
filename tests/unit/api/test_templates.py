"""Tests for template validation and publication endpoints."""

from fastapi.testclient import TestClient

from tests.factories import AgentFileFactory


class TestValidateEndpoint:
    """Tests for POST /api/v1/templates/validate."""

    def test_valid_yaml(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/templates/validate",
            content=AgentFileFactory.yaml(),
            headers={"Content-Type": "application/x-yaml"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "yaml"
        assert data["validation"] == {"valid": True, "errors": []}

    def test_invalid_document_reported(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/templates/validate",
            content=AgentFileFactory.json(embedding=""),
        )

        assert response.status_code == 200
        assert response.json()["validation"]["errors"] == ["engine.embedding is required"]

    def test_empty_body(self, client: TestClient) -> None:
        response = client.post("/api/v1/templates/validate", content=b"")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_non_utf8_body(self, client: TestClient) -> None:
        response = client.post("/api/v1/templates/validate", content=b"\xff\xfe\x00")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestPublishEndpoint:
    """Tests for POST /api/v1/templates/publish."""

    def test_publish(self, client: TestClient, version_store) -> None:
        response = client.post("/api/v1/templates/publish", content=AgentFileFactory.json())

        assert response.status_code == 200
        data = response.json()
        assert data["template_id"] == "support-bot"
        assert data["version"] == "1.0.0"
        assert data["is_latest"] is True
        assert data["format"] == "json"
        assert "X-Request-ID" in response.headers

    def test_duplicate_is_conflict(self, client: TestClient) -> None:
        client.post("/api/v1/templates/publish", content=AgentFileFactory.json())

        response = client.post("/api/v1/templates/publish", content=AgentFileFactory.json())

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_VERSION"

    def test_regressive_is_unprocessable(self, client: TestClient) -> None:
        client.post("/api/v1/templates/publish", content=AgentFileFactory.json(version="1.3.0"))

        response = client.post(
            "/api/v1/templates/publish", content=AgentFileFactory.json(version="1.2.0")
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "REGRESSIVE_VERSION"
        assert error["message"] == "Version 1.2.0 is lower than latest 1.3.0"

    def test_invalid_document_carries_errors(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/templates/publish", content=AgentFileFactory.json(system_prompt="")
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["message"] == "Validation failed"
        assert error["details"]["errors"] == ["persona.system_prompt is required"]

    def test_idempotency_key_replay(self, client: TestClient) -> None:
        headers = {"Idempotency-Key": "publish-1"}
        raw = AgentFileFactory.json()
        client.post("/api/v1/templates/publish", content=raw, headers=headers)

        replay = client.post("/api/v1/templates/publish", content=raw, headers=headers)
        reuse = client.post(
            "/api/v1/templates/publish",
            content=AgentFileFactory.json(version="9.0.0"),
            headers=headers,
        )

        assert replay.status_code == 409
        assert replay.json()["error"]["code"] == "IDEMPOTENCY_DUPLICATE"
        assert reuse.status_code == 409
        assert reuse.json()["error"]["code"] == "IDEMPOTENCY_CONFLICT"
