"""
Tests for error handling across the application.

Tests graceful handling of:
- Malformed requests and validation failures
- Claude API outages, rate limits and rejections
- Unexpected errors (no internals leaked outside development)
"""
import pytest
from fastapi.testclient import TestClient

from foodprint.config import settings
from foodprint.services.ai_service import (
    GenerationError,
    RateLimitError,
    ServiceUnavailableError,
)


@pytest.fixture
def no_fallback(estimate_service):
    """Surface generator errors to the HTTP layer."""
    estimate_service.fallback_on_generation_error = False
    return estimate_service


@pytest.mark.integration
class TestMalformedRequests:
    """Tests for request validation errors."""

    def test_empty_dish(self, client: TestClient):
        response = client.post("/api/estimate", json={"dish": ""})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["message"] == "Invalid request data"
        assert data["validationErrors"] == {"dish": ["Dish name is required"]}
        assert "timestamp" in data

    def test_whitespace_dish(self, client: TestClient):
        response = client.post("/api/estimate", json={"dish": "    "})

        assert response.status_code == 400
        assert response.json()["validationErrors"]["dish"] == ["Dish name is required"]

    def test_single_character_dish(self, client: TestClient):
        response = client.post("/api/estimate", json={"dish": "a"})

        assert response.status_code == 400
        assert response.json()["validationErrors"]["dish"] == [
            "Dish name must be between 2 and 200 characters"
        ]

    def test_too_long_dish(self, client: TestClient):
        response = client.post("/api/estimate", json={"dish": "x" * 201})

        assert response.status_code == 400

    def test_missing_dish_field(self, client: TestClient):
        response = client.post("/api/estimate", json={})

        assert response.status_code == 400
        assert "dish" in response.json()["validationErrors"]

    def test_missing_body(self, client: TestClient):
        response = client.post("/api/estimate")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_invalid_json(self, client: TestClient):
        response = client.post(
            "/api/estimate",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_validation_error_does_not_call_generator(
        self, client: TestClient, mock_text_generator
    ):
        client.post("/api/estimate", json={"dish": ""})

        assert mock_text_generator.calls == []


@pytest.mark.integration
class TestImageUploadErrors:
    """Tests for invalid image uploads."""

    def test_missing_image(self, client: TestClient, mock_vision_generator):
        response = client.post("/api/estimate/image")

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["validationErrors"] == {
            "image": ["Image file is required and cannot be empty"]
        }
        assert mock_vision_generator.calls == []

    def test_empty_image(self, client: TestClient):
        response = client.post(
            "/api/estimate/image", files={"image": ("empty.jpg", b"", "image/jpeg")}
        )

        assert response.status_code == 400
        assert "image" in response.json()["validationErrors"]

    def test_wrong_content_type(self, client: TestClient):
        response = client.post(
            "/api/estimate/image",
            files={"image": ("menu.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
        assert "Unsupported image format" in response.json()["message"]


@pytest.mark.integration
class TestAIServiceErrors:
    """Tests for generator failures."""

    def test_outage_falls_back_by_default(self, client: TestClient, mock_text_generator):
        mock_text_generator.set_error(ServiceUnavailableError("down"))

        response = client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 200
        data = response.json()
        assert data["metadata"]["analysisMethod"] == "text (fallback)"
        assert data["estimatedCarbonKg"] == pytest.approx(4.05)

    def test_image_outage_falls_back_by_default(
        self, client: TestClient, mock_vision_generator
    ):
        mock_vision_generator.set_error(ServiceUnavailableError("down"))

        response = client.post(
            "/api/estimate/image", files={"image": ("stew.jpg", b"\xff\xd8", "image/jpeg")}
        )

        assert response.status_code == 200
        assert response.json()["metadata"]["analysisMethod"] == "image (fallback)"

    def test_service_unavailable(self, client: TestClient, mock_text_generator, no_fallback):
        mock_text_generator.set_error(ServiceUnavailableError("AI service error"))

        response = client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 503
        assert response.json()["code"] == "SERVICE_UNAVAILABLE"

    def test_rate_limited(self, client: TestClient, mock_text_generator, no_fallback):
        mock_text_generator.set_error(
            RateLimitError("Too many requests, please try again in 1 minute")
        )

        response = client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 429
        data = response.json()
        assert data["code"] == "RATE_LIMITED"
        assert "try again" in data["message"]

    def test_upstream_rejection(self, client: TestClient, mock_text_generator, no_fallback):
        mock_text_generator.set_error(GenerationError("Request error: invalid model"))

        response = client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 502
        assert response.json()["code"] == "UPSTREAM_ERROR"

    def test_image_rate_limited(self, client: TestClient, mock_vision_generator, no_fallback):
        mock_vision_generator.set_error(RateLimitError("slow down"))

        response = client.post(
            "/api/estimate/image", files={"image": ("stew.jpg", b"\xff\xd8", "image/jpeg")}
        )

        assert response.status_code == 429

    def test_timeout(self, client: TestClient, mock_text_generator):
        mock_text_generator.set_error(TimeoutError())

        response = client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 408
        assert response.json()["code"] == "TIMEOUT"

    def test_value_error(self, client: TestClient, mock_text_generator):
        mock_text_generator.set_error(ValueError("unsupported dish"))

        response = client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "BAD_REQUEST"
        assert data["message"] == "unsupported dish"


@pytest.mark.integration
class TestUnexpectedErrors:
    """Tests for the catch-all handler."""

    def test_internal_error_hides_details(
        self, unsafe_client: TestClient, mock_text_generator, monkeypatch
    ):
        monkeypatch.setattr(settings, "environment", "production")
        mock_text_generator.set_error(RuntimeError("database password is hunter2"))

        response = unsafe_client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "INTERNAL_ERROR"
        assert data["message"] == "An unexpected error occurred"
        assert "details" not in data
        assert "hunter2" not in response.text

    def test_internal_error_details_in_development(
        self, unsafe_client: TestClient, mock_text_generator, monkeypatch
    ):
        monkeypatch.setattr(settings, "environment", "development")
        mock_text_generator.set_error(RuntimeError("boom"))

        response = unsafe_client.post("/api/estimate", json={"dish": "Beef Stew"})

        assert response.status_code == 500
        assert response.json()["details"] == "boom"
