"""
Security tests for input validation.

Tests protection against:
- Script injection in dish names
- Disguised or oversized uploads
- Path traversal in upload file names
"""
import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from foodprint.main import app
from foodprint.services.ai_service import ClaudeImageTextGenerator
from foodprint.services.estimate_service import EstimateService
from foodprint.services.image_service import image_service


@pytest.mark.security
class TestDishNameInjection:
    """Tests for blocked patterns in dish names."""

    @pytest.mark.parametrize(
        "dish",
        [
            "<script>alert('xss')</script>",
            "<SCRIPT SRC=http://evil.example/x.js>",
            "javascript:alert(1)",
            "JavaScript:void(0)",
            "data:text/html;base64,PHNjcmlwdD4=",
            "vbscript:msgbox(1)",
            "Pizza <script>steal()</script>",
        ],
    )
    def test_blocked_patterns_rejected(
        self, client: TestClient, mock_text_generator, dish
    ):
        response = client.post("/api/estimate", json={"dish": dish})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["validationErrors"]["dish"] == ["Dish name contains invalid characters"]
        assert mock_text_generator.calls == []

    @pytest.mark.parametrize(
        "dish",
        [
            "'; DROP TABLE dishes; --",
            "Mac & Cheese",
            "Crème brûlée",
            "Pão de queijo",
        ],
    )
    def test_ordinary_punctuation_allowed(self, client: TestClient, dish):
        response = client.post("/api/estimate", json={"dish": dish})

        assert response.status_code == 200
        assert response.json()["dish"] == dish

    def test_non_string_dish_rejected(self, client: TestClient):
        response = client.post("/api/estimate", json={"dish": {"$ne": None}})

        assert response.status_code == 400


@pytest.mark.security
class TestUploadValidation:
    """Tests for hostile uploads."""

    def test_executable_with_image_content_type(self, client: TestClient, mock_vision_generator):
        response = client.post(
            "/api/estimate/image",
            files={"image": ("payload.exe", b"MZ\x90\x00", "image/jpeg")},
        )

        assert response.status_code == 400
        assert mock_vision_generator.calls == []

    def test_html_with_image_extension(self, client: TestClient):
        response = client.post(
            "/api/estimate/image",
            files={"image": ("photo.jpg", b"<html></html>", "text/html")},
        )

        assert response.status_code == 400

    def test_svg_rejected(self, client: TestClient):
        response = client.post(
            "/api/estimate/image",
            files={"image": ("dish.svg", b"<svg onload=alert(1)>", "image/svg+xml")},
        )

        assert response.status_code == 400

    def test_oversized_upload(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(image_service, "max_size_bytes", 16)

        response = client.post(
            "/api/estimate/image",
            files={"image": ("big.jpg", b"\xff" * 17, "image/jpeg")},
        )

        assert response.status_code == 400
        assert "smaller than" in response.json()["message"]

    def test_path_traversal_not_reflected(
        self, client: TestClient, mock_vision_generator
    ):
        mock_vision_generator.set_response("")

        response = client.post(
            "/api/estimate/image",
            files={"image": ("../../etc/passwd.jpg", b"\xff\xd8", "image/jpeg")},
        )

        assert response.status_code == 200
        assert response.json()["dish"] == "passwd"


@pytest.fixture
def claude_vision_client(monkeypatch, mock_text_generator):
    """TestClient whose image path runs the real Claude generator on a mocked client."""
    anthropic_client = MagicMock()
    anthropic_client.messages.create = AsyncMock()
    service = EstimateService(
        text_generator=mock_text_generator,
        vision_generator=ClaudeImageTextGenerator(client=anthropic_client),
        fallback_on_generation_error=True,
    )
    monkeypatch.setattr("foodprint.api.estimate.estimate_service", service)

    with TestClient(app) as test_client:
        yield test_client, anthropic_client


@pytest.mark.security
class TestDecompressionBomb:
    """Tests for images whose pixel count exceeds Pillow's limit."""

    def test_rejected_as_validation_error(self, claude_vision_client, monkeypatch):
        test_client, anthropic_client = claude_vision_client
        buffer = io.BytesIO()
        Image.new("RGB", (400, 200)).save(buffer, format="PNG")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        response = test_client.post(
            "/api/estimate/image",
            files={"image": ("huge.png", buffer.getvalue(), "image/png")},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["validationErrors"] == {"image": ["Image dimensions are too large"]}
        anthropic_client.messages.create.assert_not_called()
