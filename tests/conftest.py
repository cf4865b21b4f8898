"""
Test configuration and fixtures for Foodprint.

- TestClient against the real app with the estimate service swapped for one
  wired to mock generators (no API calls)
- Mock generator fixtures configurable per test
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from foodprint.main import app
from foodprint.services.estimate_service import EstimateService
from tests.fixtures.mocks import IMAGE_RESPONSE, MockTextGenerator


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_text_generator() -> MockTextGenerator:
    """Mock dish-name generator; returns a valid rice analysis by default."""
    return MockTextGenerator(model="mock-text-model")


@pytest.fixture
def mock_vision_generator() -> MockTextGenerator:
    """Mock image generator; returns a valid pizza analysis by default."""
    return MockTextGenerator(model="mock-vision-model", response=IMAGE_RESPONSE)


@pytest.fixture
def estimate_service(mock_text_generator, mock_vision_generator) -> EstimateService:
    return EstimateService(
        text_generator=mock_text_generator,
        vision_generator=mock_vision_generator,
        fallback_on_generation_error=True,
    )


# =============================================================================
# TestClient Fixtures
# =============================================================================


@pytest.fixture
def client(monkeypatch, estimate_service) -> Generator[TestClient, None, None]:
    """
    TestClient with the estimate service patched to use mock generators.
    """
    monkeypatch.setattr("foodprint.api.estimate.estimate_service", estimate_service)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def unsafe_client(monkeypatch, estimate_service) -> Generator[TestClient, None, None]:
    """TestClient that returns 500 responses instead of re-raising server errors."""
    monkeypatch.setattr("foodprint.api.estimate.estimate_service", estimate_service)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "security: marks tests as security tests (deselect with '-m not security')",
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
