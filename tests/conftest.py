"""
Shared pytest fixtures for the explain server test suite.

This module provides fixtures that are automatically available to all test files:
- Seeded random sources for reproducible glyph selection
- A formatter built on the default policy
- Explanation services with and without a provider key
- FastAPI TestClient instances wired to those services
"""

import random
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from explain_server.api.server import create_app
from explain_server.config import ModelSettings, ServerConfig
from explain_server.explain.service import ExplanationService
from explain_server.formatting import ExplanationFormatter

# ============================================================================
# FORMATTING FIXTURES
# ============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so decoration glyphs are reproducible."""
    return random.Random(1234)


@pytest.fixture
def formatter(rng: random.Random) -> ExplanationFormatter:
    """Formatter on the built-in policy with a seeded random source."""
    return ExplanationFormatter(rng=rng)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def model_settings() -> ModelSettings:
    """Model settings with a fake key and a local endpoint."""
    return ModelSettings(
        api_key="sk-test",
        base_url="http://provider.test/v1",
        model="test-model",
        timeout_seconds=5.0,
    )


@pytest.fixture
def service(model_settings: ModelSettings, formatter: ExplanationFormatter) -> ExplanationService:
    """Service with credentials; tests patch ``requests.post`` for replies."""
    return ExplanationService(settings=model_settings, formatter=formatter)


@pytest.fixture
def keyless_service(formatter: ExplanationFormatter) -> ExplanationService:
    """Service with no provider key configured."""
    return ExplanationService(settings=ModelSettings(api_key=None), formatter=formatter)


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def test_config() -> ServerConfig:
    """Default configuration, independent of the environment."""
    return ServerConfig()


@pytest.fixture
def test_client(
    test_config: ServerConfig, service: ExplanationService
) -> Generator[TestClient, None, None]:
    """TestClient for an app backed by the credentialed service."""
    with TestClient(create_app(test_config, service=service)) as client:
        yield client


@pytest.fixture
def keyless_client(
    test_config: ServerConfig, keyless_service: ExplanationService
) -> Generator[TestClient, None, None]:
    """TestClient for an app whose service has no provider key."""
    with TestClient(create_app(test_config, service=keyless_service)) as client:
        yield client
