"""Pytest fixtures and shared test configuration.

Fixtures:
    - gateway_env: Complete gateway configuration in the environment
    - gateway_config: GatewayConfig built from explicit values
    - fake_gateway: In-memory Assistants API served via MockTransport
    - app: Fresh FastAPI app wired to the fake gateway
    - async_client: HTTPX client for API testing
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from assistant_chat.api.app import create_app
from assistant_chat.api.chat import get_client_factory
from assistant_chat.gateway.client import AssistantGatewayClient
from assistant_chat.gateway.config import GatewayConfig
from tests.fake_gateway import FakeGateway

TEST_ENDPOINT = "https://test-resource.openai.azure.com"
TEST_API_KEY = "test-api-key"
TEST_ASSISTANT_ID = "asst_test123"


@pytest.fixture
def gateway_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set every gateway variable, with zero-delay polling."""
    monkeypatch.setenv("AZURE_OPENAI_API_KEY", TEST_API_KEY)
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", TEST_ENDPOINT)
    monkeypatch.setenv("AZURE_OPENAI_ASSISTANT_ID", TEST_ASSISTANT_ID)
    monkeypatch.setenv("CHAT_POLL_INTERVAL_SECONDS", "0")
    monkeypatch.delenv("AZURE_OPENAI_API_VERSION", raising=False)
    monkeypatch.delenv("CHAT_MAX_POLL_ATTEMPTS", raising=False)
    monkeypatch.delenv("CHAT_DEFAULT_CALLER_ID", raising=False)


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        api_key=TEST_API_KEY,
        endpoint=TEST_ENDPOINT,
        assistant_id=TEST_ASSISTANT_ID,
        poll_interval_seconds=0.0,
    )


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def app(fake_gateway: FakeGateway, gateway_env: None) -> FastAPI:
    """Application whose gateway calls go to ``fake_gateway``."""
    application = create_app()
    application.dependency_overrides[get_client_factory] = lambda: (
        lambda config: AssistantGatewayClient(config, transport=fake_gateway.transport())
    )
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
