"""Integration tests for the chat API endpoints.

Runs the real FastAPI app through httpx ASGITransport. Only the hosted
gateway is replaced, by the in-memory fake behind a MockTransport.
"""

import pytest
import pytest_check as check
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from assistant_chat.api.chat import get_client_factory, get_thread_store
from assistant_chat.gateway.client import AssistantGatewayClient
from tests.fake_gateway import FakeGateway


class TestChatEndpoint:
    """Integration tests for POST /api/chat."""

    async def test_successful_turn(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/chat", data={"message": "What is HTML?"})

        assert response.status_code == 200
        data = response.json()
        check.equal(data["reply"]["role"], "assistant")
        check.equal(data["reply"]["content"], "Hello! How can I help you today?")
        check.equal(data["thread_id"], "thread_1")
        check.equal([m["role"] for m in data["messages"]], ["assistant", "user"])
        check.equal(data["messages"][1]["content"], "What is HTML?")

    async def test_multipart_form_is_accepted(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/chat",
            files={"message": (None, "Hello from multipart")},
        )

        assert response.status_code == 200

    async def test_thread_is_reused_across_turns(
        self, async_client: AsyncClient, fake_gateway: FakeGateway, app: FastAPI
    ) -> None:
        first = await async_client.post("/api/chat", data={"message": "one"})
        second = await async_client.post("/api/chat", data={"message": "two"})

        assert first.json()["thread_id"] == second.json()["thread_id"]
        assert fake_gateway.calls("create_thread") == 1
        assert len(second.json()["messages"]) == 4
        assert await app.state.thread_store.get("user-1") == "thread_1"

    async def test_caller_cookie_selects_thread(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        alice = await async_client.post(
            "/api/chat", data={"message": "hi"}, headers={"Cookie": "caller_id=alice"}
        )
        bob = await async_client.post(
            "/api/chat", data={"message": "hi"}, headers={"Cookie": "caller_id=bob"}
        )

        assert alice.json()["thread_id"] != bob.json()["thread_id"]
        assert fake_gateway.calls("create_thread") == 2

    async def test_reply_round_trips_unmodified(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        fake_gateway.reply = "Tabs\tand\nnewlines\n\n  <div>&amp;</div> ñ 😀"

        response = await async_client.post("/api/chat", data={"message": "format test"})

        assert response.json()["reply"]["content"] == fake_gateway.reply

    async def test_cors_headers_present(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/chat",
            data={"message": "test"},
            headers={"Origin": "http://localhost:3000"},
        )

        assert "access-control-allow-origin" in response.headers

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/chat")

        assert response.status_code == 405


class TestChatRequestErrors:
    """Tests for 400 responses on malformed requests."""

    async def test_missing_message_returns_400(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        response = await async_client.post("/api/chat", data={})

        assert response.status_code == 400
        check.equal(response.json()["kind"], "malformed-request")
        check.equal(fake_gateway.requests, [])

    async def test_blank_message_returns_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/chat", data={"message": "   "})

        assert response.status_code == 400

    async def test_json_body_returns_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/chat", json={"message": "hi"})

        assert response.status_code == 400
        assert "error" in response.json()

    async def test_corrupt_multipart_returns_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/chat",
            content=b"this is not multipart",
            headers={"Content-Type": "multipart/form-data"},
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "malformed-request"


class TestChatConfigErrors:
    """Tests for per-request configuration validation."""

    @pytest.mark.parametrize(
        ("env_var", "item"),
        [
            ("AZURE_OPENAI_API_KEY", "API key"),
            ("AZURE_OPENAI_ENDPOINT", "endpoint"),
            ("AZURE_OPENAI_ASSISTANT_ID", "assistant ID"),
        ],
    )
    async def test_missing_item_is_named(
        self,
        async_client: AsyncClient,
        fake_gateway: FakeGateway,
        monkeypatch: pytest.MonkeyPatch,
        env_var: str,
        item: str,
    ) -> None:
        monkeypatch.delenv(env_var)

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        data = response.json()
        check.equal(data["kind"], "missing-config")
        check.is_in(item, data["error"])
        check.is_in(env_var, data["error"])
        check.equal(fake_gateway.requests, [])

    async def test_invalid_number_is_reported(
        self, async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CHAT_MAX_POLL_ATTEMPTS", "many")

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        assert response.json()["kind"] == "invalid-config"

    async def test_bad_endpoint_is_client_init_failure(
        self, monkeypatch: pytest.MonkeyPatch, gateway_env: None
    ) -> None:
        """Without a factory override the real client rejects the endpoint."""
        from assistant_chat.api.app import create_app

        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "not-a-url")
        transport = ASGITransport(app=create_app())

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        assert response.json()["kind"] == "client-init-failure"


class TestChatGatewayErrors:
    """Tests for gateway failures surfacing through the endpoint."""

    async def test_timeout_returns_408(
        self,
        async_client: AsyncClient,
        fake_gateway: FakeGateway,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("CHAT_MAX_POLL_ATTEMPTS", "5")
        fake_gateway.run_statuses = ["in_progress"]

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 408
        check.equal(response.json()["kind"], "run-timeout")
        check.equal(fake_gateway.calls("get_run_status"), 5)

    async def test_failed_run_returns_500(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        fake_gateway.run_statuses = ["queued", "failed"]
        fake_gateway.last_error = {"code": "rate_limit_exceeded", "message": "Rate limit reached"}

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        check.equal(response.json()["kind"], "run-failed")
        check.equal(response.json()["error"], "Run failed: Rate limit reached")

    async def test_thread_creation_failure(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        fake_gateway.fail("create_thread", 401, {"error": {"code": "401", "message": "Access denied"}})

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        check.equal(response.json()["kind"], "thread-creation-failure")
        check.is_in("Access denied", response.json()["error"])

    async def test_missing_reply_is_reply_fetch_failure(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        fake_gateway.add_reply = False

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        assert response.json()["kind"] == "reply-fetch-failure"

    async def test_unexpected_exception_is_unhandled(
        self, app: FastAPI, async_client: AsyncClient
    ) -> None:
        class BrokenStore:
            def lock(self, caller_id: str):
                raise RuntimeError("store offline")

        app.dependency_overrides[get_thread_store] = lambda: BrokenStore()

        response = await async_client.post("/api/chat", data={"message": "hi"})

        assert response.status_code == 500
        check.equal(response.json()["kind"], "unhandled")
        check.is_in("store offline", response.json()["error"])


class TestAssistantEndpoint:
    """Integration tests for GET /api/assistant."""

    async def test_returns_assistant_metadata(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/assistant")

        assert response.status_code == 200
        assistant = response.json()["assistant"]
        check.equal(assistant["id"], "asst_test123")
        check.equal(assistant["name"], "Dex")

    async def test_gateway_error(
        self, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        fake_gateway.fail("get_assistant", 404, {"error": {"message": "No assistant found"}})

        response = await async_client.get("/api/assistant")

        assert response.status_code == 500
        assert response.json()["kind"] == "assistant-fetch-failure"

    async def test_missing_config(
        self, async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("AZURE_OPENAI_ASSISTANT_ID")

        response = await async_client.get("/api/assistant")

        assert response.status_code == 500
        assert response.json()["kind"] == "missing-config"

    async def test_unexpected_exception_is_unhandled(
        self, app: FastAPI, async_client: AsyncClient, fake_gateway: FakeGateway
    ) -> None:
        class ExplodingClient(AssistantGatewayClient):
            async def get_assistant(self):
                raise RuntimeError("assistant lookup crashed")

        app.dependency_overrides[get_client_factory] = lambda: (
            lambda config: ExplodingClient(config, transport=fake_gateway.transport())
        )

        response = await async_client.get("/api/assistant")

        assert response.status_code == 500
        check.equal(response.json()["kind"], "unhandled")
        check.is_in("assistant lookup crashed", response.json()["error"])


class TestHealth:
    """Tests for GET /health."""

    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "assistant-chat"}
