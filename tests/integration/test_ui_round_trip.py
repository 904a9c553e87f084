"""Integration tests from the chat page's submission helper to the gateway.

The helper posts to the real app over ASGITransport, so the form encoding,
caller cookie, error decoding and reply extraction are checked end to end.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport

from assistant_chat.ui.session import ChatSession, ChatSubmitError, send_chat_message
from tests.fake_gateway import FakeGateway


class TestSendThroughApp:
    """Round trips through the chat API."""

    @pytest.fixture
    def transport(self, app: FastAPI) -> ASGITransport:
        return ASGITransport(app=app)

    async def test_reply_text_reaches_transcript_unmodified(
        self, transport: ASGITransport, fake_gateway: FakeGateway
    ) -> None:
        fake_gateway.reply = "## Heading\n\n- item *one*\n- item `two`\n\n```\ncode  block\n```"
        session = ChatSession()

        reply = await send_chat_message(
            "Show me markdown", base_url="http://test", transport=transport
        )
        session.add_message("assistant", reply["content"], reply["id"])

        assert session.messages[-1]["content"] == fake_gateway.reply

    async def test_caller_id_keeps_conversation(
        self, transport: ASGITransport, fake_gateway: FakeGateway, app: FastAPI
    ) -> None:
        for text in ("first", "second"):
            await send_chat_message(
                text, caller_id="browser-42", base_url="http://test", transport=transport
            )

        assert fake_gateway.calls("create_thread") == 1
        assert await app.state.thread_store.get("browser-42") == "thread_1"

    async def test_timeout_becomes_submit_error(
        self,
        transport: ASGITransport,
        fake_gateway: FakeGateway,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("CHAT_MAX_POLL_ATTEMPTS", "2")
        fake_gateway.run_statuses = ["queued"]

        with pytest.raises(ChatSubmitError, match="timed out"):
            await send_chat_message("hi", base_url="http://test", transport=transport)

    async def test_missing_config_becomes_submit_error(
        self, transport: ASGITransport, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("AZURE_OPENAI_API_KEY")

        with pytest.raises(ChatSubmitError, match="API key"):
            await send_chat_message("hi", base_url="http://test", transport=transport)
