"""Chat session state and API submission for the chat page.

Free of NiceGUI imports so the transcript and error handling can be
exercised without a browser.
"""

import json
import os
import uuid
from datetime import datetime
from typing import Any

import httpx

CALLER_COOKIE = "caller_id"

# Longer than the server's polling budget
REQUEST_TIMEOUT_SECONDS = 120.0
ERROR_TEXT_LIMIT = 100
DEFAULT_ERROR = "Failed to send the message. Please try again."


class ChatSubmitError(Exception):
    """Raised when a chat turn cannot produce an assistant reply."""

    pass


class ChatSession:
    """Append-only transcript for one browser tab."""

    def __init__(self, caller_id: str | None = None) -> None:
        self.messages: list[dict] = []
        self.caller_id = caller_id
        self.is_waiting: bool = False

    def add_message(self, role: str, content: str, message_id: str | None = None) -> dict:
        entry = {
            "id": message_id or str(uuid.uuid4()),
            "role": role,
            "content": content,
            "time": datetime.now().strftime("%I:%M %p"),
        }
        self.messages.append(entry)
        return entry

    def add_error(self, error: str) -> dict:
        """Record a failure as a local system entry."""
        return self.add_message("system", f"Error: {error or DEFAULT_ERROR}", f"error-{uuid.uuid4()}")

    def clear(self) -> None:
        self.messages.clear()


def error_message_from_response(response: httpx.Response) -> str:
    """Human-readable error for a non-2xx chat response.

    Prefers the JSON ``error`` field, then the raw body (truncated),
    then the bare status code.
    """
    fallback = f"Server error: {response.status_code}"
    text = response.text

    try:
        data = json.loads(text)
    except ValueError:
        if not text.strip():
            return fallback
        return text if len(text) <= ERROR_TEXT_LIMIT else f"{text[:ERROR_TEXT_LIMIT]}..."

    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        return data["error"]
    return fallback


def reply_from_payload(payload: Any) -> dict:
    """Locate the assistant reply in a successful chat response."""
    if isinstance(payload, dict):
        reply = payload.get("reply")
        if isinstance(reply, dict) and reply.get("role") == "assistant":
            return reply
        for message in payload.get("messages") or []:
            if isinstance(message, dict) and message.get("role") == "assistant":
                return message
    raise ChatSubmitError("No assistant reply found in the response")


def api_base_url() -> str:
    """URL of the chat API, read from the environment at call time.

    ``API_BASE_URL`` wins. Otherwise the API is assumed on localhost at
    ``PORT``, where ``main.py`` serves it.
    """
    configured = os.getenv("API_BASE_URL")
    if configured:
        return configured.rstrip("/")
    return f"http://localhost:{os.getenv('PORT', '8000')}"


async def send_chat_message(
    message: str,
    caller_id: str | None = None,
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Post one message to the chat endpoint and return the assistant reply.

    Args:
        message: User text, sent as the ``message`` form field.
        caller_id: Optional identity sent as the caller cookie.
        base_url: Base URL of the chat API, defaults to ``api_base_url()``.
        transport: Optional httpx transport (tests use ASGI or mock transports).

    Returns:
        The reply message dict (``id``, ``role``, ``content``, ``created_at``).

    Raises:
        ChatSubmitError: On connection failure, error status, or unusable body.
    """
    cookies = {CALLER_COOKIE: caller_id} if caller_id else None

    async with httpx.AsyncClient(
        base_url=base_url or api_base_url(),
        timeout=REQUEST_TIMEOUT_SECONDS,
        transport=transport,
        cookies=cookies,
    ) as client:
        try:
            response = await client.post("/api/chat", data={"message": message})
        except httpx.RequestError as e:
            raise ChatSubmitError(f"Connection failed: {e}") from e

    if not response.is_success:
        raise ChatSubmitError(error_message_from_response(response))

    try:
        payload = response.json()
    except ValueError as e:
        raise ChatSubmitError(
            "The server returned an invalid response format. Please try again."
        ) from e

    return reply_from_payload(payload)
