"""Async HTTP client for the Azure OpenAI Assistants gateway.

Wraps the thread, message, and run resources behind one httpx client that
carries the ``api-key`` header and the ``api-version`` query parameter.

Every operation returns an explicit result instead of raising:
``GatewayOk`` with the parsed resource, or ``GatewayFailure`` with the HTTP
status and the decoded error body. Nothing is retried; a failed call is
reported to the caller as-is.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from assistant_chat.gateway.config import GatewayConfig
from assistant_chat.models import Assistant, ConversationThread, Message, Run

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class GatewayClientError(Exception):
    """Raised when the gateway client cannot be constructed."""

    pass


@dataclass(frozen=True)
class GatewayOk(Generic[T]):
    """Successful gateway call."""

    value: T


@dataclass(frozen=True)
class GatewayFailure:
    """Failed gateway call.

    Attributes:
        operation: Name of the operation that failed.
        detail: Decoded JSON error body, raw response text, or transport error.
        status_code: HTTP status, or None when no usable response arrived.
    """

    operation: str
    detail: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return f"Azure OpenAI API error: {self.detail}"
        return f"Azure OpenAI API error ({self.status_code}): {self.detail}"


GatewayResult = GatewayOk[T] | GatewayFailure


class _MessageList(BaseModel):
    data: list[Message]


def _decode_error_detail(response: httpx.Response) -> str:
    """Structured JSON error if decodable, else the raw body."""
    try:
        return json.dumps(response.json())
    except ValueError:
        return response.text


class AssistantGatewayClient:
    """Client for the five chat operations of the assistant gateway.

    Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        config: GatewayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Gateway configuration.
            transport: Optional httpx transport (tests pass a MockTransport).

        Raises:
            GatewayClientError: If the endpoint is not an absolute http(s) URL.
        """
        try:
            url = httpx.URL(config.endpoint)
        except httpx.InvalidURL as e:
            raise GatewayClientError(f"Invalid endpoint URL: {e}") from e

        if url.scheme not in ("http", "https") or not url.host:
            raise GatewayClientError(
                f"Endpoint must be an absolute http(s) URL, got {config.endpoint!r}"
            )

        self._config = config
        self._http = httpx.AsyncClient(
            base_url=f"{config.endpoint}/openai",
            headers={"api-key": config.api_key, "Content-Type": "application/json"},
            params={"api-version": config.api_version},
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "AssistantGatewayClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> GatewayResult[Any]:
        logger.debug(f"{method} {path} ({operation})")
        try:
            response = await self._http.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Transport error during {operation}: {e!r}")
            return GatewayFailure(operation=operation, detail=str(e) or type(e).__name__)

        if not response.is_success:
            detail = _decode_error_detail(response)
            logger.error(f"Gateway rejected {operation} ({response.status_code}): {detail}")
            return GatewayFailure(
                operation=operation,
                detail=detail,
                status_code=response.status_code,
            )

        try:
            return GatewayOk(response.json())
        except ValueError as e:
            logger.error(f"Undecodable response body for {operation}: {e}")
            return GatewayFailure(operation=operation, detail=f"Invalid JSON in response: {e}")

    @staticmethod
    def _parse(
        operation: str,
        result: GatewayResult[Any],
        model: type[M],
    ) -> GatewayResult[M]:
        if isinstance(result, GatewayFailure):
            return result
        try:
            return GatewayOk(model.model_validate(result.value))
        except ValidationError as e:
            logger.error(f"Unexpected response shape for {operation}: {e}")
            return GatewayFailure(operation=operation, detail=f"Unexpected response shape: {e}")

    async def create_thread(self) -> GatewayResult[ConversationThread]:
        """Create an empty conversation thread."""
        result = await self._request("create thread", "POST", "/threads", {})
        return self._parse("create thread", result, ConversationThread)

    async def add_message(self, thread_id: str, content: str) -> GatewayResult[Message]:
        """Append a user message to a thread.

        Args:
            thread_id: Target thread.
            content: Message text, sent unmodified.
        """
        result = await self._request(
            "add message",
            "POST",
            f"/threads/{thread_id}/messages",
            {"role": "user", "content": content},
        )
        return self._parse("add message", result, Message)

    async def start_run(self, thread_id: str) -> GatewayResult[Run]:
        """Start a run of the configured assistant on a thread."""
        result = await self._request(
            "start run",
            "POST",
            f"/threads/{thread_id}/runs",
            {"assistant_id": self._config.assistant_id},
        )
        return self._parse("start run", result, Run)

    async def get_run_status(self, thread_id: str, run_id: str) -> GatewayResult[Run]:
        """Fetch the current state of a run, including ``last_error`` if it failed."""
        result = await self._request(
            "get run status", "GET", f"/threads/{thread_id}/runs/{run_id}"
        )
        return self._parse("get run status", result, Run)

    async def list_messages(self, thread_id: str) -> GatewayResult[list[Message]]:
        """List a thread's messages in the order the gateway returns them."""
        result = await self._request("list messages", "GET", f"/threads/{thread_id}/messages")
        parsed = self._parse("list messages", result, _MessageList)
        if isinstance(parsed, GatewayFailure):
            return parsed
        return GatewayOk(parsed.value.data)

    async def get_assistant(self) -> GatewayResult[Assistant]:
        """Fetch metadata of the configured assistant."""
        result = await self._request(
            "get assistant", "GET", f"/assistants/{self._config.assistant_id}"
        )
        return self._parse("get assistant", result, Assistant)
