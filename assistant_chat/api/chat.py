"""Chat endpoint proxying each turn to the hosted assistant.

Handles form parsing, per-request configuration validation, gateway client
construction, and translation of turn failures into ``{error, kind}``
JSON responses.
"""

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from assistant_chat.chat.orchestrator import ChatOrchestrator, ChatTurnFailure, PollingPolicy
from assistant_chat.gateway.client import AssistantGatewayClient, GatewayFailure
from assistant_chat.gateway.config import GatewayConfig, MissingConfigError, get_gateway_config
from assistant_chat.models.schemas import (
    AssistantInfoResponse,
    ChatResponse,
    ErrorKind,
    ErrorResponse,
)
from assistant_chat.threads.store import ThreadAffinityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

# Cookie carrying the caller identity used for thread affinity
CALLER_COOKIE = "caller_id"

ClientFactory = Callable[[GatewayConfig], AssistantGatewayClient]

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed request body"},
    408: {"model": ErrorResponse, "description": "Run did not finish in time"},
    500: {"model": ErrorResponse, "description": "Configuration or gateway error"},
}


class ChatAPIError(Exception):
    """Request-level failure that maps directly to an error response."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)


def get_thread_store(request: Request) -> ThreadAffinityStore:
    """Thread affinity store owned by the application."""
    return request.app.state.thread_store


def get_client_factory() -> ClientFactory:
    """Factory used to build a gateway client per request."""
    return AssistantGatewayClient


def _error_response(kind: ErrorKind, message: str) -> JSONResponse:
    body = ErrorResponse(error=message, kind=kind)
    return JSONResponse(status_code=kind.status_code, content=body.model_dump(mode="json"))


async def _read_message(request: Request) -> str:
    """Extract the ``message`` form field.

    Raises:
        ChatAPIError: 400 if the body cannot be parsed or the field is missing.
    """
    try:
        form = await request.form()
    except Exception as e:
        logger.error(f"Error parsing form data: {e}")
        raise ChatAPIError(ErrorKind.MALFORMED_REQUEST, "Invalid form data") from e

    message = form.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ChatAPIError(ErrorKind.MALFORMED_REQUEST, "The 'message' field is required")

    return message


def _load_config() -> GatewayConfig:
    try:
        return get_gateway_config()
    except MissingConfigError as e:
        logger.error(str(e))
        raise ChatAPIError(ErrorKind.MISSING_CONFIG, str(e)) from e
    except ValidationError as e:
        logger.error(f"Invalid gateway configuration: {e}")
        raise ChatAPIError(
            ErrorKind.INVALID_CONFIG, f"Invalid Azure OpenAI configuration: {e}"
        ) from e


def _create_client(client_factory: ClientFactory, config: GatewayConfig) -> AssistantGatewayClient:
    try:
        return client_factory(config)
    except Exception as e:
        logger.error(f"Error creating Azure OpenAI client: {e}")
        raise ChatAPIError(
            ErrorKind.CLIENT_INIT_FAILURE,
            f"Failed to initialize the Azure OpenAI client: {e}",
        ) from e


@router.post("/chat", response_model=ChatResponse, responses=_ERROR_RESPONSES)
async def chat(
    request: Request,
    store: ThreadAffinityStore = Depends(get_thread_store),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> JSONResponse:
    """Run one chat turn.

    Accepts a form-encoded ``message``, continues the caller's thread (or
    creates one), waits for the assistant run, and returns the thread
    messages with the assistant's reply.

    Returns:
        ChatResponse on success.

    Raises:
        400: Malformed body or missing message.
        408: Run still in progress after the polling budget.
        500: Configuration, client, gateway, or unexpected error.
    """
    try:
        message = await _read_message(request)
        config = _load_config()
        client = _create_client(client_factory, config)

        caller_id = request.cookies.get(CALLER_COOKIE) or config.default_caller_id
        polling = PollingPolicy(
            interval_seconds=config.poll_interval_seconds,
            max_attempts=config.max_poll_attempts,
        )

        async with client:
            orchestrator = ChatOrchestrator(client, store, polling)
            outcome = await orchestrator.run_turn(caller_id, message)

        if isinstance(outcome, ChatTurnFailure):
            return _error_response(outcome.kind, outcome.message)

        body = ChatResponse(
            messages=outcome.messages,
            reply=outcome.reply,
            thread_id=outcome.thread_id,
        )
        return JSONResponse(content=body.model_dump(mode="json"))

    except ChatAPIError as e:
        return _error_response(e.kind, e.message)
    except Exception as e:
        logger.exception(f"Unhandled error in chat API: {e}")
        return _error_response(
            ErrorKind.UNHANDLED,
            f"An unexpected error occurred: {str(e) or 'unknown error'}",
        )


@router.get("/assistant", response_model=AssistantInfoResponse, responses=_ERROR_RESPONSES)
async def get_assistant_info(
    client_factory: ClientFactory = Depends(get_client_factory),
) -> JSONResponse:
    """Return metadata of the configured assistant."""
    try:
        config = _load_config()
        client = _create_client(client_factory, config)
        async with client:
            result = await client.get_assistant()
    except ChatAPIError as e:
        return _error_response(e.kind, e.message)
    except Exception as e:
        logger.exception(f"Unhandled error in assistant API: {e}")
        return _error_response(
            ErrorKind.UNHANDLED,
            f"An unexpected error occurred: {str(e) or 'unknown error'}",
        )

    if isinstance(result, GatewayFailure):
        return _error_response(
            ErrorKind.ASSISTANT_FETCH_FAILURE, f"Failed to get assistant: {result}"
        )

    body = AssistantInfoResponse(assistant=result.value)
    return JSONResponse(content=body.model_dump(mode="json"))
