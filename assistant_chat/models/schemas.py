from enum import Enum

from fastapi import status
from pydantic import BaseModel, Field

from assistant_chat.models import Assistant, Message


class ErrorKind(str, Enum):
    """Externally visible failure kinds of the chat API."""

    MALFORMED_REQUEST = "malformed-request"
    MISSING_CONFIG = "missing-config"
    INVALID_CONFIG = "invalid-config"
    CLIENT_INIT_FAILURE = "client-init-failure"
    THREAD_CREATION_FAILURE = "thread-creation-failure"
    MESSAGE_SUBMISSION_FAILURE = "message-submission-failure"
    RUN_START_FAILURE = "run-start-failure"
    RUN_STATUS_CHECK_FAILURE = "run-status-check-failure"
    RUN_FAILED = "run-failed"
    RUN_CANCELLED = "run-cancelled"
    RUN_TIMEOUT = "run-timeout"
    REPLY_FETCH_FAILURE = "reply-fetch-failure"
    ASSISTANT_FETCH_FAILURE = "assistant-fetch-failure"
    UNHANDLED = "unhandled"

    @property
    def status_code(self) -> int:
        if self is ErrorKind.MALFORMED_REQUEST:
            return status.HTTP_400_BAD_REQUEST
        if self is ErrorKind.RUN_TIMEOUT:
            return status.HTTP_408_REQUEST_TIMEOUT
        return status.HTTP_500_INTERNAL_SERVER_ERROR


class ChatResponse(BaseModel):
    """Successful chat turn.

    Attributes:
        messages: Thread history in gateway order.
        reply: The assistant's most recent message.
        thread_id: Thread the turn ran against.
    """

    messages: list[Message]
    reply: Message
    thread_id: str


class ErrorResponse(BaseModel):
    """Error payload returned with a non-2xx status.

    Attributes:
        error: Human-readable description, including upstream detail.
        kind: Machine-readable failure kind.
    """

    error: str = Field(..., min_length=1)
    kind: ErrorKind


class AssistantInfoResponse(BaseModel):
    """Metadata of the assistant the chat is wired to."""

    assistant: Assistant
