"""Pydantic models for the hosted assistant resources.

Provides type safety and validation for the gateway's JSON payloads.

Models:
    - ConversationThread: Server-side conversation context
    - Run: One assistant-processing request against a thread
    - Message: A single message in a thread (or a local error entry)
    - Assistant: Metadata of the configured assistant
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class MessageRole(str, Enum):
    """Speaker of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class RunStatus(str, Enum):
    """Run statuses known to the gateway.

    The gateway may report values outside this set; ``Run.status`` keeps
    them as plain strings.
    """

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    EXPIRED = "expired"
    INCOMPLETE = "incomplete"


TERMINAL_RUN_STATUSES = frozenset(
    {RunStatus.COMPLETED.value, RunStatus.FAILED.value, RunStatus.CANCELLED.value}
)


class ConversationThread(BaseModel):
    """A conversation thread owned by the gateway.

    Attributes:
        id: Opaque gateway-assigned identifier.
    """

    id: str = Field(..., min_length=1, description="Gateway thread identifier")


class RunError(BaseModel):
    """Error detail embedded in a failed run."""

    code: str | None = None
    message: str | None = None


class Run(BaseModel):
    """A single assistant run against a thread.

    Attributes:
        id: Gateway run identifier.
        thread_id: Thread the run belongs to.
        status: Current status (see RunStatus, other values allowed).
        last_error: Error detail when status is ``failed``.
    """

    id: str = Field(..., min_length=1)
    thread_id: str | None = None
    status: str
    last_error: RunError | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RUN_STATUSES


class Message(BaseModel):
    """A chat message.

    Gateway messages carry a list of content parts; the text parts are
    joined with newlines into ``content`` without any other change.

    Attributes:
        id: Message identifier.
        role: The speaker (user, assistant, or system).
        content: The message text.
        created_at: Unix timestamp in seconds.
    """

    id: str = Field(..., description="Message identifier")
    role: MessageRole = Field(..., description="Message role: 'user', 'assistant', or 'system'")
    content: str = Field("", description="The message content")
    created_at: int = Field(0, description="Creation time as a Unix timestamp")

    @field_validator("content", mode="before")
    @classmethod
    def flatten_content_parts(cls, v: Any) -> Any:
        """Join the text values of gateway content parts."""
        if not isinstance(v, list):
            return v
        texts: list[str] = []
        for part in v:
            if not isinstance(part, dict) or part.get("type") != "text":
                continue
            text = part.get("text")
            if isinstance(text, dict) and isinstance(text.get("value"), str):
                texts.append(text["value"])
            elif isinstance(text, str):
                texts.append(text)
        return "\n".join(texts)

    @field_validator("created_at", mode="before")
    @classmethod
    def default_missing_timestamp(cls, v: Any) -> Any:
        return 0 if v is None else v


class Assistant(BaseModel):
    """Metadata of the configured assistant."""

    id: str
    name: str | None = None
    model: str | None = None
    instructions: str | None = None
