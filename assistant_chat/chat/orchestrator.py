"""Chat turn orchestration against the assistant gateway.

A turn is a linear sequence of gateway calls:

    RESOLVE_THREAD -> SEND_MESSAGE -> START_RUN -> POLL_RUN -> FETCH_REPLY -> DONE

POLL_RUN repeats at a fixed interval until the run reaches a terminal
status or the attempt budget runs out. The first failing step ends the turn
with a ``ChatTurnFailure`` naming the externally visible error kind; there
are no partial results and no resumption.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from pydantic import BaseModel, Field

from assistant_chat.gateway.client import AssistantGatewayClient, GatewayFailure
from assistant_chat.models import Message, MessageRole, Run, RunStatus
from assistant_chat.models.schemas import ErrorKind
from assistant_chat.threads.store import ThreadAffinityStore

logger = logging.getLogger(__name__)

# Log run progress every N status checks
_PROGRESS_LOG_EVERY = 10


class TurnState(str, Enum):
    """Steps of a chat turn."""

    RESOLVE_THREAD = "resolve_thread"
    SEND_MESSAGE = "send_message"
    START_RUN = "start_run"
    POLL_RUN = "poll_run"
    FETCH_REPLY = "fetch_reply"
    DONE = "done"


class PollingPolicy(BaseModel):
    """How long to wait for a run.

    Attributes:
        interval_seconds: Delay between status checks.
        max_attempts: Status checks before the turn times out.
    """

    interval_seconds: float = Field(default=1.0, ge=0.0)
    max_attempts: int = Field(default=60, ge=1)


class ChatTurn(BaseModel):
    """Result of a completed turn."""

    thread_id: str
    run_id: str
    reply: Message
    messages: list[Message]


class ChatTurnFailure(BaseModel):
    """A turn that ended in error.

    Attributes:
        kind: Externally visible failure kind.
        message: Description including upstream detail when available.
        state: Step the turn was in when it failed.
    """

    kind: ErrorKind
    message: str
    state: TurnState

    @property
    def status_code(self) -> int:
        return self.kind.status_code


def latest_assistant_message(messages: list[Message]) -> Message | None:
    """Most recent assistant message, without reordering the input.

    Ties on ``created_at`` go to the first one in gateway order.
    """
    replies = [m for m in messages if m.role == MessageRole.ASSISTANT]
    if not replies:
        return None
    return max(replies, key=lambda m: m.created_at)


class ChatOrchestrator:
    """Runs one chat turn at a time for a caller."""

    def __init__(
        self,
        client: AssistantGatewayClient,
        store: ThreadAffinityStore,
        polling: PollingPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._store = store
        self._polling = polling or PollingPolicy()
        self._sleep = sleep

    def _fail(self, kind: ErrorKind, state: TurnState, message: str) -> ChatTurnFailure:
        if kind is ErrorKind.RUN_TIMEOUT:
            logger.warning(message)
        else:
            logger.error(message)
        return ChatTurnFailure(kind=kind, message=message, state=state)

    async def run_turn(self, caller_id: str, message: str) -> ChatTurn | ChatTurnFailure:
        """Send ``message`` for ``caller_id`` and wait for the assistant's reply.

        Args:
            caller_id: Identity used for thread affinity.
            message: User text, forwarded unmodified.

        Returns:
            ChatTurn on success, ChatTurnFailure otherwise.
        """
        thread_id = await self._resolve_thread(caller_id)
        if isinstance(thread_id, ChatTurnFailure):
            return thread_id

        logger.info(f"Sending message to thread {thread_id}: {message[:100]}")
        sent = await self._client.add_message(thread_id, message)
        if isinstance(sent, GatewayFailure):
            return self._fail(
                ErrorKind.MESSAGE_SUBMISSION_FAILURE,
                TurnState.SEND_MESSAGE,
                f"Failed to add message to thread: {sent}",
            )

        started = await self._client.start_run(thread_id)
        if isinstance(started, GatewayFailure):
            return self._fail(
                ErrorKind.RUN_START_FAILURE,
                TurnState.START_RUN,
                f"Failed to start run: {started}",
            )

        run = await self._poll_run(thread_id, started.value.id)
        if isinstance(run, ChatTurnFailure):
            return run

        return await self._fetch_reply(thread_id, run.id)

    async def _resolve_thread(self, caller_id: str) -> str | ChatTurnFailure:
        async with self._store.lock(caller_id):
            thread_id = await self._store.get(caller_id)
            if thread_id is not None:
                logger.debug(f"Reusing thread {thread_id} for caller {caller_id}")
                return thread_id

            created = await self._client.create_thread()
            if isinstance(created, GatewayFailure):
                return self._fail(
                    ErrorKind.THREAD_CREATION_FAILURE,
                    TurnState.RESOLVE_THREAD,
                    f"Failed to create conversation thread: {created}",
                )

            await self._store.set(caller_id, created.value.id)
            logger.info(f"Created thread {created.value.id} for caller {caller_id}")
            return created.value.id

    async def _poll_run(self, thread_id: str, run_id: str) -> Run | ChatTurnFailure:
        max_attempts = self._polling.max_attempts
        last_status = RunStatus.QUEUED.value

        for attempt in range(1, max_attempts + 1):
            result = await self._client.get_run_status(thread_id, run_id)
            if isinstance(result, GatewayFailure):
                return self._fail(
                    ErrorKind.RUN_STATUS_CHECK_FAILURE,
                    TurnState.POLL_RUN,
                    f"Failed to check run status: {result}",
                )

            run = result.value
            if run.is_terminal:
                return self._check_terminal_run(run)

            last_status = run.status
            if attempt % _PROGRESS_LOG_EVERY == 0:
                logger.info(f"Run {run_id} status after {attempt} checks: {run.status}")
            if attempt < max_attempts:
                await self._sleep(self._polling.interval_seconds)

        return self._fail(
            ErrorKind.RUN_TIMEOUT,
            TurnState.POLL_RUN,
            f"Processing timed out: run {run_id} still '{last_status}' "
            f"after {max_attempts} status checks",
        )

    def _check_terminal_run(self, run: Run) -> Run | ChatTurnFailure:
        if run.status == RunStatus.COMPLETED.value:
            return run

        if run.status == RunStatus.FAILED.value:
            reason = (run.last_error.message if run.last_error else None) or "unknown error"
            return self._fail(ErrorKind.RUN_FAILED, TurnState.POLL_RUN, f"Run failed: {reason}")

        return self._fail(ErrorKind.RUN_CANCELLED, TurnState.POLL_RUN, "The run was cancelled")

    async def _fetch_reply(self, thread_id: str, run_id: str) -> ChatTurn | ChatTurnFailure:
        listed = await self._client.list_messages(thread_id)
        if isinstance(listed, GatewayFailure):
            return self._fail(
                ErrorKind.REPLY_FETCH_FAILURE,
                TurnState.FETCH_REPLY,
                f"Failed to retrieve messages: {listed}",
            )

        messages = listed.value
        reply = latest_assistant_message(messages)
        if reply is None:
            return self._fail(
                ErrorKind.REPLY_FETCH_FAILURE,
                TurnState.FETCH_REPLY,
                f"No assistant reply found in thread {thread_id} after run {run_id} completed",
            )

        logger.info(f"Run {run_id} completed with reply {reply.id}")
        return ChatTurn(thread_id=thread_id, run_id=run_id, reply=reply, messages=messages)
