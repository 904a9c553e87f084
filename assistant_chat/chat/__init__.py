"""Chat turn orchestration.

Sequences thread resolution, message submission, run start, run polling
and reply retrieval into one request/response turn.
"""

from assistant_chat.chat.orchestrator import (
    ChatOrchestrator,
    ChatTurn,
    ChatTurnFailure,
    PollingPolicy,
    TurnState,
    latest_assistant_message,
)

__all__ = [
    "ChatOrchestrator",
    "ChatTurn",
    "ChatTurnFailure",
    "PollingPolicy",
    "TurnState",
    "latest_assistant_message",
]
