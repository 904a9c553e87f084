"""Per-caller thread affinity for conversation continuity."""

from assistant_chat.threads.store import InMemoryThreadStore, ThreadAffinityStore

__all__ = ["InMemoryThreadStore", "ThreadAffinityStore"]
