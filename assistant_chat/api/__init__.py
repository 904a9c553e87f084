"""FastAPI endpoints for the assistant chat.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: One chat turn against the hosted assistant
    - GET /api/assistant: Metadata of the configured assistant
"""

from assistant_chat.api.app import app, create_app

__all__ = ["app", "create_app"]
