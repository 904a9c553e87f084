"""Assistant Chat - browser chat UI for a hosted Azure OpenAI assistant.

Combines FastAPI for the chat endpoint, httpx for the gateway calls,
NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - api: HTTP endpoints
    - chat: Turn orchestration with bounded run polling
    - gateway: Azure OpenAI Assistants client and configuration
    - threads: Per-caller thread affinity
    - ui: Web interface for chat interactions
    - models: Resource and request/response schemas
"""

__version__ = "0.1.0"
