"""Azure OpenAI Assistants gateway access.

Responsibilities:
    - Configuration loading and validation from the environment
    - Authenticated HTTP calls for threads, messages, runs and assistants
    - Uniform failure values carrying status code and decoded error body

Holds no conversation state; thread affinity lives in ``threads``.
"""

from assistant_chat.gateway.client import (
    AssistantGatewayClient,
    GatewayClientError,
    GatewayFailure,
    GatewayOk,
    GatewayResult,
)
from assistant_chat.gateway.config import GatewayConfig, MissingConfigError, get_gateway_config

__all__ = [
    "AssistantGatewayClient",
    "GatewayClientError",
    "GatewayConfig",
    "GatewayFailure",
    "GatewayOk",
    "GatewayResult",
    "MissingConfigError",
    "get_gateway_config",
]
