"""Gateway configuration with environment variable loading.

Pydantic-based configuration for the Azure OpenAI Assistants gateway.
Values are read per request, so a missing variable surfaces as an API
error instead of a startup crash.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_API_VERSION = "2024-02-15-preview"
DEFAULT_CALLER_ID = "user-1"

# Checked in this order; the first missing item is reported.
REQUIRED_SETTINGS: tuple[tuple[str, str], ...] = (
    ("API key", "AZURE_OPENAI_API_KEY"),
    ("endpoint", "AZURE_OPENAI_ENDPOINT"),
    ("assistant ID", "AZURE_OPENAI_ASSISTANT_ID"),
)


class MissingConfigError(Exception):
    """Raised when a required gateway setting is absent."""

    def __init__(self, item: str, env_var: str) -> None:
        self.item = item
        self.env_var = env_var
        super().__init__(f"Azure OpenAI {item} is not configured (set {env_var})")


class GatewayConfig(BaseModel):
    """Configuration for the assistant gateway and the chat turn.

    Attributes:
        api_key: Key sent in the ``api-key`` header.
        endpoint: Base URL of the Azure OpenAI resource.
        assistant_id: Assistant that runs are started with.
        api_version: Value of the ``api-version`` query parameter.
        timeout_seconds: HTTP timeout for each gateway call.
        poll_interval_seconds: Delay between run status checks.
        max_poll_attempts: Run status checks before giving up.
        default_caller_id: Caller identity used when the request carries none.
    """

    api_key: str = Field(..., description="Azure OpenAI API key")
    endpoint: str = Field(..., description="Azure OpenAI endpoint base URL")
    assistant_id: str = Field(..., description="Assistant identifier")
    api_version: str = Field(default=DEFAULT_API_VERSION, min_length=1)
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=600.0)
    poll_interval_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    max_poll_attempts: int = Field(default=60, ge=1, le=3600)
    default_caller_id: str = Field(default=DEFAULT_CALLER_ID, min_length=1)

    @field_validator("api_key", "endpoint", "assistant_id")
    @classmethod
    def require_non_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only required values."""
        if not v or not v.strip():
            raise ValueError("value is required and must not be blank")
        return v.strip()

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def get_gateway_config() -> GatewayConfig:
    """Create gateway configuration from environment.

    Returns:
        Configured GatewayConfig instance.

    Raises:
        MissingConfigError: If a required variable is unset or blank.
        ValidationError: If an optional variable holds an invalid value.
    """
    for item, env_var in REQUIRED_SETTINGS:
        if not os.getenv(env_var, "").strip():
            raise MissingConfigError(item, env_var)

    return GatewayConfig(
        api_key=os.environ["AZURE_OPENAI_API_KEY"],
        endpoint=os.environ["AZURE_OPENAI_ENDPOINT"],
        assistant_id=os.environ["AZURE_OPENAI_ASSISTANT_ID"],
        api_version=os.getenv("AZURE_OPENAI_API_VERSION", DEFAULT_API_VERSION),
        timeout_seconds=os.getenv("GATEWAY_TIMEOUT_SECONDS", "30"),
        poll_interval_seconds=os.getenv("CHAT_POLL_INTERVAL_SECONDS", "1.0"),
        max_poll_attempts=os.getenv("CHAT_MAX_POLL_ATTEMPTS", "60"),
        default_caller_id=os.getenv("CHAT_DEFAULT_CALLER_ID", DEFAULT_CALLER_ID),
    )
