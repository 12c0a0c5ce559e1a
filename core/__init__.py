"""
Core Module

Shared infrastructure components for all modules:
- LLM client base class
- Error taxonomy
- Validators
"""

from .llm_client_base import BaseLLMClient, LLMConfig, extract_message_content
from .errors import (
    ServiceError,
    ValidationError,
    AuthError,
    ConfigError,
    UpstreamError,
    TransportError,
    UpstreamTimeoutError,
    OutputDefect,
)
from .validators import (
    validate_token_count,
    validate_text_length,
    parse_json_body,
)
from .auth import (
    extract_bearer_token,
    verify_client_token,
    require_client_token,
)

__all__ = [
    "BaseLLMClient",
    "LLMConfig",
    "extract_message_content",
    "ServiceError",
    "ValidationError",
    "AuthError",
    "ConfigError",
    "UpstreamError",
    "TransportError",
    "UpstreamTimeoutError",
    "OutputDefect",
    "validate_token_count",
    "validate_text_length",
    "parse_json_body",
    "extract_bearer_token",
    "verify_client_token",
    "require_client_token",
]
