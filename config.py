"""
Global Configuration

Shared settings used across all modules.
Module-specific settings are in each module's config.py file.

All settings can be overridden via environment variables or a .env file.
See .env.example for a complete list of configurable variables.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load .env file before any os.getenv() calls
load_dotenv()
from functools import lru_cache

# Try to import tiktoken for accurate token estimation
# For airgapped systems, set TIKTOKEN_CACHE_DIR to a directory containing pre-cached encoding files.
try:
    import tiktoken
    _encoder = tiktoken.get_encoding("cl100k_base")
    TIKTOKEN_AVAILABLE = True
except Exception:
    TIKTOKEN_AVAILABLE = False
    _encoder = None

# =========================
# LLM Provider Configuration
# =========================

OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "gpt-4o-mini")

# Connection settings (seconds / pooled connections)
LLM_CONNECTION_TIMEOUT = int(os.getenv("LLM_CONNECTION_TIMEOUT", "60"))
LLM_CONNECTION_POOL_LIMIT = int(os.getenv("LLM_CONNECTION_POOL_LIMIT", "50"))

# =========================
# Model Context Lengths
# =========================

MODEL_CONTEXT_LENGTHS = {
    "gpt-4o-mini": 128000,
    "gpt-4o": 128000,
    "gpt-4.1-mini": 1047576,
    "gpt-3.5-turbo": 16385,
}

DEFAULT_CONTEXT_LENGTH = 16385  # Fallback for unknown models

# Context usage warning thresholds (percentage)
CONTEXT_WARNING_THRESHOLD = 80
CONTEXT_ERROR_THRESHOLD = 95

# =========================
# Output Encoding
# =========================

OUTPUT_ENCODING_BASE64 = "base64"
OUTPUT_ENCODING_ASCII = "ascii"


# =========================
# Service Settings
# =========================

@dataclass(frozen=True)
class ServiceSettings:
    """
    Read-only configuration handed to the application at construction time.

    Handlers and the translation pipeline receive credentials through this
    object instead of reading the environment, so tests can inject fakes.
    """
    api_key: Optional[str] = None
    client_token: Optional[str] = None
    api_url: str = OPENAI_API_URL
    model: str = DEFAULT_MODEL
    timeout: int = LLM_CONNECTION_TIMEOUT
    pool_limit: int = LLM_CONNECTION_POOL_LIMIT
    output_encoding: str = OUTPUT_ENCODING_BASE64

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        """Build settings from the current process environment."""
        output_encoding = os.getenv("TRANSLATION_OUTPUT_ENCODING", OUTPUT_ENCODING_BASE64).strip().lower()
        if output_encoding not in (OUTPUT_ENCODING_BASE64, OUTPUT_ENCODING_ASCII):
            output_encoding = OUTPUT_ENCODING_BASE64

        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or None,
            client_token=os.getenv("CLIENT_TOKEN") or None,
            api_url=os.getenv("OPENAI_API_URL", OPENAI_API_URL),
            model=os.getenv("DEFAULT_MODEL", DEFAULT_MODEL),
            timeout=int(os.getenv("LLM_CONNECTION_TIMEOUT", str(LLM_CONNECTION_TIMEOUT))),
            pool_limit=int(os.getenv("LLM_CONNECTION_POOL_LIMIT", str(LLM_CONNECTION_POOL_LIMIT))),
            output_encoding=output_encoding,
        )


# =========================
# Utility Functions
# =========================

@lru_cache(maxsize=32)
def get_model_context_length(model: str) -> int:
    """Get context length for a model (cached)."""
    return MODEL_CONTEXT_LENGTHS.get(model, DEFAULT_CONTEXT_LENGTH)


def estimate_tokens(text: str) -> int:
    """
    Estimate token count using tiktoken if available, otherwise fallback to char-based estimation.

    tiktoken provides accurate token counts compatible with modern LLMs.
    Fallback uses ~4 chars per token approximation.
    """
    if TIKTOKEN_AVAILABLE and _encoder is not None:
        # Special-token markers in user text are counted as plain text
        return len(_encoder.encode(text, disallowed_special=()))
    # Fallback: ~4 chars per token (less accurate)
    return len(text) // 4
