"""
Base LLM Client

Provides shared chat-completion client functionality for all modules.
Each module creates its own instance with its own configuration.

Features:
- OpenAI-compatible /chat/completions endpoint
- Module-specific configuration (URL, model, temperature, etc.)
- Connection pooling per instance
- Comprehensive logging
- Typed errors for provider and transport failures

Usage:
    # In module's llm_client.py
    from core.llm_client_base import BaseLLMClient, LLMConfig

    config = LLMConfig(
        api_url="https://api.openai.com/v1/chat/completions",
        model="gpt-4o-mini",
        task_name="translate"
    )

    client = BaseLLMClient(config)
    response = await client.generate_text_with_logging(messages, api_key=key)
"""

import time
import asyncio
import aiohttp
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from config import get_model_context_length
from logs.logging_config import (
    get_llm_logger,
    log_llm_request,
    log_llm_response,
    log_metrics,
    log_context_usage,
)
from .errors import UpstreamError, TransportError, UpstreamTimeoutError

logger = get_llm_logger()


@dataclass
class LLMConfig:
    """
    Configuration for an LLM client instance.

    Each module creates its own LLMConfig with module-specific settings.
    This allows different modules to use different endpoints, models, etc.

    Example:
        # Translation module - deterministic sampling
        translation_config = LLMConfig(
            model="gpt-4o-mini",
            temperature=0.0,
            task_name="translate"
        )

        # Chat proxy - forwards caller-provided messages untouched
        chat_config = LLMConfig(
            model="gpt-4o-mini",
            task_name="chat"
        )
    """
    # Endpoint settings
    api_url: str = "https://api.openai.com/v1/chat/completions"

    # Model settings
    model: str = "gpt-4o-mini"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    # Connection settings
    timeout: int = 60
    pool_limit: int = 50

    # Logging identifier
    task_name: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "api_url": self.api_url,
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "pool_limit": self.pool_limit,
            "task_name": self.task_name,
        }


def extract_message_content(data: Any) -> str:
    """
    Pull choices[0].message.content out of a completion payload.

    Missing or malformed fields yield an empty string; the caller decides
    whether an empty completion is acceptable.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    if content is None:
        return ""
    return str(content)


class BaseLLMClient:
    """
    Base LLM client for an OpenAI-compatible chat-completion endpoint.

    Each module creates its OWN INSTANCE with its OWN CONFIGURATION.
    The client never retries; retry policy belongs to the caller.

    Features:
    - Connection pooling (per instance)
    - Request/response logging
    - Metrics collection
    - UpstreamError for non-success provider status
    - TransportError / UpstreamTimeoutError when the call cannot complete

    Example:
        config = LLMConfig(model="gpt-4o-mini", temperature=0)
        client = BaseLLMClient(config)

        content = await client.generate_text_with_logging(
            messages=[{"role": "user", "content": "Salom"}],
            api_key=api_key
        )
    """

    def __init__(self, config: LLMConfig):
        """
        Initialize LLM client with module-specific configuration.

        Args:
            config: LLMConfig with URL, model, and other settings
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

        logger.debug(
            f"[{config.task_name.upper()}_LLM] Initialized | "
            f"model={config.model} | url={config.api_url}"
        )

    async def get_session(self) -> aiohttp.ClientSession:
        """
        Get or create aiohttp session for this instance.

        Each BaseLLMClient instance maintains its own session,
        allowing different modules to have independent connection pools.
        """
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            connector = aiohttp.TCPConnector(
                limit=self.config.pool_limit,
                limit_per_host=self.config.pool_limit
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector
            )
            logger.debug(f"[{self.config.task_name.upper()}_LLM] Session created")
        return self._session

    async def close(self):
        """Close this instance's session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
            logger.debug(f"[{self.config.task_name.upper()}_LLM] Session closed")

    def build_payload(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Build the request body, omitting sampling fields that are not set."""
        payload: Dict[str, Any] = {"model": model or self.config.model}

        temp = temperature if temperature is not None else self.config.temperature
        if temp is not None:
            payload["temperature"] = temp

        max_tok = max_tokens if max_tokens is not None else self.config.max_tokens
        if max_tok is not None:
            payload["max_tokens"] = max_tok

        payload["messages"] = messages
        return payload

    async def chat_completion(self, payload: Dict[str, Any], api_key: str) -> Any:
        """
        POST one chat-completion request and return the decoded JSON body.

        Raises:
            UpstreamError: provider answered with a non-2xx status
            UpstreamTimeoutError: the request exceeded config.timeout
            TransportError: the connection failed or the body was not JSON
        """
        url = self.config.api_url
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(
            f"[{self.config.task_name.upper()}_LLM] Calling provider | "
            f"url={url} | model={payload.get('model')}"
        )

        try:
            session = await self.get_session()
            async with session.post(url, json=payload, headers=headers) as r:
                if not 200 <= r.status < 300:
                    body = await r.text()
                    logger.error(
                        f"[{self.config.task_name.upper()}_LLM] Provider error | "
                        f"status={r.status} | model={payload.get('model')}"
                    )
                    raise UpstreamError(r.status, body)
                return await r.json(content_type=None)

        except asyncio.TimeoutError:
            logger.error(
                f"[{self.config.task_name.upper()}_LLM] Provider timeout | model={payload.get('model')}"
            )
            raise UpstreamTimeoutError(
                f"{self.config.task_name.title()} LLM request timed out. Please try again."
            )

        except (aiohttp.ClientError, ValueError) as e:
            logger.error(
                f"[{self.config.task_name.upper()}_LLM] Provider request failed | "
                f"model={payload.get('model')} | error={e}"
            )
            raise TransportError(
                f"{self.config.task_name.title()} LLM service unavailable. Please try again later.",
                detail=str(e)
            )

    async def generate_text_with_logging(
        self,
        messages: List[Dict[str, str]],
        api_key: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        task: Optional[str] = None,
    ) -> str:
        """
        Run one completion with full logging and return the message content.

        Args:
            messages: Chat messages (role/content dicts)
            api_key: Provider API key sent as a bearer token
            model: Override model (uses config.model if not specified)
            temperature: Override temperature (uses config.temperature if not specified)
            max_tokens: Override max_tokens (uses config.max_tokens if not specified)
            task: Override task name for logging (uses config.task_name if not specified)

        Returns:
            Content of the first choice ("" when the provider returned none)
        """
        payload = self.build_payload(messages, model, temperature, max_tokens)
        model_name = payload["model"]
        task_name = task or self.config.task_name
        prompt = "\n\n".join(str(m.get("content", "")) for m in messages)

        # Get context limit for model
        context_limit = get_model_context_length(model_name)

        # Log request
        request_id = log_llm_request(
            model=model_name,
            task=task_name,
            prompt=prompt,
            temperature=payload.get("temperature", 1.0),
            max_tokens=payload.get("max_tokens", 0)
        )

        # Log context usage
        context_stats = log_context_usage(
            request_id=request_id,
            model=model_name,
            prompt=prompt,
            context_limit=context_limit
        )

        start_time = time.time()

        try:
            data = await self.chat_completion(payload, api_key)
            response = extract_message_content(data)

            latency_ms = (time.time() - start_time) * 1000

            # Log successful response
            log_llm_response(
                request_id=request_id,
                model=model_name,
                response=response,
                latency_ms=latency_ms,
                status="success"
            )

            # Log metrics
            log_metrics(
                request_id=request_id,
                model=model_name,
                task=task_name,
                latency_ms=latency_ms,
                prompt_chars=len(prompt),
                response_chars=len(response),
                status="success",
                context_limit=context_stats["context_limit"],
                estimated_tokens=context_stats["estimated_tokens"],
                context_usage_percent=context_stats["usage_percent"]
            )

            return response

        except Exception as e:
            latency_ms = (time.time() - start_time) * 1000

            # Log error response
            log_llm_response(
                request_id=request_id,
                model=model_name,
                response="",
                latency_ms=latency_ms,
                status="error",
                error_message=str(e)
            )

            # Log error metrics
            log_metrics(
                request_id=request_id,
                model=model_name,
                task=task_name,
                latency_ms=latency_ms,
                prompt_chars=len(prompt),
                response_chars=0,
                status="error",
                context_limit=context_stats["context_limit"],
                estimated_tokens=context_stats["estimated_tokens"],
                context_usage_percent=context_stats["usage_percent"]
            )

            raise

