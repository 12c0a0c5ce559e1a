"""
Translation LLM Client

Module-specific LLM client for translation service.
Uses BaseLLMClient with translation-specific configuration.
"""
from typing import Optional

from config import ServiceSettings
from core import BaseLLMClient, LLMConfig
from .config import (
    TRANSLATION_TEMPERATURE,
    TRANSLATION_MAX_TOKENS,
)
from .prompts import PromptSpec, build_messages


def create_translation_llm_client(settings: ServiceSettings) -> BaseLLMClient:
    """Build the module-specific BaseLLMClient from service settings."""
    config = LLMConfig(
        api_url=settings.api_url,
        model=settings.model,
        temperature=TRANSLATION_TEMPERATURE,
        max_tokens=TRANSLATION_MAX_TOKENS,
        timeout=settings.timeout,
        pool_limit=settings.pool_limit,
        task_name="translate"
    )
    return BaseLLMClient(config)


class TranslationClient:
    """
    One completion round trip per call.

    Never retries; UpstreamError and TransportError from the base client
    propagate to the caller unchanged.
    """

    def __init__(self, llm_client: BaseLLMClient):
        self.llm_client = llm_client

    async def complete(
        self,
        api_key: str,
        model: Optional[str],
        prompt_spec: PromptSpec,
        source_text: str,
    ) -> str:
        """
        Send the system prompt and source text; return the raw completion.

        Args:
            api_key: Provider API key
            model: Model name (uses the client's configured model if empty)
            prompt_spec: System prompt for this attempt
            source_text: Untransformed source text

        Returns:
            Raw completion content ("" when the provider returned none)
        """
        return await self.llm_client.generate_text_with_logging(
            messages=build_messages(prompt_spec, source_text),
            api_key=api_key,
            model=model,
            temperature=TRANSLATION_TEMPERATURE,
            task=f"translate_{prompt_spec.strictness.value}"
        )

    async def close(self):
        """Close the underlying HTTP session. Call this on application shutdown."""
        await self.llm_client.close()
