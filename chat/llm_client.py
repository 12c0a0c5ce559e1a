"""
Chat LLM Client

Module-specific LLM client for the chat proxy. No sampling overrides:
the provider's defaults apply, as for a direct call.
"""
from config import ServiceSettings
from core import BaseLLMClient, LLMConfig


def create_chat_llm_client(settings: ServiceSettings) -> BaseLLMClient:
    """Build the module-specific BaseLLMClient from service settings."""
    config = LLMConfig(
        api_url=settings.api_url,
        model=settings.model,
        timeout=settings.timeout,
        pool_limit=settings.pool_limit,
        task_name="chat"
    )
    return BaseLLMClient(config)
