"""
Chat Proxy Module

Forwards chat-completion requests to the configured LLM provider.
"""

from .service import router

__all__ = ["router"]
