"""
Pydantic schemas for chat proxy API.
"""
from pydantic import BaseModel, Field, StrictStr
from typing import Any, List, Optional


class ChatRequestBody(BaseModel):
    """Request forwarded to the provider's chat-completion endpoint."""
    messages: List[Any] = Field(..., description="Chat messages, passed through unchanged")
    model: Optional[StrictStr] = Field(None, description="Model to use (defaults to config)")
