"""
Pydantic schemas for translation API.
"""
from pydantic import BaseModel, Field, StrictStr
from typing import Optional


class TranslateRequestBody(BaseModel):
    """Request for text translation."""
    text: StrictStr = Field(..., description="Korean text to translate", min_length=1)
    targetLang: StrictStr = Field(..., description="Target language (every value resolves to uz-Latn)")
    model: Optional[StrictStr] = Field(None, description="Model to use (defaults to config)")


class TranslateResponse(BaseModel):
    """Response from translation."""
    ok: bool = Field(True, description="Always true on success")
    mode: str = Field("translate", description="Operation performed")
    result_b64: str = Field(..., description="Base64 of the UTF-8 translation")
    result: Optional[str] = Field(None, description="Plain ASCII translation (ascii output mode only)")
