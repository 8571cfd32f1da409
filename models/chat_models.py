"""
Request/response models for the chat endpoints.

Field names on the wire are camelCase; Python code uses snake_case.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Model for /api/chat requests."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    session_id: Optional[str] = Field(None, alias="sessionId")
    system_instruction: Optional[str] = Field(None, alias="systemInstruction")


class ChatResponse(BaseModel):
    """Model for /api/chat responses."""
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    session_id: str = Field(..., alias="sessionId")


class EndSessionRequest(BaseModel):
    """Model for /api/chat/end requests."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")


class EndSessionResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str
