"""Chat relay request schemas."""
from typing import List, Literal

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    """One previous turn of the conversation."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Body for POST /api/chat."""

    message: str = Field("", description="User message; empty -> 400")
    history: List[ChatTurn] = Field(default_factory=list)
