"""Pydantic request/response schemas."""
from showcase.schemas.auth import LoginRequest, LoginResponse, Principal, ProfileResponse, UserRecord
from showcase.schemas.chat import ChatRequest, ChatTurn
from showcase.schemas.common import ErrorResponse
from showcase.schemas.content import (
    ContentItemRecord,
    ContentStatus,
    ContentSubmission,
    ContentUpdate,
    ModerationResponse,
)
from showcase.schemas.statistics import ChatCounts, Statistics

__all__ = [
    "ChatCounts",
    "ChatRequest",
    "ChatTurn",
    "ContentItemRecord",
    "ContentStatus",
    "ContentSubmission",
    "ContentUpdate",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "ModerationResponse",
    "Principal",
    "ProfileResponse",
    "Statistics",
    "UserRecord",
]
