"""Content item request/response schemas."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from showcase.schemas.statistics import Statistics


class ContentStatus(str, Enum):
    """Moderation states. pending is the initial state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentSubmission(BaseModel):
    """Fields accepted at submission time. Required-ness is checked by the repository."""

    title: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class ContentUpdate(BaseModel):
    """Admin edit. None keeps the current value."""

    title: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class ContentItemRecord(BaseModel):
    """Stored content item; same field names in the remote table and the local cache."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str
    title: str
    category: str
    author: str
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    status: ContentStatus = ContentStatus.PENDING
    created_at: datetime
    updated_at: datetime


class ContentSubmitResponse(BaseModel):
    """Response for POST /api/content/submit (201)."""

    message: str
    content: ContentItemRecord


class StatusUpdateRequest(BaseModel):
    """Body for PUT /api/content/{id}/status."""

    status: ContentStatus = Field(..., description="pending | approved | rejected")


class RejectRequest(BaseModel):
    """Body for PUT /api/content/{id}/reject. Reason is logged, not stored."""

    reason: Optional[str] = Field(None, description="Why the item was rejected")


class ModerationResponse(BaseModel):
    """Response for approve / reject / status: item plus recomputed statistics."""

    message: str
    content: ContentItemRecord
    statistics: Statistics


class ContentUpdateResponse(BaseModel):
    message: str
    content: ContentItemRecord


class ContentDeleteResponse(BaseModel):
    message: str
    deleted_content: ContentItemRecord


ContentItemList = List[ContentItemRecord]
