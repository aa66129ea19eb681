"""Usage statistics schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class ChatCounts(BaseModel):
    """Singleton chat_statistics record (remote row id=1 or its local mirror)."""

    total_chats: int = 0
    total_content_ideas: int = 0
    last_updated: Optional[datetime] = None


class Statistics(BaseModel):
    """
    Reported statistics. Submission counters are always derived from the live
    content collection; chat counters come from ChatCounts.
    """

    total_chats: int = Field(0, ge=0)
    total_content_ideas: int = Field(0, ge=0)
    total_approved: int = Field(0, ge=0)
    total_pending: int = Field(0, ge=0)
    total_rejected: int = Field(0, ge=0)
    total_submissions: int = Field(0, ge=0)
    last_updated: datetime

    @model_validator(mode="after")
    def _partition_adds_up(self) -> "Statistics":
        if self.total_approved + self.total_pending + self.total_rejected != self.total_submissions:
            raise ValueError("approved + pending + rejected must equal total_submissions")
        return self
