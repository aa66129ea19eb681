"""Chat usage counters (singleton row id=1)."""
from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from showcase.db import Base

STATISTICS_ROW_ID = 1


class ChatStatistics(Base):
    """
    Chat / content-idea tallies. Submission counts are not stored here:
    they are always recomputed from content_items.
    """

    __tablename__ = "chat_statistics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=STATISTICS_ROW_ID)
    total_chats: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_content_ideas: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
