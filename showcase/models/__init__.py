"""SQLAlchemy models for the showcase remote store."""
from showcase.models.chat_statistics import ChatStatistics
from showcase.models.content_item import ContentItem
from showcase.models.user import User

__all__ = [
    "ChatStatistics",
    "ContentItem",
    "User",
]
