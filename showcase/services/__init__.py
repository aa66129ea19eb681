"""Business logic services."""
from showcase.services.chat_usage_service import ChatUsageCounter
from showcase.services.content_repository import ContentRepository
from showcase.services.moderation_service import ModerationWorkflow
from showcase.services.statistics_service import StatisticsReconciler
from showcase.services.user_service import UserAccounts

__all__ = [
    "ChatUsageCounter",
    "ContentRepository",
    "ModerationWorkflow",
    "StatisticsReconciler",
    "UserAccounts",
]
