"""Service wiring: one Services bundle per process, built in the app lifespan."""
from dataclasses import dataclass
from typing import Optional

from showcase.config import Settings
from showcase.infrastructure.durable_store import DurableStore, build_durable_store
from showcase.infrastructure.local_cache import LocalFallbackCache
from showcase.logging_config import get_logger
from showcase.services.chat_relay_service import ChatRelay
from showcase.services.chat_usage_service import ChatUsageCounter
from showcase.services.content_repository import ContentRepository
from showcase.services.moderation_service import ModerationWorkflow
from showcase.services.statistics_service import StatisticsReconciler
from showcase.services.upload_service import UploadStore
from showcase.services.user_service import UserAccounts

logger = get_logger(__name__)


@dataclass
class Services:
    settings: Settings
    store: DurableStore
    cache: LocalFallbackCache
    repository: ContentRepository
    chat_counter: ChatUsageCounter
    statistics: StatisticsReconciler
    moderation: ModerationWorkflow
    accounts: UserAccounts
    uploads: UploadStore
    chat_relay: ChatRelay

    async def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            await close()


async def build_services(settings: Settings, store: Optional[DurableStore] = None) -> Services:
    """
    Load the local cache, wire components and ensure the bootstrap admin.
    store: override for tests; defaults to the store selected by DATABASE_URL.
    """
    if settings.uses_default_jwt_secret and settings.app_env != "local":
        logger.warning("config.default_jwt_secret", app_env=settings.app_env, hint="set JWT_SECRET")
    if store is None:
        store = build_durable_store(settings)
    cache = LocalFallbackCache(settings.local_cache_path)
    cache.load()

    repository = ContentRepository(store, cache)
    chat_counter = ChatUsageCounter(store, cache)
    statistics = StatisticsReconciler(repository, chat_counter)
    accounts = UserAccounts(store, cache)
    await accounts.ensure_bootstrap_admin(
        settings.bootstrap_admin_username,
        settings.bootstrap_admin_password,
        reveal_generated=settings.app_env == "local",
    )
    services = Services(
        settings=settings,
        store=store,
        cache=cache,
        repository=repository,
        chat_counter=chat_counter,
        statistics=statistics,
        moderation=ModerationWorkflow(repository, statistics),
        accounts=accounts,
        uploads=UploadStore(settings.upload_dir, settings.upload_max_mb),
        chat_relay=ChatRelay(settings),
    )
    logger.info("services.ready", store=type(store).__name__, cache_path=str(cache.path))
    return services
