"""
Reset (or recreate) the bootstrap admin account.

Writes through the same durable-then-local path as the app, so it works in
local-only mode too. Password from BOOTSTRAP_ADMIN_PASSWORD, the first
argument, or an interactive prompt.

  python scripts/reset_admin_password.py [password]

Exit codes: 0 ok, 2 empty password.
"""
import asyncio
import getpass
import sys

from showcase.config import get_settings
from showcase.infrastructure.durable_store import build_durable_store
from showcase.infrastructure.local_cache import LocalFallbackCache
from showcase.logging_config import configure_logging, get_logger
from showcase.services.user_service import UserAccounts

logger = get_logger("scripts.reset_admin_password")


def read_password() -> str:
    if len(sys.argv) > 1:
        return sys.argv[1]
    settings = get_settings()
    if settings.bootstrap_admin_password:
        return settings.bootstrap_admin_password
    return getpass.getpass("New admin password: ")


async def reset(password: str) -> None:
    settings = get_settings()
    store = build_durable_store(settings)
    cache = LocalFallbackCache(settings.local_cache_path)
    cache.load()
    accounts = UserAccounts(store, cache)
    try:
        user = await accounts.get_by_username(settings.bootstrap_admin_username)
        if user is None:
            await accounts.create(settings.bootstrap_admin_username, password, role="admin")
        else:
            await accounts.set_password(user, password, role="admin")
        logger.info("bootstrap_admin.reset", username=settings.bootstrap_admin_username, created=user is None)
    finally:
        await store.close()


def main() -> int:
    configure_logging()
    password = read_password()
    if not password:
        print("Password must not be empty.", file=sys.stderr)
        return 2
    asyncio.run(reset(password))
    print(f"Admin '{get_settings().bootstrap_admin_username}' password reset.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
