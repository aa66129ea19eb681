"""
User accounts (users collection) and the bootstrap admin.
Exactly one bootstrap admin exists after startup; it is created lazily and
promoted back to admin if someone demoted it.
"""
import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional

from showcase.errors import ValidationError
from showcase.infrastructure.durable_store import DurableStore
from showcase.infrastructure.fallback import FallbackCollection
from showcase.infrastructure.local_cache import LocalFallbackCache
from showcase.logging_config import get_logger
from showcase.schemas.auth import Principal, Role, UserRecord
from showcase.security import hash_password, verify_password

logger = get_logger(__name__)

USERS_COLLECTION = "users"


class UserAccounts:
    """Lookup, creation and password checks for login."""

    def __init__(self, store: DurableStore, cache: LocalFallbackCache) -> None:
        self._users = FallbackCollection(USERS_COLLECTION, store, cache)

    async def get_by_username(self, username: str) -> Optional[UserRecord]:
        records, _ = await self._users.find({"username": username})
        return UserRecord.model_validate(records[0]) if records else None

    async def create(self, username: str, password: str, role: Role = "user") -> UserRecord:
        if not username.strip() or not password:
            raise ValidationError("username and password are required")
        if await self.get_by_username(username) is not None:
            raise ValidationError(f"username {username!r} already exists", field="username")
        now = datetime.now(timezone.utc)
        user = UserRecord(
            id=str(uuid.uuid4()),
            username=username,
            password_hash=hash_password(password),
            role=role,
            created_at=now,
            updated_at=now,
        )
        stored = UserRecord.model_validate(await self._users.insert(user.model_dump()))
        logger.info("user.created", user_id=stored.id, username=username, role=role)
        return stored

    async def set_password(self, user: UserRecord, password: str, role: Optional[Role] = None) -> UserRecord:
        patch = {"password_hash": hash_password(password), "updated_at": datetime.now(timezone.utc)}
        if role is not None:
            patch["role"] = role
        record = await self._users.update(user.id, patch)
        if record is None:
            raise ValidationError(f"user {user.username!r} disappeared during update")
        logger.info("user.password_set", user_id=user.id, username=user.username)
        return UserRecord.model_validate(record)

    async def authenticate(self, username: str, password: str) -> Optional[Principal]:
        """Principal on valid credentials, None otherwise."""
        user = await self.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", username=username)
            return None
        logger.info("auth.login_ok", username=username, role=user.role)
        return Principal(id=user.id, username=user.username, role=user.role)

    async def ensure_bootstrap_admin(
        self,
        username: str,
        password: Optional[str],
        reveal_generated: bool = False,
    ) -> UserRecord:
        """
        Create the bootstrap admin if absent (lazy, idempotent).
        password unset or empty -> random password; logged only when reveal_generated (local env).
        """
        existing = await self.get_by_username(username)
        if existing is not None:
            if existing.role != "admin":
                logger.warning("bootstrap_admin.promoted", username=username, previous_role=existing.role)
                record = await self._users.update(
                    existing.id, {"role": "admin", "updated_at": datetime.now(timezone.utc)}
                )
                return UserRecord.model_validate(record) if record is not None else existing
            return existing

        generated = not password
        if generated:
            password = secrets.token_urlsafe(12)
        admin = await self.create(username, password, role="admin")
        if generated and reveal_generated:
            logger.warning("bootstrap_admin.generated_password", username=username, password=password)
        elif generated:
            logger.warning(
                "bootstrap_admin.generated_password",
                username=username,
                hint="set BOOTSTRAP_ADMIN_PASSWORD and run scripts/reset_admin_password.py",
            )
        else:
            logger.info("bootstrap_admin.created", username=username)
        return admin
