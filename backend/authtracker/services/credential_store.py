from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import structlog
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.config import get_settings
from authtracker.exceptions import (
    DuplicateUsername,
    InvalidCredentials,
    InvalidCurrentPassword,
    NotFound,
    ProtectedAccount,
)
from authtracker.models.user import User

ADMIN_USERNAME = "admin"
LEGACY_ADMIN_PASSWORD = "admin"

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    """Public view of a user row. Never carries the password hash."""
    id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_row(cls, user: User) -> "UserIdentity":
        return cls(id=user.id, username=user.username, role=user.role)


class CredentialStore:
    """Owns the users table: password hashing, lookup and account management."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash_password(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def _matches(self, plaintext: str, hashed: str) -> bool:
        try:
            return self._context.verify(plaintext, hashed)
        except (ValueError, TypeError):
            # Unrecognized or corrupt hash
            return False

    async def _get_row(self, db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id, populate_existing=True)

    async def _get_row_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def _require_row(self, db: AsyncSession, user_id: int) -> User:
        user = await self._get_row(db, user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user

    async def verify_password(self, db: AsyncSession, username: str, plaintext: str) -> UserIdentity:
        """Return the identity for valid credentials; InvalidCredentials otherwise."""
        user = await self._get_row_by_username(db, username)
        if user is None:
            # Spend the same hashing time as a real check.
            self._context.dummy_verify()
            raise InvalidCredentials()
        if not self._matches(plaintext, user.password_hash):
            raise InvalidCredentials()
        return UserIdentity.from_row(user)

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[UserIdentity]:
        user = await self._get_row(db, user_id)
        return UserIdentity.from_row(user) if user else None

    async def list_users(self, db: AsyncSession) -> list[UserIdentity]:
        result = await db.execute(select(User).order_by(User.id))
        return [UserIdentity.from_row(u) for u in result.scalars().all()]

    async def create_user(
        self, db: AsyncSession, username: str, plaintext: str, role: str = "employee"
    ) -> UserIdentity:
        if await self._get_row_by_username(db, username) is not None:
            raise DuplicateUsername(username)

        user = User(username=username, password_hash=self.hash_password(plaintext), role=role or "employee")
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same name.
            raise DuplicateUsername(username)
        await db.refresh(user)
        logger.info("user_created", user_id=user.id, username=user.username, role=user.role)
        return UserIdentity.from_row(user)

    async def set_password(self, db: AsyncSession, user_id: int, plaintext: str) -> None:
        user = await self._require_row(db, user_id)
        user.password_hash = self.hash_password(plaintext)
        await db.flush()
        logger.info("password_set", user_id=user_id)

    async def change_password(
        self, db: AsyncSession, user_id: int, current_plaintext: str, new_plaintext: str
    ) -> None:
        user = await self._require_row(db, user_id)
        if not self._matches(current_plaintext, user.password_hash):
            logger.info("password_change_rejected", user_id=user_id)
            raise InvalidCurrentPassword()
        await self.set_password(db, user_id, new_plaintext)

    async def update_user(
        self,
        db: AsyncSession,
        user_id: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[str] = None,
    ) -> UserIdentity:
        user = await self._require_row(db, user_id)

        if user.username == ADMIN_USERNAME:
            if username is not None and username != ADMIN_USERNAME:
                raise ProtectedAccount("Cannot rename primary admin")
            if role is not None and role != "admin":
                raise ProtectedAccount("Cannot change role of primary admin")

        if username is not None and username != user.username:
            if await self._get_row_by_username(db, username) is not None:
                raise DuplicateUsername(username)
            user.username = username
        if role is not None:
            user.role = role
        if password:
            user.password_hash = self.hash_password(password)

        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateUsername(username)
        logger.info("user_updated", user_id=user_id, username=user.username, role=user.role,
                    password_changed=bool(password))
        return UserIdentity.from_row(user)

    async def delete_user(self, db: AsyncSession, user_id: int) -> None:
        user = await self._require_row(db, user_id)
        if user.username == ADMIN_USERNAME:
            logger.warning("protected_account_delete_rejected", user_id=user_id)
            raise ProtectedAccount()
        await db.delete(user)
        await db.flush()
        logger.info("user_deleted", user_id=user_id, username=user.username)

    async def seed_admin(self, db: AsyncSession, admin_password: str) -> None:
        """Create the primary admin if missing; rotate the legacy default password. Idempotent."""
        admin = await self._get_row_by_username(db, ADMIN_USERNAME)
        if admin is None:
            db.add(User(username=ADMIN_USERNAME, password_hash=self.hash_password(admin_password), role="admin"))
            await db.flush()
            logger.info("admin_seeded")
        elif self._matches(LEGACY_ADMIN_PASSWORD, admin.password_hash):
            admin.password_hash = self.hash_password(admin_password)
            admin.role = "admin"
            await db.flush()
            logger.info("admin_legacy_password_rotated")


@lru_cache()
def get_credential_store() -> CredentialStore:
    return CredentialStore(rounds=get_settings().bcrypt_rounds)
