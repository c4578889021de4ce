import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasehub.api.v1.users.schemas import RegisterRequest
from leasehub.core.exceptions import AppException, commit_or_conflict
from leasehub.core.security import get_password_hash, verify_password
from leasehub.models.enums import Role
from leasehub.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalars().first()

    async def get_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def register_user(self, data: RegisterRequest, role: Role = Role.lessee) -> User:
        email = data.email.strip().lower()
        if await self.get_user_by_email(email):
            AppException().raise_409("User with this email already exists")

        new_user = User(
            name=data.name,
            email=email,
            phone=data.phone,
            password_hash=get_password_hash(data.password),
            role=role.value,
        )
        self.db.add(new_user)
        await commit_or_conflict(self.db, "User with this email already exists")
        await self.db.refresh(new_user)
        logger.info("Registered user %s (%s)", new_user.id, new_user.role)
        return new_user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials; raise 401 otherwise."""
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed sign-in attempt for %s", email)
            AppException().raise_401("Invalid email or password")
        return user
