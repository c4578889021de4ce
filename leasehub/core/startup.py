"""
Startup utilities for the application.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, ProgrammingError

from leasehub.core.config import settings
from leasehub.core.database import Database
from leasehub.core.security import get_password_hash
from leasehub.models.enums import Role
from leasehub.models.user import User

logger = logging.getLogger(__name__)


async def ensure_default_admin(database: Database) -> None:
    """
    Create an admin account from DEFAULT_ADMIN_EMAIL / DEFAULT_ADMIN_PASSWORD
    when both are set and no admin exists yet.
    """
    email = settings.DEFAULT_ADMIN_EMAIL.strip().lower()
    if not email or not settings.DEFAULT_ADMIN_PASSWORD:
        return

    async with database.session_maker() as session:
        try:
            result = await session.execute(
                select(func.count(User.id)).where(User.role == Role.admin.value)
            )
            admin_count = result.scalar()
            if admin_count:
                logger.info("Found %s admin(s) in database. Skipping default admin creation.", admin_count)
                return

            existing = await session.execute(select(User).where(User.email == email))
            if existing.scalars().first():
                logger.warning("Default admin email %s already belongs to a non-admin account", email)
                return

            session.add(
                User(
                    name="Administrator",
                    email=email,
                    phone="0000000",
                    password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
                    role=Role.admin.value,
                )
            )
            await session.commit()
            logger.info("Default admin created with email: %s", email)
        except (OperationalError, ProgrammingError) as e:
            # Tables missing: run 'alembic upgrade head' or enable AUTO_CREATE_TABLES
            await session.rollback()
            logger.warning("Could not check for a default admin: %s", e)
