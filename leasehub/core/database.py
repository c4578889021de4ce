import logging

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

from leasehub.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_database_url(url: str | None = None, environment: str | None = None) -> str:
    db_url = url or settings.DATABASE_URL
    environment = environment or settings.ENVIRONMENT
    if "postgresql" in db_url and "sslmode" not in db_url and environment != "development":
        return f"{db_url}?sslmode=require"
    return db_url


class Database:
    """
    Engine and session factory for one process.

    Built once in the application lifespan, stored on ``app.state.database``
    and disposed on shutdown. Request handlers reach it through ``get_db``.
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.url = url
        self.engine = create_async_engine(url, echo=echo, **engine_kwargs)
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(get_database_url(), echo=settings.SQL_ECHO)

    async def create_all(self) -> None:
        # Import models so every table is registered on Base.metadata
        from leasehub.models.user import User  # noqa: F401
        from leasehub.models.vehicle import Vehicle  # noqa: F401
        from leasehub.models.lease import Lease  # noqa: F401
        from leasehub.models.payment import Payment  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        logger.info("Disposing database engine")
        await self.engine.dispose()
