from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


class AppException:
    """Raisers for the HTTP errors services report; the global handler renders them as {"message": ...}."""

    @staticmethod
    def raise_400(message: str = "Bad Request"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

    @staticmethod
    def raise_401(message: str = "Unauthorized"):
        """Missing or invalid session, or bad credentials."""
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)

    @staticmethod
    def raise_403(message: str = "Forbidden"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)

    @staticmethod
    def raise_404(message: str = "Not Found"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)

    @staticmethod
    def raise_409(message: str = "Conflict"):
        """Uniqueness or state conflict (duplicate email/license, vehicle already leased)."""
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message)

    @staticmethod
    def raise_500(message: str = "Internal Server Error"):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


async def commit_or_conflict(db: AsyncSession, message: str) -> None:
    """
    Commit, turning a unique-constraint race into 409.
    Service-level pre-checks catch the common case; this covers concurrent writers.
    """
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        AppException().raise_409(message)
