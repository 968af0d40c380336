"""Shared plumbing for the database-backed stores"""
import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.startup import Startup
from app.services.errors import NotFoundError, PersistenceError

logger = structlog.get_logger()


class BaseStore:
    """Holds the session and maps backing store failures to PersistenceError."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_startup(self, startup_id: int) -> Startup:
        result = await self._execute(select(Startup).where(Startup.id == startup_id))
        startup = result.scalar_one_or_none()
        if not startup:
            raise NotFoundError(f"Startup {startup_id} not found")
        return startup

    async def _execute(self, statement):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Database read failed", error=str(e))
            raise PersistenceError("Failed to read from the database") from e

    async def _commit(self, operation: str) -> None:
        """Commit the unit of work, rolling back and raising PersistenceError on failure"""
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database write failed", operation=operation, error=str(e))
            raise PersistenceError(f"Failed to {operation}") from e
