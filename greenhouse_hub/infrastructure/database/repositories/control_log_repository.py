"""
SQLAlchemy implementation of the control log repository.
"""
import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ....application.interfaces.repositories import ControlLogRepository
from ....domain.entities.control_log import ControlLogEntry
from ..models.control_log_model import ControlLogModel

logger = logging.getLogger(__name__)


class SQLAlchemyControlLogRepository(ControlLogRepository):
    """Append-only store of command outcomes."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, entry: ControlLogEntry) -> ControlLogEntry:
        model = ControlLogModel.from_domain(entry)
        self._session.add(model)
        await self._session.flush()

        logger.debug(f"Logged {entry.method} on greenhouse {entry.greenhouse_id}: {entry.outcome.value}")
        return entry

    async def list_by_greenhouse(self, greenhouse_id: UUID, limit: int = 50) -> List[ControlLogEntry]:
        """Newest first."""
        query = (
            select(ControlLogModel)
            .where(ControlLogModel.greenhouse_id == greenhouse_id)
            .order_by(ControlLogModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(query)
        return [model.to_domain() for model in result.scalars().all()]
