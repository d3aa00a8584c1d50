"""
SQLAlchemy implementation of Greenhouse repository.
"""
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ....application.interfaces.repositories import GreenhouseRepository
from ....domain.entities.device_status import (
    ConnectionState,
    GreenhouseStatus,
    MonitoredDevice,
)
from ..models.greenhouse_model import GreenhouseModel
from ..models.project_model import ProjectModel


class SQLAlchemyGreenhouseRepository(GreenhouseRepository):
    """SQLAlchemy implementation of greenhouse repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _select_linked(self):
        return (
            select(GreenhouseModel, ProjectModel.key)
            .join(ProjectModel, GreenhouseModel.project_id == ProjectModel.id)
            .where(GreenhouseModel.tb_device_id.is_not(None))
        )

    async def get_by_id(self, id: UUID) -> Optional[MonitoredDevice]:
        """Get a greenhouse linked to a platform device."""
        result = await self._session.execute(
            self._select_linked().where(GreenhouseModel.id == id)
        )
        row = result.first()
        if row is None:
            return None
        model, tenant = row
        return model.to_domain(tenant)

    async def list_monitored(
        self,
        statuses: Sequence[GreenhouseStatus] = (GreenhouseStatus.READY, GreenhouseStatus.DEVELOPING),
    ) -> List[MonitoredDevice]:
        """List greenhouses with a platform device and one of ``statuses``."""
        query = self._select_linked().where(
            GreenhouseModel.status.in_([s.value for s in statuses])
        ).order_by(GreenhouseModel.name)

        result = await self._session.execute(query)
        return [model.to_domain(tenant) for model, tenant in result.all()]

    async def update_connection_status(
        self,
        id: UUID,
        is_online: bool,
        checked_at: datetime,
    ) -> None:
        """Persist reachability; ``last_online_at`` only moves forward while online."""
        values = {"device_status": ConnectionState.from_bool(is_online).value}
        if is_online:
            values["last_online_at"] = checked_at

        await self._session.execute(
            update(GreenhouseModel)
            .where(GreenhouseModel.id == id)
            .values(**values)
        )
