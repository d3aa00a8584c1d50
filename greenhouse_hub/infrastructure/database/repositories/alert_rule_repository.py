"""
SQLAlchemy implementation of AlertRule repository.
"""
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ....application.interfaces.repositories import AlertRuleRepository
from ....domain.entities.alert_rule import AlertRule
from ....domain.entities.device_status import GreenhouseStatus
from ....domain.entities.session import DeviceTarget
from ..models.alert_rule_model import AlertRuleModel
from ..models.greenhouse_model import GreenhouseModel
from ..models.project_model import ProjectModel


class SQLAlchemyAlertRuleRepository(AlertRuleRepository):
    """SQLAlchemy implementation of alert rule repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_active_rules_for_ready_devices(self) -> List[AlertRule]:
        """Active rules of ready greenhouses linked to a platform device."""
        query = (
            select(AlertRuleModel, GreenhouseModel, ProjectModel.key)
            .join(GreenhouseModel, AlertRuleModel.greenhouse_id == GreenhouseModel.id)
            .join(ProjectModel, GreenhouseModel.project_id == ProjectModel.id)
            .where(
                AlertRuleModel.is_active.is_(True),
                GreenhouseModel.status == GreenhouseStatus.READY.value,
                GreenhouseModel.tb_device_id.is_not(None),
            )
            .order_by(GreenhouseModel.name, AlertRuleModel.sensor_key)
        )

        result = await self._session.execute(query)
        rules = []
        for rule_model, greenhouse, tenant in result.all():
            target = DeviceTarget(
                tenant=tenant,
                device_id=greenhouse.tb_device_id,
                name=greenhouse.name,
            )
            rules.append(rule_model.to_domain(target=target, device_name=greenhouse.name))
        return rules

    async def mark_triggered(self, id: UUID, triggered_at: datetime) -> None:
        """Write back last_triggered_at only."""
        await self._session.execute(
            update(AlertRuleModel)
            .where(AlertRuleModel.id == id)
            .values(last_triggered_at=triggered_at)
        )
