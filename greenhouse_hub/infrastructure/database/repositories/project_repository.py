"""
SQLAlchemy implementation of Project repository.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ....application.interfaces.repositories import ProjectRepository
from ....domain.entities.session import TenantCredentials
from ..models.project_model import ProjectModel


class SQLAlchemyProjectRepository(ProjectRepository):
    """SQLAlchemy implementation of project repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_credentials(self, tenant: str) -> Optional[TenantCredentials]:
        """Get platform credentials by project key."""
        result = await self._session.execute(
            select(ProjectModel).where(ProjectModel.key == tenant)
        )
        model = result.scalar_one_or_none()
        return model.to_credentials() if model else None

    async def list_credentials(self) -> List[TenantCredentials]:
        result = await self._session.execute(
            select(ProjectModel).order_by(ProjectModel.key)
        )
        return [m.to_credentials() for m in result.scalars().all()]
