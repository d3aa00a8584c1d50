"""
SQLAlchemy Unit of Work implementation.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...application.interfaces.unit_of_work import UnitOfWork
from .repositories.project_repository import SQLAlchemyProjectRepository
from .repositories.greenhouse_repository import SQLAlchemyGreenhouseRepository
from .repositories.alert_rule_repository import SQLAlchemyAlertRuleRepository
from .repositories.control_log_repository import SQLAlchemyControlLogRepository


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work pattern.

    One session per unit; repositories are created on first access.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize Unit of Work.

        Args:
            session_factory: Factory for creating async database sessions
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._projects: Optional[SQLAlchemyProjectRepository] = None
        self._greenhouses: Optional[SQLAlchemyGreenhouseRepository] = None
        self._alert_rules: Optional[SQLAlchemyAlertRuleRepository] = None
        self._control_logs: Optional[SQLAlchemyControlLogRepository] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter async context - create session."""
        self._session = self._session_factory()
        return self

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work not started. Use 'async with' context.")
        return self._session

    @property
    def projects(self) -> SQLAlchemyProjectRepository:
        """Get project repository."""
        if self._projects is None:
            self._projects = SQLAlchemyProjectRepository(self._require_session())
        return self._projects

    @property
    def greenhouses(self) -> SQLAlchemyGreenhouseRepository:
        """Get greenhouse repository."""
        if self._greenhouses is None:
            self._greenhouses = SQLAlchemyGreenhouseRepository(self._require_session())
        return self._greenhouses

    @property
    def alert_rules(self) -> SQLAlchemyAlertRuleRepository:
        """Get alert rule repository."""
        if self._alert_rules is None:
            self._alert_rules = SQLAlchemyAlertRuleRepository(self._require_session())
        return self._alert_rules

    @property
    def control_logs(self) -> SQLAlchemyControlLogRepository:
        if self._control_logs is None:
            self._control_logs = SQLAlchemyControlLogRepository(self._require_session())
        return self._control_logs

    async def commit(self) -> None:
        """Commit current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback current transaction."""
        if self._session:
            await self._session.rollback()

    async def close(self) -> None:
        """Close the session."""
        if self._session:
            await self._session.close()
            self._session = None
            self._projects = None
            self._greenhouses = None
            self._alert_rules = None
            self._control_logs = None
