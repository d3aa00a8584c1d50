"""
Hub database: engine, session factory and schema bootstrap.

The hub reads projects and greenhouses, writes reachability, alert
trigger times and the control log. Every caller goes through a unit of
work from ``get_unit_of_work``.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ...config import DatabaseSettings, get_settings
from .models.base import Base
from .unit_of_work import SQLAlchemyUnitOfWork


class DatabaseManager:
    """Process-wide engine and session factory, created on first use."""

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def get_engine(cls, settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
        if cls._engine is None:
            db = settings or get_settings().database
            cls._engine = create_async_engine(
                db.url,
                echo=db.echo_sql,
                pool_size=db.pool_size,
                max_overflow=db.max_overflow,
                # Monitors hold connections across long idle sweeps
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        return cls._engine

    @classmethod
    def get_session_factory(cls) -> async_sessionmaker[AsyncSession]:
        if cls._session_factory is None:
            cls._session_factory = async_sessionmaker(
                bind=cls.get_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return cls._session_factory

    @classmethod
    async def close(cls) -> None:
        """Dispose the pool; the next use builds a new engine."""
        if cls._engine is not None:
            await cls._engine.dispose()
            cls._engine = None
            cls._session_factory = None


async def init_db() -> None:
    """Create the hub tables that do not exist yet."""
    from .models import (  # noqa: F401
        alert_rule_model,
        control_log_model,
        greenhouse_model,
        project_model,
    )

    async with DatabaseManager.get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_unit_of_work() -> SQLAlchemyUnitOfWork:
    """Open a unit of work on the shared session factory."""
    return SQLAlchemyUnitOfWork(DatabaseManager.get_session_factory())
