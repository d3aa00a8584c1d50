# Database - PostgreSQL via async SQLAlchemy

from .connection import (
    DatabaseManager,
    get_unit_of_work,
    init_db,
)
from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    'DatabaseManager',
    'get_unit_of_work',
    'init_db',
    'SQLAlchemyUnitOfWork',
]
