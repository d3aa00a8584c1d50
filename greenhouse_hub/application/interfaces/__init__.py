# Application Interfaces - Ports implemented by the infrastructure layer

from .notifications import NotificationSink
from .repositories import (
    ProjectRepository,
    GreenhouseRepository,
    AlertRuleRepository,
    ControlLogRepository,
)
from .tenants import TenantRegistry
from .unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    'NotificationSink',
    'ProjectRepository',
    'GreenhouseRepository',
    'AlertRuleRepository',
    'ControlLogRepository',
    'TenantRegistry',
    'UnitOfWork',
    'UnitOfWorkFactory',
]
