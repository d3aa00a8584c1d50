# Repository implementations
from .project_repository import SQLAlchemyProjectRepository
from .greenhouse_repository import SQLAlchemyGreenhouseRepository
from .alert_rule_repository import SQLAlchemyAlertRuleRepository
from .control_log_repository import SQLAlchemyControlLogRepository

__all__ = [
    'SQLAlchemyProjectRepository',
    'SQLAlchemyGreenhouseRepository',
    'SQLAlchemyAlertRuleRepository',
    'SQLAlchemyControlLogRepository',
]
