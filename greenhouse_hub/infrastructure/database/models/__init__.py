# Database Models
from .base import Base, BaseModel, TimestampMixin, UUIDMixin
from .project_model import ProjectModel
from .greenhouse_model import GreenhouseModel
from .alert_rule_model import AlertRuleModel
from .control_log_model import ControlLogModel

__all__ = [
    'Base',
    'BaseModel',
    'TimestampMixin',
    'UUIDMixin',
    'ProjectModel',
    'GreenhouseModel',
    'AlertRuleModel',
    'ControlLogModel',
]
