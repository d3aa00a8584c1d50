# Domain Services - Business logic that doesn't belong to a single entity

from .command_catalog import CommandCatalog, RPC_CONFIRM_MAP, motor_attribute_keys
from .threshold_evaluator import ThresholdEvaluator, format_value
from .sensor_points import SensorPoint, sensor_point_for
from .value_matching import as_bool, default_expected_value, values_match

__all__ = [
    'CommandCatalog',
    'RPC_CONFIRM_MAP',
    'motor_attribute_keys',
    'ThresholdEvaluator',
    'format_value',
    'SensorPoint',
    'sensor_point_for',
    'as_bool',
    'default_expected_value',
    'values_match',
]
