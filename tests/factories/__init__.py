"""
Test data factories for the Greenhouse Hub.
"""
from .alert_rule_factory import AlertRuleFactory
from .control_log_factory import ControlLogEntryFactory
from .device_factory import DeviceTargetFactory, MonitoredDeviceFactory

__all__ = [
    "AlertRuleFactory",
    "ControlLogEntryFactory",
    "DeviceTargetFactory",
    "MonitoredDeviceFactory",
]
