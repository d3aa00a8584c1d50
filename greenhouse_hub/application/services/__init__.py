# Application Services - Use cases built on the platform client

from .command_dispatcher import CommandDispatcher
from .control_log import ControlLogRecorder
from .device_monitor import DeviceMonitor
from .periodic import PeriodicMonitor
from .sensor_monitor import SensorMonitor

__all__ = [
    'CommandDispatcher',
    'ControlLogRecorder',
    'DeviceMonitor',
    'PeriodicMonitor',
    'SensorMonitor',
]
