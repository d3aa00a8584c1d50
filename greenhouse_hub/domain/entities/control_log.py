"""
Control log entities.

One entry per dispatched command, written once its outcome is known.
"""
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from .base import Entity
from .command import CommandState


@dataclass(kw_only=True)
class ControlLogEntry(Entity):
    """
    Outcome of one control command sent to a greenhouse.

    ``timed_out`` means unconfirmed, not failed: the actuator may still
    have switched.
    """
    greenhouse_id: UUID
    method: str
    params: Any = None
    outcome: CommandState
    error_message: Optional[str] = None
    device_name: Optional[str] = None

    @property
    def control_key(self) -> str:
        """Control the method acts on, e.g. ``fan_1`` for ``set_fan_1_cmd``."""
        key = self.method.removeprefix("set_")
        for suffix in ("_cmd", "_status", "_auto", "_on_time", "_off_time"):
            if key.endswith(suffix):
                return key[:-len(suffix)]
        return key

    @property
    def succeeded(self) -> bool:
        return self.outcome == CommandState.CONFIRMED
