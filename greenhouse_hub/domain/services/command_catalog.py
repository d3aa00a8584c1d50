"""
Command Catalog Domain Service.

Maps controller RPC method names to the attributes that confirm them.
Method names and attribute keys are dictated by the controller firmware.
"""
import re
from typing import Dict, Iterable, Optional, Tuple

from ..entities.command import ActuatorClass, CommandDescriptor

RELAYS: Tuple[str, ...] = (
    "fan_1", "fan_2",
    "valve_1", "valve_2", "valve_3", "valve_4",
    "light_1",
)
MOTOR_COUNT = 4

# Methods the route layer always sends one-way, even if a timeout is supplied
_ONE_WAY_PATTERN = re.compile(r"_cmd$|_auto$|_time$|_condition_auto$|_interval_auto$")
_MOTOR_PATTERN = re.compile(r"^set_motor_(\d+)_status$")


def motor_attribute_keys(motor: int) -> Tuple[str, str]:
    """Forward/reverse flag keys of a motor."""
    return f"motor_{motor}_fw", f"motor_{motor}_re"


def _default_confirm_map() -> Dict[str, str]:
    confirm_map: Dict[str, str] = {}
    for relay in RELAYS:
        confirm_map[f"set_{relay}_cmd"] = f"{relay}_cmd"
        confirm_map[f"set_{relay}_auto"] = f"{relay}_auto"
        confirm_map[f"set_{relay}_on_time"] = f"{relay}_on"
        confirm_map[f"set_{relay}_off_time"] = f"{relay}_off"
    confirm_map["set_global_motor_auto"] = "global_motor_auto"
    confirm_map["set_global_fw_time"] = "global_fw_time"
    confirm_map["set_global_re_time"] = "global_re_time"
    return confirm_map


RPC_CONFIRM_MAP: Dict[str, str] = _default_confirm_map()


class CommandCatalog:
    """
    Resolves a method name to its CommandDescriptor.

    Methods with no confirming attribute (condition/interval automation
    settings, unknown methods) resolve to a fire-and-forget descriptor.
    """

    def __init__(
        self,
        confirm_map: Optional[Dict[str, str]] = None,
        motor_count: int = MOTOR_COUNT,
    ):
        self._confirm_map = dict(RPC_CONFIRM_MAP if confirm_map is None else confirm_map)
        self._motor_count = motor_count

    def resolve(self, method: str) -> CommandDescriptor:
        motor = self.motor_number(method)
        if motor is not None:
            return CommandDescriptor(
                method=method,
                actuator_class=ActuatorClass.COMPOUND,
                confirmable=True,
                attribute_keys=motor_attribute_keys(motor),
            )

        attribute = self._confirm_map.get(method)
        if attribute is None:
            return CommandDescriptor(method=method)

        return CommandDescriptor(
            method=method,
            actuator_class=ActuatorClass.SIMPLE,
            confirmable=True,
            attribute_keys=(attribute,),
        )

    def motor_number(self, method: str) -> Optional[int]:
        """Motor index for ``set_motor_N_status`` methods within range."""
        match = _MOTOR_PATTERN.match(method)
        if not match:
            return None
        motor = int(match.group(1))
        if 1 <= motor <= self._motor_count:
            return motor
        return None

    @property
    def methods(self) -> Iterable[str]:
        """All confirmable method names."""
        motors = [f"set_motor_{n}_status" for n in range(1, self._motor_count + 1)]
        return [*self._confirm_map.keys(), *motors]

    @staticmethod
    def is_one_way(method: str) -> bool:
        """Check if a method must never be sent as a two-way RPC."""
        return bool(
            _ONE_WAY_PATTERN.search(method)
            or method.startswith("set_global_")
            or _MOTOR_PATTERN.match(method)
        )
