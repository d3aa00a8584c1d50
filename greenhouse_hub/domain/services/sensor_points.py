"""
Grouping of sensor telemetry keys into physical sensor points.

A greenhouse has one air sensor (``air_*`` keys) and up to ten soil
nodes (``soil{N}_*`` keys). Offline summaries report points, not keys.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple

AIR_KEYS = ("air_temp", "air_humidity", "air_co2", "air_light")
SOIL_NODE_COUNT = 10

_SOIL_PATTERN = re.compile(r"^soil(\d+)_", re.IGNORECASE)


@dataclass(frozen=True)
class SensorPoint:
    """A physical sensor: ``air`` or ``soil:N``."""
    group_id: str
    label: str
    index: int = 0  # soil node number, 0 for air

    @property
    def sort_key(self) -> Tuple[int, int]:
        # Air first, then soil nodes in order
        return (0 if self.group_id == "air" else 1, self.index)


def sensor_point_for(key: str) -> Optional[SensorPoint]:
    """Sensor point of a telemetry key, None for keys outside any point."""
    key = (key or "").strip()

    if key in AIR_KEYS:
        return SensorPoint(group_id="air", label="Air sensor")

    match = _SOIL_PATTERN.match(key)
    if match:
        index = int(match.group(1))
        if 1 <= index <= SOIL_NODE_COUNT:
            return SensorPoint(group_id=f"soil:{index}", label=f"Soil sensor {index}", index=index)

    return None
