"""
Telemetry reading entities.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SensorReading:
    """Latest sample of one telemetry key."""
    key: str
    value: Any
    ts: Optional[int] = None  # epoch milliseconds

    @property
    def numeric_value(self) -> Optional[float]:
        """Value as float, or None if it is not numeric."""
        if isinstance(self.value, bool):
            return float(self.value)
        try:
            return float(self.value)
        except (TypeError, ValueError):
            return None

    def age_seconds(self, now: float) -> Optional[float]:
        """Seconds since the sample, given ``now`` in epoch seconds."""
        if not self.ts:
            return None
        return now - self.ts / 1000.0

    @classmethod
    def latest_from(cls, key: str, telemetry: Dict[str, List[Dict[str, Any]]]) -> Optional["SensorReading"]:
        """Pick the newest sample of ``key`` from a platform timeseries payload."""
        samples = telemetry.get(key) or []
        if not samples:
            return None
        sample = samples[0]
        ts = sample.get('ts')
        try:
            ts = int(ts) if ts is not None else None
        except (TypeError, ValueError):
            ts = None
        return cls(key=key, value=sample.get('value'), ts=ts)
