"""
Sensor threshold monitor.

Sweeps active alert rules, compares the latest reading of each rule's
sensor against its thresholds and emits cooldown-gated alerts. Readings
that stopped arriving are summarized per greenhouse instead.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional
from uuid import UUID

from ...application.interfaces.notifications import NotificationSink
from ...application.interfaces.unit_of_work import UnitOfWorkFactory
from ...config import MonitorSettings, get_settings
from ...domain.entities.alert_rule import AlertRule, AlertSeverity
from ...domain.entities.base import utc_now
from ...domain.entities.notification import NotificationEvent, NotificationType
from ...domain.entities.telemetry import SensorReading
from ...domain.exceptions import RuleEvaluationError
from ...domain.services.sensor_points import SensorPoint, sensor_point_for
from ...domain.services.threshold_evaluator import ThresholdEvaluator
from ...infrastructure.platform.thingsboard_client import ThingsBoardClient
from .periodic import PeriodicMonitor

logger = logging.getLogger(__name__)


@dataclass
class StalePoint:
    """A sensor point with at least one stale or missing key."""
    point: SensorPoint
    keys: List[str] = field(default_factory=list)
    reason: str = "no_data"  # or "stale"
    last_ts: Optional[int] = None

    def merge(self, key: str, reason: str, ts: Optional[int]) -> None:
        if key not in self.keys:
            self.keys.append(key)
        if reason == "stale":
            self.reason = "stale"
        if ts is not None and (self.last_ts is None or ts > self.last_ts):
            self.last_ts = ts


@dataclass
class StaleDevice:
    """Stale sensor points of one greenhouse within a sweep."""
    device_id: UUID
    name: str
    tenant: Optional[str]
    points: Dict[str, StalePoint] = field(default_factory=dict)

    def sorted_points(self) -> List[StalePoint]:
        return sorted(self.points.values(), key=lambda p: p.point.sort_key)


class SensorMonitor(PeriodicMonitor):
    """
    Evaluates alert rules against live readings.

    Each rule fires at most once per cooldown window; the trigger time
    is persisted before the alert is emitted.
    """

    name = "sensor monitor"

    def __init__(
        self,
        client: ThingsBoardClient,
        uow_factory: UnitOfWorkFactory,
        sink: NotificationSink,
        settings: Optional[MonitorSettings] = None,
        evaluator: Optional[ThresholdEvaluator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self.client = client
        self.settings = settings or get_settings().monitors
        self.evaluator = evaluator or ThresholdEvaluator()
        self._uow_factory = uow_factory
        self._sink = sink
        self._clock = clock

        # Last offline summary per greenhouse; cleared once it recovers
        self._offline_notified_at: Dict[UUID, datetime] = {}

    async def check_all(self) -> None:
        """Evaluate every active rule, then report stale sensors."""
        async with self._uow_factory() as uow:
            rules = await uow.alert_rules.get_active_rules_for_ready_devices()

        logger.info(f"Checking {len(rules)} alert rules")
        now = self._clock()
        stale: Dict[UUID, StaleDevice] = {}

        for rule in rules:
            try:
                await self.check_rule(rule, now, stale)
            except RuleEvaluationError as e:
                logger.warning(e.message)
            except Exception as e:
                logger.error(f"Error checking alert rule {rule.id} ({rule.sensor_key}): {e}")

        await self._report_stale(stale, now)

    async def check_rule(
        self,
        rule: AlertRule,
        now: Optional[datetime] = None,
        stale: Optional[Dict[UUID, StaleDevice]] = None,
    ) -> bool:
        """
        Check one rule.

        Returns:
            True if an alert was emitted.

        Raises:
            RuleEvaluationError: If the rule lacks required thresholds.
        """
        now = now or self._clock()

        if not rule.can_trigger(now):
            logger.debug(f"Alert rule {rule.id} in cooldown, skipping")
            return False
        if rule.target is None:
            logger.warning(f"Alert rule {rule.id} has no device target, skipping")
            return False

        telemetry = await self.client.get_latest_telemetry(rule.target, [rule.sensor_key])
        reading = SensorReading.latest_from(rule.sensor_key, telemetry)

        if self._is_stale(reading, now):
            if stale is not None:
                self._collect_stale(rule, reading, now, stale)
            return False

        value = reading.numeric_value
        if value is None:
            logger.debug(f"Non-numeric reading for {rule.sensor_key}: {reading.value!r}")
            return False

        if not self.evaluator.evaluate(rule, value):
            return False

        message = self.evaluator.build_message(rule, value)
        if self._stopped:
            return False

        async with self._uow_factory() as uow:
            await uow.alert_rules.mark_triggered(rule.id, now)
            await uow.commit()
        rule.record_trigger(now)

        device_name = rule.device_name or str(rule.target)
        logger.info(f"Threshold triggered: {device_name} - {message}")
        await self._emit(NotificationEvent(
            type=NotificationType.SENSOR_ALERT,
            severity=rule.severity,
            title=f"{rule.name}: {rule.sensor_key} out of range",
            message=f"{device_name}: {message}",
            metadata={
                'greenhouse_id': str(rule.device_id),
                'greenhouse_name': device_name,
                'rule_id': str(rule.id),
                'sensor_key': rule.sensor_key,
                'current_value': value,
                'condition_type': rule.condition_type.value,
                'threshold_value': rule.threshold_value,
                'threshold_min': rule.threshold_min,
                'threshold_max': rule.threshold_max,
                'ts': reading.ts,
            },
            device_id=rule.device_id,
            tenant=rule.target.tenant,
        ))
        return True

    # =========================================================================
    # Stale readings
    # =========================================================================

    def _is_stale(self, reading: Optional[SensorReading], now: datetime) -> bool:
        if reading is None or not reading.ts:
            return True
        age = reading.age_seconds(now.timestamp())
        return age is not None and age > self.settings.stale_after_seconds

    def _collect_stale(
        self,
        rule: AlertRule,
        reading: Optional[SensorReading],
        now: datetime,
        stale: Dict[UUID, StaleDevice],
    ) -> None:
        point = sensor_point_for(rule.sensor_key)
        if point is None:
            return

        device = stale.get(rule.device_id)
        if device is None:
            device = StaleDevice(
                device_id=rule.device_id,
                name=rule.device_name or str(rule.target),
                tenant=rule.target.tenant if rule.target else None,
            )
            stale[rule.device_id] = device

        has_ts = reading is not None and bool(reading.ts)
        entry = device.points.get(point.group_id)
        if entry is None:
            entry = StalePoint(point=point)
            device.points[point.group_id] = entry
        entry.merge(
            rule.sensor_key,
            "stale" if has_ts else "no_data",
            reading.ts if has_ts else None,
        )

    async def _report_stale(self, stale: Dict[UUID, StaleDevice], now: datetime) -> None:
        gap = timedelta(seconds=self.settings.offline_notify_every_seconds)

        for device_id, device in stale.items():
            last = self._offline_notified_at.get(device_id)
            if last is not None and now - last < gap:
                continue

            points = device.sorted_points()
            lines = "\n".join(f"- {p.point.label}: {', '.join(p.keys)}" for p in points)
            await self._emit(NotificationEvent(
                type=NotificationType.SENSOR_OFFLINE,
                severity=AlertSeverity.WARNING,
                title=f"Sensors offline ({device.name})",
                message=f"{device.name}: {len(points)} offline point(s)\n{lines}",
                metadata={
                    'greenhouse_id': str(device_id),
                    'greenhouse_name': device.name,
                    'offline_point_count': len(points),
                    'points': [
                        {
                            'group_id': p.point.group_id,
                            'label': p.point.label,
                            'keys': list(p.keys),
                            'reason': p.reason,
                            'last_ts': p.last_ts,
                        }
                        for p in points
                    ],
                    'notify_every_seconds': self.settings.offline_notify_every_seconds,
                },
                device_id=device_id,
                tenant=device.tenant,
            ))
            self._offline_notified_at[device_id] = now
            logger.info(f"Offline summary sent: {device.name} ({len(points)} points)")

        # Recovered greenhouses notify immediately next time they go stale
        for device_id in list(self._offline_notified_at):
            if device_id not in stale:
                del self._offline_notified_at[device_id]

    async def _emit(self, event: NotificationEvent) -> None:
        if self._stopped:
            return
        try:
            await self._sink.emit(event)
        except Exception as e:
            logger.error(f"Error emitting {event.type.value} event: {e}")
