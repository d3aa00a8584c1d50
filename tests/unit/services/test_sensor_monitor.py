"""
Unit tests for SensorMonitor.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from greenhouse_hub.application.services.sensor_monitor import SensorMonitor
from greenhouse_hub.domain.entities.alert_rule import AlertSeverity, ConditionType
from greenhouse_hub.domain.entities.notification import NotificationType

from tests.factories import AlertRuleFactory

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)


def telemetry(**samples):
    """Platform payload: ``telemetry(air_temp=(41.2, ts_ms))``."""
    return {key: [{"ts": ts, "value": value}] for key, (value, ts) in samples.items()}


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.get_latest_telemetry = AsyncMock(return_value={})
    return client


@pytest.fixture
def monitor(mock_client, uow_factory, sink, monitor_settings):
    return SensorMonitor(mock_client, uow_factory, sink, settings=monitor_settings, clock=lambda: NOW)


class TestCheckRule:
    """Tests for single rule evaluation."""

    @pytest.mark.asyncio
    async def test_triggered_rule_emits_alert(self, monitor, mock_client, mock_uow, sink):
        rule = AlertRuleFactory(sensor_key="air_temp", threshold_value=35.0, severity=AlertSeverity.CRITICAL)
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=("41.2", NOW_MS - 10_000))

        assert await monitor.check_rule(rule, NOW) is True

        event = sink.events[0]
        assert event.type == NotificationType.SENSOR_ALERT
        assert event.severity == AlertSeverity.CRITICAL
        assert event.message == "GH North: air_temp is 41.20, above 35.00"
        assert event.metadata["current_value"] == 41.2
        assert event.metadata["rule_id"] == str(rule.id)
        mock_client.get_latest_telemetry.assert_awaited_once_with(rule.target, ["air_temp"])

    @pytest.mark.asyncio
    async def test_trigger_time_persisted_before_alert(self, monitor, mock_client, mock_uow, sink):
        rule = AlertRuleFactory()
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=(40, NOW_MS))
        order = []
        mock_uow.alert_rules.mark_triggered.side_effect = lambda *a: order.append("persist")
        sink.emit = AsyncMock(side_effect=lambda e: order.append("emit"))

        await monitor.check_rule(rule, NOW)

        assert order == ["persist", "emit"]
        mock_uow.alert_rules.mark_triggered.assert_awaited_once_with(rule.id, NOW)
        mock_uow.commit.assert_awaited_once()
        assert rule.last_triggered_at == NOW

    @pytest.mark.asyncio
    async def test_condition_not_met(self, monitor, mock_client, mock_uow, sink):
        rule = AlertRuleFactory(threshold_value=35.0)
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=(30, NOW_MS))

        assert await monitor.check_rule(rule, NOW) is False
        assert sink.events == []
        mock_uow.alert_rules.mark_triggered.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cooldown_skips_without_fetching(self, monitor, mock_client, sink):
        rule = AlertRuleFactory(cooldown_seconds=1800, last_triggered_at=NOW - timedelta(minutes=10))

        assert await monitor.check_rule(rule, NOW) is False
        mock_client.get_latest_telemetry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cooldown_expired_triggers_again(self, monitor, mock_client, sink):
        rule = AlertRuleFactory(cooldown_seconds=1800, last_triggered_at=NOW - timedelta(minutes=31))
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=(40, NOW_MS))

        assert await monitor.check_rule(rule, NOW) is True

    @pytest.mark.asyncio
    async def test_second_check_inside_cooldown_is_silent(self, monitor, mock_client, sink):
        rule = AlertRuleFactory()
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=(40, NOW_MS))

        await monitor.check_rule(rule, NOW)
        await monitor.check_rule(rule, NOW + timedelta(seconds=60))

        assert len(sink.events) == 1

    @pytest.mark.asyncio
    async def test_non_numeric_reading_skipped(self, monitor, mock_client, sink):
        rule = AlertRuleFactory()
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=("error", NOW_MS))

        assert await monitor.check_rule(rule, NOW) is False
        assert sink.events == []

    @pytest.mark.asyncio
    async def test_rule_without_target_skipped(self, monitor, mock_client):
        rule = AlertRuleFactory(target=None)

        assert await monitor.check_rule(rule, NOW) is False
        mock_client.get_latest_telemetry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_range_rule(self, monitor, mock_client, sink):
        rule = AlertRuleFactory(
            sensor_key="soil1_moisture",
            condition_type=ConditionType.OUTSIDE,
            threshold_value=None,
            threshold_min=20.0,
            threshold_max=60.0,
        )
        mock_client.get_latest_telemetry.return_value = telemetry(soil1_moisture=(12.5, NOW_MS))

        assert await monitor.check_rule(rule, NOW) is True
        assert sink.events[0].message.endswith("soil1_moisture is 12.50, outside 20.00 and 60.00")


class TestCheckAll:
    """Tests for full sweeps."""

    @pytest.mark.asyncio
    async def test_bad_rule_does_not_stop_sweep(self, monitor, mock_client, mock_uow, sink):
        broken = AlertRuleFactory(condition_type=ConditionType.BETWEEN, threshold_min=None, threshold_max=None)
        good = AlertRuleFactory(sensor_key="air_humidity", threshold_value=80.0)
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = [broken, good]
        mock_client.get_latest_telemetry.side_effect = [
            telemetry(air_temp=(25, NOW_MS)),
            telemetry(air_humidity=(95, NOW_MS)),
        ]

        await monitor.check_all()

        assert [e.metadata["sensor_key"] for e in sink.events] == ["air_humidity"]

    @pytest.mark.asyncio
    async def test_platform_error_isolated_per_rule(self, monitor, mock_client, mock_uow, sink):
        rules = [AlertRuleFactory(), AlertRuleFactory()]
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = rules
        mock_client.get_latest_telemetry.side_effect = [
            RuntimeError("connection reset"),
            telemetry(air_temp=(40, NOW_MS)),
        ]

        await monitor.check_all()

        assert len(sink.events) == 1
        assert sink.events[0].metadata["rule_id"] == str(rules[1].id)


class TestStaleReadings:
    """Tests for sensor offline summaries."""

    @pytest.mark.asyncio
    async def test_stale_and_missing_readings_summarized_per_device(self, monitor, mock_client, mock_uow, sink):
        device_id = uuid4()
        rules = [
            AlertRuleFactory(device_id=device_id, sensor_key="soil2_moisture"),
            AlertRuleFactory(device_id=device_id, sensor_key="air_temp"),
            AlertRuleFactory(device_id=device_id, sensor_key="air_humidity"),
        ]
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = rules
        mock_client.get_latest_telemetry.side_effect = [
            {},
            telemetry(air_temp=(40, NOW_MS - 301_000)),
            telemetry(air_humidity=(50, NOW_MS - 600_000)),
        ]

        await monitor.check_all()

        assert len(sink.events) == 1
        event = sink.events[0]
        assert event.type == NotificationType.SENSOR_OFFLINE
        assert event.severity == AlertSeverity.WARNING
        assert event.metadata["offline_point_count"] == 2
        points = event.metadata["points"]
        assert [p["group_id"] for p in points] == ["air", "soil:2"]
        assert points[0]["keys"] == ["air_temp", "air_humidity"]
        assert points[0]["reason"] == "stale"
        assert points[0]["last_ts"] == NOW_MS - 301_000
        assert points[1]["reason"] == "no_data"
        assert "- Air sensor: air_temp, air_humidity" in event.message

    @pytest.mark.asyncio
    async def test_stale_reading_never_alerts(self, monitor, mock_client, mock_uow, sink):
        rule = AlertRuleFactory(threshold_value=35.0)
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = [rule]
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=(90, NOW_MS - 3_600_000))

        await monitor.check_all()

        assert [e.type for e in sink.events] == [NotificationType.SENSOR_OFFLINE]
        mock_uow.alert_rules.mark_triggered.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_summary_repeats_only_after_gap(self, mock_client, uow_factory, mock_uow, sink, monitor_settings):
        now = [NOW]
        monitor = SensorMonitor(mock_client, uow_factory, sink, settings=monitor_settings, clock=lambda: now[0])
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = [AlertRuleFactory()]

        await monitor.check_all()
        now[0] = NOW + timedelta(minutes=10)
        await monitor.check_all()
        assert len(sink.events) == 1

        now[0] = NOW + timedelta(minutes=31)
        await monitor.check_all()
        assert len(sink.events) == 2

    @pytest.mark.asyncio
    async def test_gate_resets_after_recovery(self, mock_client, uow_factory, mock_uow, sink, monitor_settings):
        now = [NOW]
        monitor = SensorMonitor(mock_client, uow_factory, sink, settings=monitor_settings, clock=lambda: now[0])
        rule = AlertRuleFactory(threshold_value=100.0)
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = [rule]

        await monitor.check_all()

        now[0] = NOW + timedelta(minutes=1)
        mock_client.get_latest_telemetry.return_value = telemetry(air_temp=(20, int(now[0].timestamp() * 1000)))
        await monitor.check_all()

        now[0] = NOW + timedelta(minutes=2)
        mock_client.get_latest_telemetry.return_value = {}
        await monitor.check_all()

        assert [e.type for e in sink.events] == [
            NotificationType.SENSOR_OFFLINE,
            NotificationType.SENSOR_OFFLINE,
        ]

    @pytest.mark.asyncio
    async def test_keys_outside_sensor_points_are_not_summarized(self, monitor, mock_client, mock_uow, sink):
        mock_uow.alert_rules.get_active_rules_for_ready_devices.return_value = [
            AlertRuleFactory(sensor_key="water_tank_level"),
        ]

        await monitor.check_all()

        assert sink.events == []
