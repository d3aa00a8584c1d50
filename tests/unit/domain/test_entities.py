"""
Unit tests for domain entities.
"""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from freezegun import freeze_time

from greenhouse_hub.domain.entities import (
    AlertSeverity,
    CommandDescriptor,
    CommandState,
    ConnectionState,
    DeviceStatusSnapshot,
    DeviceTarget,
    MotorCommand,
    NotificationEvent,
    NotificationType,
    PendingCommand,
    SensorReading,
    SessionToken,
    TenantCredentials,
)
from greenhouse_hub.domain.services.sensor_points import sensor_point_for

from tests.factories import AlertRuleFactory

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestSessionEntities:
    """Tests for credentials, targets and tokens."""

    def test_api_root_strips_trailing_slash(self):
        credentials = TenantCredentials("t", "http://tb.test/", "u", "p")
        assert credentials.api_root == "http://tb.test"

    def test_target_prints_name_or_id(self):
        assert str(DeviceTarget("t", "dev-1", "GH North")) == "GH North"
        assert str(DeviceTarget("t", "dev-1")) == "dev-1"

    def test_token_validity_respects_buffer(self):
        token = SessionToken(token="abc", refresh_token=None, expires_at=1000.0)

        assert token.is_valid(now=900.0, buffer=60.0) is True
        assert token.is_valid(now=940.0, buffer=60.0) is False


class TestCommandEntities:
    """Tests for command state handling."""

    def test_motor_expected_flags(self):
        assert MotorCommand.STOP.expected_flags == (False, False)
        assert MotorCommand.FORWARD.expected_flags == (True, False)
        assert MotorCommand.REVERSE.expected_flags == (False, True)

    def test_invalid_motor_command(self):
        with pytest.raises(ValueError):
            MotorCommand(3)

    def test_pending_command_resolves_once(self):
        pending = PendingCommand(
            command_id="set_fan_1_cmd",
            descriptor=CommandDescriptor("set_fan_1_cmd"),
            params=1,
            expected={"fan_1_cmd": True},
            started_at=0.0,
            deadline=8.0,
        )

        assert pending.transition(CommandState.CONFIRMING) is True
        assert not pending.resolved.is_set()

        assert pending.transition(CommandState.CONFIRMED) is True
        assert pending.resolved.is_set()
        assert pending.transition(CommandState.TIMED_OUT) is False
        assert pending.state == CommandState.CONFIRMED

    def test_terminal_states(self):
        assert CommandState.CONFIRMED.is_terminal
        assert CommandState.SUPERSEDED.is_terminal
        assert not CommandState.CONFIRMING.is_terminal
        assert not CommandState.SENT.is_terminal


class TestDeviceStatusSnapshot:
    """Tests for reachability snapshots."""

    def test_going_offline_records_start(self):
        snapshot = DeviceStatusSnapshot(device_id=uuid4(), is_online=True, last_checked=NOW)

        offline = snapshot.transitioned(False, NOW + timedelta(seconds=30))

        assert offline.connection_state == ConnectionState.OFFLINE
        assert offline.offline_since == NOW + timedelta(seconds=30)

    def test_coming_back_clears_start(self):
        since = NOW - timedelta(minutes=5)
        snapshot = DeviceStatusSnapshot(uuid4(), False, since, offline_since=since)

        assert snapshot.offline_duration(NOW) == 300.0
        online = snapshot.transitioned(True, NOW)
        assert online.offline_since is None
        assert online.offline_duration(NOW) is None

    def test_touched_keeps_status(self):
        snapshot = DeviceStatusSnapshot(uuid4(), False, NOW, offline_since=NOW)
        later = snapshot.touched(NOW + timedelta(seconds=30))

        assert later.is_online is False
        assert later.offline_since == NOW
        assert later.last_checked == NOW + timedelta(seconds=30)


class TestAlertRule:
    """Tests for alert rule cooldown."""

    def test_never_triggered_can_trigger(self):
        assert AlertRuleFactory().can_trigger(NOW) is True

    def test_cooldown_blocks_until_elapsed(self):
        rule = AlertRuleFactory(cooldown_seconds=600, last_triggered_at=NOW - timedelta(seconds=599))
        assert rule.can_trigger(NOW) is False

        rule = AlertRuleFactory(cooldown_seconds=600, last_triggered_at=NOW - timedelta(seconds=600))
        assert rule.can_trigger(NOW) is True

    def test_naive_trigger_time_is_utc(self):
        rule = AlertRuleFactory(
            cooldown_seconds=600,
            last_triggered_at=(NOW - timedelta(seconds=60)).replace(tzinfo=None),
        )
        assert rule.in_cooldown(NOW) is True

    def test_inactive_rule_cannot_trigger(self):
        assert AlertRuleFactory(is_active=False).can_trigger(NOW) is False

    @freeze_time("2026-03-01 12:00:00")
    def test_record_trigger_marks_updated(self):
        rule = AlertRuleFactory()

        rule.record_trigger(NOW)

        assert rule.last_triggered_at == NOW
        assert rule.updated_at == NOW
        assert rule.in_cooldown(NOW + timedelta(seconds=10)) is True


class TestTelemetry:
    """Tests for readings and sensor points."""

    def test_latest_from_platform_payload(self):
        reading = SensorReading.latest_from(
            "air_temp", {"air_temp": [{"ts": 1_700_000_000_000, "value": "24.5"}]}
        )

        assert reading.numeric_value == 24.5
        assert reading.age_seconds(1_700_000_060.0) == 60.0

    def test_missing_and_non_numeric(self):
        assert SensorReading.latest_from("air_temp", {}) is None
        assert SensorReading.latest_from("air_temp", {"air_temp": []}) is None
        assert SensorReading("k", "n/a", 1).numeric_value is None
        assert SensorReading("k", 1.0).age_seconds(10.0) is None

    def test_sensor_points(self):
        assert sensor_point_for("air_humidity").group_id == "air"
        soil = sensor_point_for("soil3_moisture")
        assert soil.group_id == "soil:3"
        assert soil.label == "Soil sensor 3"
        assert sensor_point_for("soil11_moisture") is None
        assert sensor_point_for("status") is None

    def test_air_sorts_before_soil(self):
        points = [sensor_point_for("soil2_temp"), sensor_point_for("air_temp"), sensor_point_for("soil1_temp")]
        ordered = sorted(points, key=lambda p: p.sort_key)

        assert [p.group_id for p in ordered] == ["air", "soil:1", "soil:2"]


class TestNotificationEvent:
    """Tests for event serialization."""

    def test_to_dict(self):
        device_id = uuid4()
        event = NotificationEvent(
            type=NotificationType.DEVICE_OFFLINE,
            severity=AlertSeverity.CRITICAL,
            title="Device offline: GH North",
            message="GH North: Connection lost",
            device_id=device_id,
            tenant="greenhouse-a",
            created_at=NOW,
        )

        data = event.to_dict()

        assert data["type"] == "device_offline"
        assert data["severity"] == "critical"
        assert data["device_id"] == str(device_id)
        assert data["created_at"] == NOW.isoformat()
