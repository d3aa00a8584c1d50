"""
Alert rule test data factories.
"""
from uuid import uuid4

import factory

from greenhouse_hub.domain.entities.alert_rule import AlertRule, AlertSeverity, ConditionType
from greenhouse_hub.domain.entities.session import DeviceTarget


class AlertRuleFactory(factory.Factory):
    """
    Factory for alert rules loaded for monitoring.

    Usage:
        rule = AlertRuleFactory()
        rule = AlertRuleFactory(condition_type=ConditionType.BETWEEN, threshold_min=10, threshold_max=30)
    """

    class Meta:
        model = AlertRule

    id = factory.LazyFunction(uuid4)
    device_id = factory.LazyFunction(uuid4)
    name = factory.Sequence(lambda n: f"Rule {n}")
    sensor_key = "air_temp"
    condition_type = ConditionType.ABOVE
    threshold_value = 35.0
    severity = AlertSeverity.WARNING
    cooldown_seconds = 1800
    is_active = True
    last_triggered_at = None
    device_name = "GH North"
    target = factory.LazyAttribute(
        lambda o: DeviceTarget(tenant="greenhouse-a", device_id="dev-1", name=o.device_name)
    )
