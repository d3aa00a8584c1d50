"""
Threshold Evaluator Domain Service.

Evaluates alert rule conditions against a numeric reading and builds
the human readable alert message.
"""
from typing import Optional

from ..entities.alert_rule import AlertRule, ConditionType
from ..exceptions import RuleEvaluationError


def format_value(value: Optional[float]) -> str:
    """Format a reading for messages: one decimal from 100 up, two below."""
    if value is None:
        return "-"
    if abs(value) >= 100:
        return f"{value:.1f}"
    return f"{value:.2f}"


class ThresholdEvaluator:
    """Pure domain service for alert rule conditions."""

    def evaluate(self, rule: AlertRule, value: float) -> bool:
        """
        Check if ``value`` meets the rule's condition.

        Raises:
            RuleEvaluationError: If the rule lacks the thresholds its
                condition needs.
        """
        condition = rule.condition_type

        if condition == ConditionType.ABOVE:
            return value > self._single(rule)
        if condition == ConditionType.BELOW:
            return value < self._single(rule)
        if condition == ConditionType.EQUAL:
            return value == self._single(rule)

        low, high = self._range(rule)
        if condition == ConditionType.BETWEEN:
            return low <= value <= high
        if condition == ConditionType.OUTSIDE:
            return value < low or value > high

        raise RuleEvaluationError(rule.id, f"unknown condition {condition!r}")

    def build_message(self, rule: AlertRule, value: float) -> str:
        """e.g. ``air_temp is 41.20, above 35.00``."""
        reading = f"{rule.sensor_key} is {format_value(value)}"
        condition = rule.condition_type

        if condition.is_range:
            bounds = f"{format_value(rule.threshold_min)} and {format_value(rule.threshold_max)}"
            if condition == ConditionType.BETWEEN:
                return f"{reading}, between {bounds}"
            return f"{reading}, outside {bounds}"

        return f"{reading}, {condition.value} {format_value(rule.threshold_value)}"

    @staticmethod
    def _single(rule: AlertRule) -> float:
        if rule.threshold_value is None:
            raise RuleEvaluationError(
                rule.id, f"condition '{rule.condition_type.value}' requires threshold_value"
            )
        return rule.threshold_value

    @staticmethod
    def _range(rule: AlertRule) -> tuple:
        if rule.threshold_min is None or rule.threshold_max is None:
            raise RuleEvaluationError(
                rule.id,
                f"condition '{rule.condition_type.value}' requires threshold_min and threshold_max",
            )
        return rule.threshold_min, rule.threshold_max
