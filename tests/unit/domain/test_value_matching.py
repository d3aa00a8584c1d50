"""
Unit tests for attribute value matching.
"""
import pytest

from greenhouse_hub.domain.services.value_matching import (
    as_bool,
    default_expected_value,
    values_match,
)


class TestValuesMatch:
    """Tests for type-normalizing comparison."""

    @pytest.mark.parametrize("actual,expected", [
        (True, 1),
        (1, True),
        ("1", True),
        ("true", 1),
        (" TRUE ", "1"),
        (False, 0),
        ("0", False),
        ("false", 0),
        (0.0, False),
    ])
    def test_boolean_like_values_are_equivalent(self, actual, expected):
        assert values_match(actual, expected) is True

    @pytest.mark.parametrize("actual,expected", [
        (True, 0),
        ("0", True),
        ("false", "1"),
        (1, False),
    ])
    def test_opposite_flags_do_not_match(self, actual, expected):
        assert values_match(actual, expected) is False

    def test_other_values_compare_by_string_form(self):
        assert values_match("08:30", "08:30") is True
        assert values_match(45, "45") is True
        assert values_match(" 45 ", 45) is True
        assert values_match("08:30", "08:31") is False

    def test_missing_attribute_never_matches(self):
        assert values_match(None, False) is False
        assert values_match(None, "None") is False

    def test_number_outside_flag_range_is_not_a_flag(self):
        # 2 is not boolean-like, so it compares as text against True
        assert values_match(2, True) is False
        assert values_match(2, "2") is True


class TestAsBool:
    """Tests for boolean-like interpretation."""

    def test_recognized_values(self):
        assert as_bool(True) is True
        assert as_bool(0) is False
        assert as_bool("1") is True
        assert as_bool("False") is False

    def test_unrecognized_values(self):
        assert as_bool(5) is None
        assert as_bool("on") is None
        assert as_bool(None) is None
        assert as_bool([1]) is None


class TestDefaultExpectedValue:
    """Tests for the expected value of commands sent without one."""

    @pytest.mark.parametrize("params,expected", [
        (1, True),
        ("1", True),
        (True, True),
        (0, False),
        ("0", False),
        (False, False),
    ])
    def test_flag_params(self, params, expected):
        assert default_expected_value(params) is expected

    def test_value_params_expect_themselves(self):
        assert default_expected_value("08:30") == "08:30"
        assert default_expected_value(45) == 45
