"""Unit tests for lenient numeric coercion."""
import pytest

from pbp_grader.services.utils.numbers import as_num


class TestAsNum:

    @pytest.mark.parametrize("value, expected", [
        ("+3.5", 3.5),
        ("-7", -7),
        ("24*", 24),
        ("1,538", 1538),
        (41.5, 41.5),
        (21.0, 21),
        (7, 7),
    ])
    def test_parses(self, value, expected):
        assert as_num(value) == expected

    def test_integral_values_come_back_as_int(self):
        assert isinstance(as_num("14.0"), int)

    @pytest.mark.parametrize("value", [None, "", "n/a", "-", ".", True, float("nan"), float("inf")])
    def test_unparsable(self, value):
        assert as_num(value) is None
