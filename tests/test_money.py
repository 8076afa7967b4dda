"""Tests for the scale-aware Decimal helpers."""

from decimal import Decimal

import pytest

from cart_totals import money
from cart_totals.errors import DivisionByZeroError, InvalidArgumentError


class TestToDecimal:
    def test_int(self) -> None:
        assert money.to_decimal(200) == Decimal(200)

    def test_float_uses_shortest_repr(self) -> None:
        """0.9 must not become its binary expansion."""
        assert money.to_decimal(0.9) == Decimal("0.9")

    def test_string_is_stripped(self) -> None:
        assert money.to_decimal(" 12.50 ") == Decimal("12.50")

    def test_with_scale_truncates(self) -> None:
        assert money.to_decimal("1.999", 2) == Decimal("1.99")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True, None, [1]])
    def test_rejects_non_numbers(self, value) -> None:
        with pytest.raises(InvalidArgumentError):
            money.to_decimal(value)


class TestRounding:
    def test_truncate_toward_zero(self) -> None:
        assert money.truncate(Decimal("2.789"), 2) == Decimal("2.78")
        assert money.truncate(Decimal("-2.789"), 2) == Decimal("-2.78")

    def test_round_half_up(self) -> None:
        assert money.round_half_up(Decimal("2.345"), 2) == Decimal("2.35")
        assert money.round_half_up(Decimal("-2.345"), 2) == Decimal("-2.35")
        assert money.round_half_up(Decimal("2.5")) == Decimal(3)

    def test_floor_and_ceil(self) -> None:
        assert money.floor(Decimal("2.71"), 1) == Decimal("2.7")
        assert money.ceil(Decimal("2.71"), 1) == Decimal("2.8")
        assert money.floor(Decimal("-2.71"), 1) == Decimal("-2.8")

    def test_negative_scale_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            money.truncate(Decimal(1), -1)


class TestArithmetic:
    def test_exact_without_scale(self) -> None:
        assert money.add(Decimal("0.1"), Decimal("0.2")) == Decimal("0.3")
        assert money.sub(Decimal(400), Decimal(40)) == Decimal(360)

    def test_mul_truncates_to_scale(self) -> None:
        assert money.mul(Decimal("3.3333"), Decimal(3), 2) == Decimal("9.99")
        assert money.mul(Decimal(400), Decimal("0.9"), 4) == Decimal("360.0000")

    def test_div_default_scale(self) -> None:
        result = money.div(Decimal(1), Decimal(3))
        assert result == Decimal("0." + "3" * money.DEFAULT_SCALE)

    def test_div_by_zero(self) -> None:
        with pytest.raises(DivisionByZeroError):
            money.div(Decimal(1), Decimal(0))

    def test_div_zero_numerator(self) -> None:
        assert money.div(Decimal(0), Decimal(7), 2) == money.ZERO

    def test_total_is_exact(self) -> None:
        values = [Decimal("0.0001")] * 3 + [Decimal(10)]
        assert money.total(values) == Decimal("10.0003")

    def test_total_of_nothing(self) -> None:
        assert money.total([]) == money.ZERO


class TestComparisons:
    def test_compare(self) -> None:
        assert money.compare(Decimal(1), Decimal(2)) == -1
        assert money.compare(Decimal(2), Decimal(1)) == 1
        assert money.compare(Decimal("1.004"), Decimal("1.001"), 2) == 0

    def test_predicates(self) -> None:
        assert money.is_zero(Decimal("0.000"))
        assert money.is_zero(Decimal("0.004"), 2)
        assert money.is_negative(Decimal("-0.01"))
        assert money.is_positive(Decimal("0.01"))
        assert not money.is_positive(money.ZERO)
