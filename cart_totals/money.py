"""Scale-aware helpers around :class:`decimal.Decimal`.

All money in the library is a ``Decimal``. These helpers give the
arithmetic an explicit *scale* (digits after the point) the way the
pricing code expects it:

- ``add``/``sub``/``mul``/``div`` compute exactly in a wide context and,
  when a scale is given, truncate toward zero to that scale.
- ``round_half_up``/``floor``/``ceil`` change the scale with the named
  rounding rule.

Example::

    subtotal = money.mul(money.to_decimal(200), money.to_decimal(2))
    discounted = money.mul(subtotal, money.to_decimal("0.9"), 4)
"""

from __future__ import annotations

from decimal import (
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
    localcontext,
)
from typing import Iterable, Optional, Union

from .errors import DivisionByZeroError, InvalidArgumentError

DecimalLike = Union[int, float, str, Decimal]

# Scale used by div() when the caller does not ask for one.
DEFAULT_SCALE = 16

# Scale for intermediate totals; wide enough that summing never truncates.
TOTAL_SCALE = 32

_PRECISION = 96

ZERO = Decimal(0)
ONE = Decimal(1)


def _check_scale(scale: Optional[int]) -> None:
    if scale is not None and scale < 0:
        raise InvalidArgumentError(f"scale must be non-negative, got {scale}")


def _quantize(value: Decimal, scale: int, rounding: str) -> Decimal:
    _check_scale(scale)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return value.quantize(ONE.scaleb(-scale), rounding=rounding)


def to_decimal(value: DecimalLike, scale: Optional[int] = None) -> Decimal:
    """Convert an int, float, str or Decimal to a Decimal.

    Floats go through their shortest repr so ``0.9`` becomes
    ``Decimal("0.9")`` rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidArgumentError("booleans are not decimal values")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise InvalidArgumentError(f"not a decimal number: {value!r}") from e
    else:
        raise InvalidArgumentError(f"cannot convert {type(value).__name__} to decimal")

    if not result.is_finite():
        raise InvalidArgumentError(f"not a finite decimal: {value!r}")
    if scale is not None:
        return truncate(result, scale)
    return result


def truncate(value: Decimal, scale: int) -> Decimal:
    """Cut ``value`` to ``scale`` digits, rounding toward zero."""
    return _quantize(value, scale, ROUND_DOWN)


def round_half_up(value: Decimal, scale: int = 0) -> Decimal:
    """Round to ``scale`` digits, halves away from zero."""
    return _quantize(value, scale, ROUND_HALF_UP)


def floor(value: Decimal, scale: int = 0) -> Decimal:
    return _quantize(value, scale, ROUND_FLOOR)


def ceil(value: Decimal, scale: int = 0) -> Decimal:
    return _quantize(value, scale, ROUND_CEILING)


def _finish(result: Decimal, scale: Optional[int]) -> Decimal:
    if scale is None:
        return result
    return truncate(result, scale)


def add(a: Decimal, b: Decimal, scale: Optional[int] = None) -> Decimal:
    _check_scale(scale)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        result = a + b
    return _finish(result, scale)


def sub(a: Decimal, b: Decimal, scale: Optional[int] = None) -> Decimal:
    _check_scale(scale)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        result = a - b
    return _finish(result, scale)


def mul(a: Decimal, b: Decimal, scale: Optional[int] = None) -> Decimal:
    _check_scale(scale)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        result = a * b
    return _finish(result, scale)


def div(a: Decimal, b: Decimal, scale: Optional[int] = None) -> Decimal:
    """Divide ``a`` by ``b``, truncating to ``scale`` (default DEFAULT_SCALE).

    Raises:
        DivisionByZeroError: If ``b`` is zero.
    """
    _check_scale(scale)
    if b.is_zero():
        raise DivisionByZeroError()
    if a.is_zero():
        return ZERO
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        result = a / b
    return truncate(result, DEFAULT_SCALE if scale is None else scale)


def total(values: Iterable[Decimal]) -> Decimal:
    """Sum values without losing digits below TOTAL_SCALE."""
    result = ZERO
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        for value in values:
            result = result + value
    if -result.as_tuple().exponent > TOTAL_SCALE:
        return truncate(result, TOTAL_SCALE)
    return result


def compare(a: Decimal, b: Decimal, scale: Optional[int] = None) -> int:
    """Return -1, 0 or 1. With a scale, both sides are rounded half-up first."""
    if scale is not None:
        a = round_half_up(a, scale)
        b = round_half_up(b, scale)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_zero(value: Decimal, scale: Optional[int] = None) -> bool:
    if scale is not None:
        value = round_half_up(value, scale)
    return value.is_zero()


def is_negative(value: Decimal) -> bool:
    return value < 0


def is_positive(value: Decimal) -> bool:
    return value > 0
