"""Validation helpers for argument precondition checks.

Eliminates repeated validation boilerplate across cart operations.
"""

from .errors import InvalidArgumentError


def require_positive(value: int, error_msg: str) -> None:
    """Require that a value is greater than zero."""
    if value <= 0:
        raise InvalidArgumentError(error_msg)


def require_non_negative(value: int, error_msg: str) -> None:
    """Require that a value is zero or greater."""
    if value < 0:
        raise InvalidArgumentError(error_msg)


def require_integer(value: object, error_msg: str) -> None:
    """Require an int (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(error_msg)
