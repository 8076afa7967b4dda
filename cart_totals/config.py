"""Cart configuration.

Environment variables:
    CART_ROUNDING_DECIMALS: Digits kept by the default total rounding (default: 2)
    CART_REMOVAL_FLOOR: "cart" (default) or "legacy", see RemovalFloor
    CART_MAX_ITERATIONS: Restart limit for each convergence stage (default: 1000)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .counter import RemovalFloor
from .errors import InvalidArgumentError
from .validation import require_non_negative, require_positive

DEFAULT_ROUNDING_DECIMALS = 2
DEFAULT_MAX_ITERATIONS = 1000


def parse_removal_floor(value: str) -> RemovalFloor:
    try:
        return RemovalFloor(value.strip().lower())
    except ValueError as e:
        choices = ", ".join(f.value for f in RemovalFloor)
        raise InvalidArgumentError(f"removal floor must be one of {choices}, got {value!r}") from e


def _int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class CartConfig:
    rounding_decimals: int = DEFAULT_ROUNDING_DECIMALS
    removal_floor: RemovalFloor = RemovalFloor.CART
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    def __post_init__(self) -> None:
        require_non_negative(self.rounding_decimals, "rounding decimals must be non-negative")
        require_positive(self.max_iterations, "max iterations must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> CartConfig:
        """Build a config from environment variables, falling back to defaults."""
        if environ is None:
            environ = os.environ

        floor = environ.get("CART_REMOVAL_FLOOR", "")
        return cls(
            rounding_decimals=_int_from_env(
                environ, "CART_ROUNDING_DECIMALS", DEFAULT_ROUNDING_DECIMALS
            ),
            removal_floor=parse_removal_floor(floor) if floor.strip() else RemovalFloor.CART,
            max_iterations=_int_from_env(environ, "CART_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS),
        )
