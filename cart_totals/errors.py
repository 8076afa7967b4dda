"""Error types for the cart totals library."""

from typing import Optional


class CartError(Exception):
    """Base class for cart errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class InvalidArgumentError(CartError):
    """Invalid argument provided by caller."""

    def __init__(self, message: str):
        super().__init__(f"invalid argument: {message}")


class DivisionByZeroError(CartError):
    """Division by a zero decimal value."""

    def __init__(self, cause: Optional[Exception] = None):
        super().__init__("division by zero is not allowed", cause)


class ItemNotFoundError(CartError):
    """Requested cart item does not exist."""

    def __init__(self, cart_id: str):
        super().__init__(f"cart item not found: {cart_id}")
        self.cart_id = cart_id


class InconsistentStateError(CartError):
    """Internal stages disagree about which entities exist.

    Raised when a diff references a key that neither compared collection
    contains. This is a bug, never a user error.
    """

    def __init__(self, key: str):
        super().__init__(f"inconsistent state: key {key!r} missing from both collections")
        self.key = key


class ConvergenceError(CartError):
    """A reduction stage did not reach a fixed point within the restart limit."""

    def __init__(self, stage: str, max_iterations: int, promotion_key: str = ""):
        message = f"{stage} did not converge after {max_iterations} restarts"
        if promotion_key:
            message = f"{message} (last change by {promotion_key!r})"
        super().__init__(message)
        self.stage = stage
        self.max_iterations = max_iterations
        self.promotion_key = promotion_key
