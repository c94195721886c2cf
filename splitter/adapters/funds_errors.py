"""Project-native typed exceptions for funds adapter failures."""

from __future__ import annotations


class FundsAdapterError(RuntimeError):
    """Base exception for adapter-level funds movement failures.

    Attributes:
        identity: Identity whose funds could not be moved.
        amount: Amount that could not be moved.
    """

    def __init__(self, message: str, identity: str | None = None, amount: int | None = None):
        super().__init__(message)
        self.identity = identity
        self.amount = amount


class InsufficientFundsError(FundsAdapterError):
    """Sender cannot cover the requested deposit."""
