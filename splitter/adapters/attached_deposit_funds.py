"""Funds adapter for deposits that arrive attached to the split request."""

from __future__ import annotations

import logging

from .in_memory_funds import InMemoryFundsTransferAdapter

logger = logging.getLogger(__name__)


class AttachedDepositFundsAdapter(InMemoryFundsTransferAdapter):
    """Funds port where the deposited amount accompanies the split call.

    The caller has already handed the amount over when `split` runs, so
    collecting only moves it into custody. Payouts leave custody and are
    recorded per recipient, readable through `funds_balance_of`.
    """

    def funds_collect(self, sender: str, amount: int) -> None:
        """Take the attached deposit into custody.

        Args:
            sender: Identity that attached the deposit.
            amount: Attached amount.

        Raises:
            ValueError: Raised when amount is not positive.
        """

        if amount <= 0:
            raise ValueError("attached deposit must be positive")
        with self._lock:
            self._custody += amount
        logger.debug("attached deposit received sender=%s amount=%s", sender, amount)
