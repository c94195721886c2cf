"""In-process wallet adapter for collecting deposits and sending payouts."""

from __future__ import annotations

import logging
import threading

from .funds_errors import FundsAdapterError, InsufficientFundsError

logger = logging.getLogger(__name__)


class InMemoryFundsTransferAdapter:
    """Funds port backed by an in-memory map of external wallet balances.

    Deposits move value from the sender's wallet into custody; payouts move
    it from custody back to the recipient's wallet.
    """

    def __init__(self, initial_balances: dict[str, int] | None = None, initial_custody: int = 0):
        """Initialize wallet balances.

        Args:
            initial_balances: Optional starting wallet balances keyed by identity.
            initial_custody: Amount already held for the ledger, e.g. after a restart.

        Raises:
            ValueError: Raised when an initial balance or custody is negative.
        """

        if initial_custody < 0:
            raise ValueError("initial_custody must not be negative")
        self._wallets: dict[str, int] = {}
        self._custody = initial_custody
        self._lock = threading.RLock()
        for identity, amount in (initial_balances or {}).items():
            self.funds_credit(identity, amount)

    @property
    def custody_balance(self) -> int:
        """Return the amount currently held on behalf of the ledger."""

        return self._custody

    def funds_balance_of(self, identity: str) -> int:
        return self._wallets.get(identity, 0)

    def funds_credit(self, identity: str, amount: int) -> None:
        """Top up an external wallet outside of ledger custody.

        Args:
            identity: Wallet owner.
            amount: Non-negative amount to add.

        Raises:
            ValueError: Raised when amount is negative.
        """

        if amount < 0:
            raise ValueError("amount must not be negative")
        with self._lock:
            self._wallets[identity] = self._wallets.get(identity, 0) + amount

    def funds_collect(self, sender: str, amount: int) -> None:
        """Move a deposit from the sender wallet into custody.

        Args:
            sender: Identity paying the deposit.
            amount: Deposit amount.

        Raises:
            InsufficientFundsError: Raised when the sender wallet cannot cover the amount.
        """

        with self._lock:
            available = self._wallets.get(sender, 0)
            if available < amount:
                raise InsufficientFundsError(
                    f"insufficient funds: sender={sender} available={available} amount={amount}",
                    identity=sender,
                    amount=amount,
                )
            self._wallets[sender] = available - amount
            self._custody += amount
        logger.debug("funds collected sender=%s amount=%s", sender, amount)

    def funds_send(self, recipient: str, amount: int) -> None:
        """Move a payout from custody into the recipient wallet.

        Args:
            recipient: Identity receiving the payout.
            amount: Payout amount.

        Raises:
            FundsAdapterError: Raised when custody cannot cover the payout.
        """

        with self._lock:
            if self._custody < amount:
                raise FundsAdapterError(
                    f"custody shortfall: custody={self._custody} amount={amount}",
                    identity=recipient,
                    amount=amount,
                )
            self._custody -= amount
            self._wallets[recipient] = self._wallets.get(recipient, 0) + amount
        logger.debug("funds sent recipient=%s amount=%s", recipient, amount)
