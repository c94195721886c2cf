"""Typed interfaces for ledger-layer state, funds movement and persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .events import LedgerEvent


@dataclass(frozen=True)
class LedgerRoles:
    """Role identities held by one ledger.

    Attributes:
        owner: Administrative identity, immutable after construction.
        payer: Identity allowed to deposit funds.
        first_beneficiary: First identity credited on each split.
        second_beneficiary: Second identity credited on each split.
    """

    owner: str
    payer: str
    first_beneficiary: str
    second_beneficiary: str


@dataclass(frozen=True)
class LedgerStateRecord:
    """Point-in-time snapshot of one ledger.

    Attributes:
        roles: Role identities.
        closed: Whether the ledger has been closed.
        balances: Withdrawable amounts keyed by identity.
        total_deposited: Sum of all split deposits.
        total_withdrawn: Sum of all withdrawals.
        last_event_sequence: Sequence number of the latest notification.
    """

    roles: LedgerRoles
    closed: bool
    balances: dict[str, int] = field(default_factory=dict)
    total_deposited: int = 0
    total_withdrawn: int = 0
    last_event_sequence: int = 0

    @property
    def held_funds(self) -> int:
        """Return the amount in custody owed to balance holders."""

        return self.total_deposited - self.total_withdrawn


class FundsTransferPort(Protocol):
    """Port definition for moving funds in and out of ledger custody."""

    def funds_collect(self, sender: str, amount: int) -> None:
        """Take a deposit from the sender into ledger custody.

        Args:
            sender: Identity paying the deposit.
            amount: Deposit amount in the smallest currency unit.

        Raises:
            RuntimeError: Raised when the deposit cannot be collected.
        """

    def funds_send(self, recipient: str, amount: int) -> None:
        """Pay an amount out of ledger custody.

        Args:
            recipient: Identity receiving the payout.
            amount: Payout amount in the smallest currency unit.

        Raises:
            RuntimeError: Raised when the payout cannot be delivered.
        """


class LedgerStateRepositoryPort(Protocol):
    """Port definition for ledger state and notification persistence."""

    def db_ledger_state_load(self, ledger_id: str) -> LedgerStateRecord | None:
        """Load the persisted snapshot for one ledger.

        Args:
            ledger_id: Ledger identifier.

        Returns:
            LedgerStateRecord | None: Persisted snapshot or None when the ledger is new.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_ledger_state_save(
        self,
        ledger_id: str,
        state: LedgerStateRecord,
        events: list[LedgerEvent],
    ) -> None:
        """Persist one snapshot and its new notifications atomically.

        Args:
            ledger_id: Ledger identifier.
            state: Snapshot after the operation.
            events: Notifications emitted since the previous save.

        Raises:
            RuntimeError: Raised when the write fails.
        """

    def db_ledger_event_list(
        self,
        ledger_id: str,
        limit: int,
        offset: int,
        event_name: str | None = None,
    ) -> list[LedgerEvent]:
        """List persisted notifications in sequence order.

        Args:
            ledger_id: Ledger identifier.
            limit: Max rows to return.
            offset: Rows to skip.
            event_name: Optional notification name filter.

        Returns:
            list[LedgerEvent]: Matching notifications.

        Raises:
            RuntimeError: Raised when the read fails.
        """
