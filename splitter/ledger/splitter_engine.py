"""Payment-splitting ledger state machine.

One payer deposits funds that are divided between two fixed beneficiaries.
Credited amounts are pulled by their holders through `ledger_withdraw`, which
remains available after the owner closes the ledger to new deposits.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from splitter.domain import domain_normalize_identity

from .errors import (
    AlreadyClosedError,
    InvalidAmountError,
    InvalidRoleError,
    LedgerError,
    NothingToWithdrawError,
    TransferFailedError,
    UnauthorizedError,
    UnsupportedOperationError,
)
from .events import (
    EVENT_CLOSED,
    EVENT_CREATED,
    EVENT_PAYER_CHANGED,
    EVENT_SPLITTED,
    EVENT_WITHDRAW,
    LedgerEvent,
    ledger_build_event,
)
from .interfaces import FundsTransferPort, LedgerRoles, LedgerStateRecord

logger = logging.getLogger(__name__)


class SplitterLedger:
    """Custodial ledger splitting each deposit between two beneficiaries.

    Operations are serialized by a re-entrant lock and are all-or-nothing:
    every guard runs before the first mutation, and a failed payout restores
    the withdrawn balance.
    """

    def __init__(
        self,
        owner: str,
        payer: str,
        first_beneficiary: str,
        second_beneficiary: str,
        funds: FundsTransferPort,
        clock: Callable[[], datetime] | None = None,
    ):
        """Create a ledger and emit its `Created` notification.

        Args:
            owner: Deploying identity.
            payer: Identity allowed to deposit.
            first_beneficiary: First identity credited on each split.
            second_beneficiary: Second identity credited on each split.
            funds: Port used to collect deposits and send payouts.
            clock: Optional UTC clock used to timestamp notifications.

        Raises:
            InvalidRoleError: Raised when a role identity is null or beneficiaries coincide.
            ValueError: Raised when funds port is None.
        """

        roles = self._ledger_validate_roles(
            owner=owner,
            payer=payer,
            first_beneficiary=first_beneficiary,
            second_beneficiary=second_beneficiary,
        )
        self._ledger_init(roles=roles, funds=funds, clock=clock)
        self._ledger_emit(
            EVENT_CREATED,
            owner=roles.owner,
            payer=roles.payer,
            first_beneficiary=roles.first_beneficiary,
            second_beneficiary=roles.second_beneficiary,
        )
        logger.info(
            "ledger created owner=%s payer=%s first_beneficiary=%s second_beneficiary=%s",
            roles.owner,
            roles.payer,
            roles.first_beneficiary,
            roles.second_beneficiary,
        )

    @classmethod
    def ledger_from_state(
        cls,
        state: LedgerStateRecord,
        funds: FundsTransferPort,
        clock: Callable[[], datetime] | None = None,
    ) -> SplitterLedger:
        """Rebuild a ledger from a persisted snapshot without emitting `Created`.

        Args:
            state: Persisted snapshot.
            funds: Port used to collect deposits and send payouts.
            clock: Optional UTC clock used to timestamp notifications.

        Returns:
            SplitterLedger: Ledger positioned at the snapshot.

        Raises:
            InvalidRoleError: Raised when snapshot roles are invalid.
            ValueError: Raised when snapshot balances violate ledger invariants.
        """

        roles = cls._ledger_validate_roles(
            owner=state.roles.owner,
            payer=state.roles.payer,
            first_beneficiary=state.roles.first_beneficiary,
            second_beneficiary=state.roles.second_beneficiary,
        )
        ledger = cls.__new__(cls)
        ledger._ledger_init(roles=roles, funds=funds, clock=clock)
        ledger._ledger_apply_state(state)
        return ledger

    @property
    def owner(self) -> str:
        return self._roles.owner

    @property
    def payer(self) -> str:
        return self._roles.payer

    @property
    def first_beneficiary(self) -> str:
        return self._roles.first_beneficiary

    @property
    def second_beneficiary(self) -> str:
        return self._roles.second_beneficiary

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def held_funds(self) -> int:
        """Return the amount in custody, equal to the sum of all balances."""

        return self._total_deposited - self._total_withdrawn

    def ledger_balance_of(self, identity: str | None) -> int:
        """Return the withdrawable balance of one identity.

        Args:
            identity: Identity to look up.

        Returns:
            int: Balance, zero for unknown or null identities.
        """

        normalized_identity = domain_normalize_identity(identity)
        if normalized_identity is None:
            return 0
        return self._balances.get(normalized_identity, 0)

    def ledger_events(self, after_sequence: int = 0, event_name: str | None = None) -> list[LedgerEvent]:
        """Return notifications emitted by this instance in sequence order.

        Args:
            after_sequence: Only notifications with a greater sequence are returned.
            event_name: Optional notification name filter.

        Returns:
            list[LedgerEvent]: Matching notifications.
        """

        with self._lock:
            return [
                event
                for event in self._events
                if event.sequence > after_sequence and (event_name is None or event.event_name == event_name)
            ]

    def ledger_export_state(self) -> LedgerStateRecord:
        """Return an immutable snapshot of the current state.

        Returns:
            LedgerStateRecord: Snapshot suitable for persistence.
        """

        with self._lock:
            return LedgerStateRecord(
                roles=self._roles,
                closed=self._closed,
                balances=dict(self._balances),
                total_deposited=self._total_deposited,
                total_withdrawn=self._total_withdrawn,
                last_event_sequence=self._next_sequence - 1,
            )

    def ledger_set_payer(self, caller: str | None, new_payer: str | None) -> LedgerEvent:
        """Replace the payer identity.

        Args:
            caller: Invoking identity, must be the owner.
            new_payer: Replacement payer identity.

        Returns:
            LedgerEvent: Emitted `PayerChanged` notification.

        Raises:
            UnauthorizedError: Raised when caller is not the owner.
            AlreadyClosedError: Raised when the ledger is closed.
            InvalidRoleError: Raised when new payer is null or equals the current payer.
        """

        with self._lock:
            normalized_caller = domain_normalize_identity(caller)
            if normalized_caller != self._roles.owner:
                raise self._ledger_rejected("set_payer", caller, UnauthorizedError("only owner can change payer"))
            if self._closed:
                raise self._ledger_rejected("set_payer", caller, AlreadyClosedError())
            normalized_new_payer = domain_normalize_identity(new_payer)
            if normalized_new_payer is None:
                raise self._ledger_rejected("set_payer", caller, InvalidRoleError("new payer must not be null"))
            if normalized_new_payer == self._roles.payer:
                raise self._ledger_rejected("set_payer", caller, InvalidRoleError("new payer equals current payer"))

            self._roles = LedgerRoles(
                owner=self._roles.owner,
                payer=normalized_new_payer,
                first_beneficiary=self._roles.first_beneficiary,
                second_beneficiary=self._roles.second_beneficiary,
            )
            event = self._ledger_emit(EVENT_PAYER_CHANGED, new_payer=normalized_new_payer)
            logger.info("ledger payer changed new_payer=%s", normalized_new_payer)
            return event

    def ledger_split(self, caller: str | None, amount: int) -> LedgerEvent:
        """Divide one deposit between both beneficiaries.

        Each beneficiary is credited `amount // 2`; the odd unit, if any, is
        credited back to the payer.

        Args:
            caller: Invoking identity, must be the payer.
            amount: Deposited amount in the smallest currency unit.

        Returns:
            LedgerEvent: Emitted `Splitted` notification carrying the half amount.

        Raises:
            UnauthorizedError: Raised when caller is not the payer.
            AlreadyClosedError: Raised when the ledger is closed.
            InvalidAmountError: Raised when amount is not a positive integer.
        """

        with self._lock:
            normalized_caller = domain_normalize_identity(caller)
            if normalized_caller != self._roles.payer:
                raise self._ledger_rejected("split", caller, UnauthorizedError("only payer can split"))
            if self._closed:
                raise self._ledger_rejected("split", caller, AlreadyClosedError())
            if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
                raise self._ledger_rejected("split", caller, InvalidAmountError(f"invalid amount={amount!r}"))

            self._funds.funds_collect(normalized_caller, amount)

            remainder = amount % 2
            half = (amount - remainder) // 2
            first_beneficiary = self._roles.first_beneficiary
            second_beneficiary = self._roles.second_beneficiary
            self._balances[first_beneficiary] = self._balances.get(first_beneficiary, 0) + half
            self._balances[second_beneficiary] = self._balances.get(second_beneficiary, 0) + half
            self._balances[normalized_caller] = self._balances.get(normalized_caller, 0) + remainder
            self._total_deposited += amount

            event = self._ledger_emit(
                EVENT_SPLITTED,
                first_beneficiary=first_beneficiary,
                second_beneficiary=second_beneficiary,
                half=half,
            )
            logger.info("ledger split amount=%s half=%s remainder=%s", amount, half, remainder)
            return event

    def ledger_withdraw(self, caller: str | None) -> LedgerEvent:
        """Pay the caller's whole balance out of custody.

        Args:
            caller: Invoking identity.

        Returns:
            LedgerEvent: Emitted `Withdraw` notification.

        Raises:
            NothingToWithdrawError: Raised when the caller balance is zero.
            TransferFailedError: Raised when the payout fails; the balance is restored.
        """

        with self._lock:
            normalized_caller = domain_normalize_identity(caller)
            amount = 0 if normalized_caller is None else self._balances.get(normalized_caller, 0)
            if amount <= 0:
                raise self._ledger_rejected("withdraw", caller, NothingToWithdrawError())

            # Zero before paying out: a re-entrant withdraw must see nothing left.
            self._balances[normalized_caller] = 0
            try:
                self._funds.funds_send(normalized_caller, amount)
            except Exception as error:
                self._balances[normalized_caller] = self._balances.get(normalized_caller, 0) + amount
                raise self._ledger_rejected(
                    "withdraw",
                    caller,
                    TransferFailedError(f"payout failed: {error}", recipient=normalized_caller, amount=amount),
                ) from error

            self._total_withdrawn += amount
            event = self._ledger_emit(EVENT_WITHDRAW, caller=normalized_caller, amount=amount)
            logger.info("ledger withdraw caller=%s amount=%s", normalized_caller, amount)
            return event

    def ledger_close(self, caller: str | None) -> LedgerEvent:
        """Permanently disable deposits and payer changes.

        Args:
            caller: Invoking identity, must be the owner.

        Returns:
            LedgerEvent: Emitted `Closed` notification.

        Raises:
            UnauthorizedError: Raised when caller is not the owner.
            AlreadyClosedError: Raised when the ledger is already closed.
        """

        with self._lock:
            normalized_caller = domain_normalize_identity(caller)
            if normalized_caller != self._roles.owner:
                raise self._ledger_rejected("close", caller, UnauthorizedError("only owner can close"))
            if self._closed:
                raise self._ledger_rejected("close", caller, AlreadyClosedError())

            self._closed = True
            event = self._ledger_emit(EVENT_CLOSED, caller=normalized_caller)
            logger.info("ledger closed caller=%s held_funds=%s", normalized_caller, self.held_funds)
            return event

    def ledger_receive_transfer(self, caller: str | None, amount: int) -> LedgerEvent:
        """Reject a bare value transfer that bypasses split.

        Args:
            caller: Invoking identity.
            amount: Attached amount.

        Returns:
            LedgerEvent: This method never returns.

        Raises:
            UnsupportedOperationError: Always raised.
        """

        raise self._ledger_rejected(
            "receive_transfer",
            caller,
            UnsupportedOperationError(f"untracked transfer of amount={amount!r} rejected"),
        )

    def _ledger_init(
        self,
        roles: LedgerRoles,
        funds: FundsTransferPort,
        clock: Callable[[], datetime] | None,
    ) -> None:
        if funds is None:
            raise ValueError("funds must not be None")
        self._roles = roles
        self._funds = funds
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._closed = False
        self._balances: dict[str, int] = {}
        self._total_deposited = 0
        self._total_withdrawn = 0
        self._events: list[LedgerEvent] = []
        self._next_sequence = 1
        self._lock = threading.RLock()

    def _ledger_apply_state(self, state: LedgerStateRecord) -> None:
        if any(balance < 0 for balance in state.balances.values()):
            raise ValueError("snapshot contains a negative balance")
        if sum(state.balances.values()) != state.held_funds:
            raise ValueError("snapshot balances do not sum to held funds")
        if state.last_event_sequence < 1:
            raise ValueError("snapshot must include at least the Created notification")

        self._roles = state.roles
        self._closed = state.closed
        self._balances = dict(state.balances)
        self._total_deposited = state.total_deposited
        self._total_withdrawn = state.total_withdrawn
        self._next_sequence = state.last_event_sequence + 1

    def _ledger_emit(self, event_name: str, **fields: object) -> LedgerEvent:
        event = ledger_build_event(
            sequence=self._next_sequence,
            event_name=event_name,
            recorded_at_utc=self._clock().isoformat(),
            **fields,
        )
        self._events.append(event)
        self._next_sequence += 1
        return event

    @staticmethod
    def _ledger_rejected(operation: str, caller: str | None, error: LedgerError) -> LedgerError:
        logger.warning(
            "ledger %s rejected caller=%s code=%s message=%s",
            operation,
            caller,
            error.error_code,
            error,
        )
        return error

    @staticmethod
    def _ledger_validate_roles(
        owner: str | None,
        payer: str | None,
        first_beneficiary: str | None,
        second_beneficiary: str | None,
    ) -> LedgerRoles:
        normalized_roles = {
            "owner": domain_normalize_identity(owner),
            "payer": domain_normalize_identity(payer),
            "first_beneficiary": domain_normalize_identity(first_beneficiary),
            "second_beneficiary": domain_normalize_identity(second_beneficiary),
        }
        for role_name, role_identity in normalized_roles.items():
            if role_identity is None:
                raise InvalidRoleError(f"{role_name} must not be null")
        if normalized_roles["first_beneficiary"] == normalized_roles["second_beneficiary"]:
            raise InvalidRoleError("beneficiaries must be distinct")
        return LedgerRoles(**normalized_roles)
