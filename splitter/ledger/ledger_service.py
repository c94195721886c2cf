"""Ledger service keeping the in-memory ledger and its persisted record in step."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .events import LedgerEvent
from .interfaces import FundsTransferPort, LedgerRoles, LedgerStateRecord, LedgerStateRepositoryPort
from .splitter_engine import SplitterLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerServiceConfig:
    """Static configuration for one hosted ledger.

    Attributes:
        ledger_id: Persistence identifier of the ledger.
        roles: Role identities used when the ledger does not exist yet.
    """

    ledger_id: str
    roles: LedgerRoles


@dataclass(frozen=True)
class LedgerOperationOutcome:
    """Result of one applied ledger operation.

    Attributes:
        event: Notification emitted by the operation.
        persisted: False when the save failed and the notification is queued for the next save or flush.
    """

    event: LedgerEvent
    persisted: bool


class LedgerPersistenceError(RuntimeError):
    """Raised when pending notifications could not be persisted by a flush.

    Attributes:
        pending_events: Number of notifications waiting to be persisted.
    """

    def __init__(self, message: str, pending_events: int):
        super().__init__(message)
        self.pending_events = pending_events


class PersistentLedgerService:
    """Run ledger operations and persist the resulting state and notifications.

    The in-memory ledger stays authoritative once funds have moved. An applied
    operation always reports success; when its save fails the outcome is marked
    unpersisted and every pending notification is written by the next successful
    save or by `ledger_service_flush`.
    """

    def __init__(
        self,
        repository: LedgerStateRepositoryPort,
        funds: FundsTransferPort,
        config: LedgerServiceConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the ledger service.

        Args:
            repository: Ledger state persistence port.
            funds: Funds movement port handed to the ledger.
            config: Ledger identity and initial roles.
            clock: Optional UTC clock for notification timestamps.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if repository is None:
            raise ValueError("repository must not be None")
        if funds is None:
            raise ValueError("funds must not be None")
        if config is None or not config.ledger_id.strip():
            raise ValueError("config.ledger_id must not be blank")

        self._repository = repository
        self._funds = funds
        self._config = config
        self._clock = clock
        self._ledger: SplitterLedger | None = None
        self._persisted_sequence = 0
        self._lock = threading.RLock()

    @property
    def ledger_id(self) -> str:
        return self._config.ledger_id

    def ledger_service_open(self) -> SplitterLedger:
        """Load the persisted ledger or create and persist a new one.

        Returns:
            SplitterLedger: Ready ledger instance.

        Raises:
            InvalidRoleError: Raised when configured roles are invalid for a new ledger.
            RuntimeError: Raised when persistence fails.
        """

        with self._lock:
            if self._ledger is not None:
                return self._ledger

            persisted_state = self._repository.db_ledger_state_load(self._config.ledger_id)
            if persisted_state is not None:
                self._ledger = SplitterLedger.ledger_from_state(
                    state=persisted_state,
                    funds=self._funds,
                    clock=self._clock,
                )
                self._persisted_sequence = persisted_state.last_event_sequence
                logger.info(
                    "ledger loaded ledger_id=%s closed=%s held_funds=%s",
                    self._config.ledger_id,
                    persisted_state.closed,
                    persisted_state.held_funds,
                )
                return self._ledger

            roles = self._config.roles
            ledger = SplitterLedger(
                owner=roles.owner,
                payer=roles.payer,
                first_beneficiary=roles.first_beneficiary,
                second_beneficiary=roles.second_beneficiary,
                funds=self._funds,
                clock=self._clock,
            )
            created_state = ledger.ledger_export_state()
            self._repository.db_ledger_state_save(
                ledger_id=self._config.ledger_id,
                state=created_state,
                events=ledger.ledger_events(),
            )
            self._persisted_sequence = created_state.last_event_sequence
            self._ledger = ledger
            return ledger

    def ledger_service_state(self) -> LedgerStateRecord:
        """Return the current ledger snapshot."""

        return self.ledger_service_open().ledger_export_state()

    def ledger_service_balance_of(self, identity: str | None) -> int:
        return self.ledger_service_open().ledger_balance_of(identity)

    def ledger_service_events(
        self,
        limit: int,
        offset: int,
        event_name: str | None = None,
    ) -> list[LedgerEvent]:
        """List persisted notifications in sequence order.

        Args:
            limit: Max rows to return.
            offset: Rows to skip.
            event_name: Optional notification name filter.

        Returns:
            list[LedgerEvent]: Matching notifications.

        Raises:
            RuntimeError: Raised when the read fails.
        """

        self.ledger_service_open()
        return self._repository.db_ledger_event_list(
            ledger_id=self._config.ledger_id,
            limit=limit,
            offset=offset,
            event_name=event_name,
        )

    def ledger_service_split(self, caller: str | None, amount: int) -> LedgerOperationOutcome:
        return self._ledger_service_execute(lambda ledger: ledger.ledger_split(caller, amount))

    def ledger_service_withdraw(self, caller: str | None) -> LedgerOperationOutcome:
        return self._ledger_service_execute(lambda ledger: ledger.ledger_withdraw(caller))

    def ledger_service_set_payer(self, caller: str | None, new_payer: str | None) -> LedgerOperationOutcome:
        return self._ledger_service_execute(lambda ledger: ledger.ledger_set_payer(caller, new_payer))

    def ledger_service_close(self, caller: str | None) -> LedgerOperationOutcome:
        return self._ledger_service_execute(lambda ledger: ledger.ledger_close(caller))

    def ledger_service_receive_transfer(self, caller: str | None, amount: int) -> LedgerOperationOutcome:
        return self._ledger_service_execute(lambda ledger: ledger.ledger_receive_transfer(caller, amount))

    def ledger_service_flush(self) -> int:
        """Persist notifications left pending by an earlier failed save.

        Returns:
            int: Number of notifications written.

        Raises:
            LedgerPersistenceError: Raised when the save fails again.
        """

        with self._lock:
            return self._ledger_service_persist(self.ledger_service_open())

    def _ledger_service_execute(
        self,
        operation: Callable[[SplitterLedger], LedgerEvent],
    ) -> LedgerOperationOutcome:
        """Apply one operation and persist its outcome.

        Args:
            operation: Ledger operation to run.

        Returns:
            LedgerOperationOutcome: Emitted notification and whether it was saved.

        Raises:
            LedgerError: Raised when the ledger rejects the operation.
        """

        with self._lock:
            ledger = self.ledger_service_open()
            event = operation(ledger)
            try:
                self._ledger_service_persist(ledger)
            except LedgerPersistenceError:
                return LedgerOperationOutcome(event=event, persisted=False)
            return LedgerOperationOutcome(event=event, persisted=True)

    def _ledger_service_persist(self, ledger: SplitterLedger) -> int:
        pending_events = ledger.ledger_events(after_sequence=self._persisted_sequence)
        if not pending_events:
            return 0

        state = ledger.ledger_export_state()
        try:
            self._repository.db_ledger_state_save(
                ledger_id=self._config.ledger_id,
                state=state,
                events=pending_events,
            )
        except RuntimeError as error:
            logger.error(
                "ledger persistence failed ledger_id=%s pending_events=%s: %s",
                self._config.ledger_id,
                len(pending_events),
                error,
            )
            raise LedgerPersistenceError(
                f"ledger notifications not persisted; pending_events={len(pending_events)}",
                pending_events=len(pending_events),
            ) from error

        self._persisted_sequence = state.last_event_sequence
        return len(pending_events)
