"""Ledger layer package for the payment-splitting state machine and its service."""

from .error_codes import LEDGER_ERROR_DEFAULT_MESSAGES, LedgerErrorCode, ledger_error_default_message
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
	LEDGER_EVENT_FIELDS,
	LEDGER_EVENT_INDEXED_FIELDS,
	LedgerEvent,
	ledger_build_event,
	ledger_deserialize_event_fields,
	ledger_serialize_event,
)
from .interfaces import FundsTransferPort, LedgerRoles, LedgerStateRecord, LedgerStateRepositoryPort
from .ledger_service import (
	LedgerOperationOutcome,
	LedgerPersistenceError,
	LedgerServiceConfig,
	PersistentLedgerService,
)
from .splitter_engine import SplitterLedger

__all__ = [
	"LedgerErrorCode",
	"LEDGER_ERROR_DEFAULT_MESSAGES",
	"ledger_error_default_message",
	"LedgerError",
	"UnauthorizedError",
	"AlreadyClosedError",
	"InvalidRoleError",
	"InvalidAmountError",
	"NothingToWithdrawError",
	"UnsupportedOperationError",
	"TransferFailedError",
	"EVENT_CREATED",
	"EVENT_PAYER_CHANGED",
	"EVENT_SPLITTED",
	"EVENT_WITHDRAW",
	"EVENT_CLOSED",
	"LEDGER_EVENT_FIELDS",
	"LEDGER_EVENT_INDEXED_FIELDS",
	"LedgerEvent",
	"ledger_build_event",
	"ledger_serialize_event",
	"ledger_deserialize_event_fields",
	"FundsTransferPort",
	"LedgerRoles",
	"LedgerStateRecord",
	"LedgerStateRepositoryPort",
	"LedgerOperationOutcome",
	"LedgerPersistenceError",
	"LedgerServiceConfig",
	"PersistentLedgerService",
	"SplitterLedger",
]
