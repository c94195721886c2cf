"""Ledger API router composition for split, withdraw and lifecycle endpoints."""

from __future__ import annotations

from typing import Callable, Final

from fastapi import APIRouter, Header, Query, status
from fastapi.responses import JSONResponse

from splitter.adapters import FundsAdapterError
from splitter.config import AppSettings
from splitter.ledger import (
    LEDGER_EVENT_FIELDS,
    LedgerError,
    LedgerErrorCode,
    LedgerOperationOutcome,
    LedgerPersistenceError,
    LedgerStateRecord,
    PersistentLedgerService,
    ledger_serialize_event,
)

CALLER_HEADER: Final[str] = "X-Caller-Identity"
API_PERSISTENCE_PENDING_CODE: Final[str] = "PERSISTENCE_PENDING"
API_FUNDS_UNAVAILABLE_CODE: Final[str] = "FUNDS_UNAVAILABLE"

API_LEDGER_ERROR_STATUS_CODES: Final[dict[str, int]] = {
    LedgerErrorCode.UNAUTHORIZED.value: status.HTTP_403_FORBIDDEN,
    LedgerErrorCode.ALREADY_CLOSED.value: status.HTTP_409_CONFLICT,
    LedgerErrorCode.INVALID_ROLE.value: status.HTTP_400_BAD_REQUEST,
    LedgerErrorCode.INVALID_AMOUNT.value: status.HTTP_400_BAD_REQUEST,
    LedgerErrorCode.NOTHING_TO_WITHDRAW.value: status.HTTP_409_CONFLICT,
    LedgerErrorCode.UNSUPPORTED_OPERATION.value: status.HTTP_405_METHOD_NOT_ALLOWED,
    LedgerErrorCode.TRANSFER_FAILED.value: status.HTTP_502_BAD_GATEWAY,
}


def api_create_ledger_router(
    settings: AppSettings,
    ledger_service: PersistentLedgerService,
) -> APIRouter:
    """Create ledger router exposing operations and read accessors.

    The calling identity is taken from the `X-Caller-Identity` header.

    Args:
        settings: Runtime settings used for pagination defaults.
        ledger_service: Ledger service executing operations.

    Returns:
        APIRouter: Router exposing ledger endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if ledger_service is None:
        raise ValueError("ledger_service must not be None")

    router = APIRouter(prefix="/ledger", tags=["ledger"])

    @router.get("")
    def api_ledger_state() -> JSONResponse:
        """Return roles, lifecycle flag and custody totals."""

        return JSONResponse(
            content=api_serialize_ledger_state(ledger_service.ledger_id, ledger_service.ledger_service_state()),
            status_code=status.HTTP_200_OK,
        )

    @router.post("")
    def api_ledger_receive_transfer(
        amount: int = Query(default=0),
        caller: str | None = Header(default=None, alias=CALLER_HEADER),
    ) -> JSONResponse:
        """Reject bare value transfers that bypass split.

        Args:
            amount: Attached amount.
            caller: Calling identity header.

        Returns:
            JSONResponse: Always an `UNSUPPORTED_OPERATION` error envelope.
        """

        return _api_ledger_execute(lambda: ledger_service.ledger_service_receive_transfer(caller, amount))

    @router.get("/balances/{identity}")
    def api_ledger_balance(identity: str) -> JSONResponse:
        """Return the withdrawable balance of one identity.

        Args:
            identity: Identity to look up.

        Returns:
            JSONResponse: Balance payload; zero for unknown identities.
        """

        payload = {
            "identity": identity,
            "balance": str(ledger_service.ledger_service_balance_of(identity)),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/events")
    def api_ledger_event_list(
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
        event_name: str | None = Query(default=None),
    ) -> JSONResponse:
        """List ledger notifications in sequence order.

        Args:
            limit: Max rows to return.
            offset: Rows to skip.
            event_name: Optional notification name filter.

        Returns:
            JSONResponse: Event list envelope payload.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        normalized_event_name = event_name.strip() if event_name is not None else None
        if normalized_event_name is not None and normalized_event_name not in LEDGER_EVENT_FIELDS:
            payload = {
                "status": "error",
                "code": "INVALID_EVENT_NAME",
                "message": f"unsupported event_name={normalized_event_name}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        applied_limit = min(limit, settings.api_max_limit)
        events = ledger_service.ledger_service_events(
            limit=applied_limit,
            offset=offset,
            event_name=normalized_event_name,
        )
        payload = {
            "items": [ledger_serialize_event(event) for event in events],
            "page": {
                "limit": limit,
                "applied_limit": applied_limit,
                "offset": offset,
                "returned": len(events),
            },
            "filters": {
                "event_name": normalized_event_name,
            },
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/split")
    def api_ledger_split(
        amount: int = Query(),
        caller: str | None = Header(default=None, alias=CALLER_HEADER),
    ) -> JSONResponse:
        """Deposit an amount and divide it between the beneficiaries.

        Args:
            amount: Deposited amount in the smallest currency unit.
            caller: Calling identity header.

        Returns:
            JSONResponse: Emitted `Splitted` notification or error envelope.
        """

        if not caller:
            return _api_ledger_missing_caller()
        return _api_ledger_execute(lambda: ledger_service.ledger_service_split(caller, amount))

    @router.post("/withdraw")
    def api_ledger_withdraw(
        caller: str | None = Header(default=None, alias=CALLER_HEADER),
    ) -> JSONResponse:
        """Pay the caller's whole balance out of custody."""

        if not caller:
            return _api_ledger_missing_caller()
        return _api_ledger_execute(lambda: ledger_service.ledger_service_withdraw(caller))

    @router.post("/payer")
    def api_ledger_set_payer(
        new_payer: str = Query(),
        caller: str | None = Header(default=None, alias=CALLER_HEADER),
    ) -> JSONResponse:
        """Replace the payer identity.

        Args:
            new_payer: Replacement payer identity.
            caller: Calling identity header, must be the owner.

        Returns:
            JSONResponse: Emitted `PayerChanged` notification or error envelope.
        """

        if not caller:
            return _api_ledger_missing_caller()
        return _api_ledger_execute(lambda: ledger_service.ledger_service_set_payer(caller, new_payer))

    @router.post("/close")
    def api_ledger_close(
        caller: str | None = Header(default=None, alias=CALLER_HEADER),
    ) -> JSONResponse:
        """Close the ledger to new deposits."""

        if not caller:
            return _api_ledger_missing_caller()
        return _api_ledger_execute(lambda: ledger_service.ledger_service_close(caller))

    @router.post("/flush")
    def api_ledger_flush() -> JSONResponse:
        """Persist notifications left unsaved by earlier operations.

        Returns:
            JSONResponse: Count of notifications written, or `PERSISTENCE_PENDING` envelope.
        """

        try:
            persisted_events = ledger_service.ledger_service_flush()
        except LedgerPersistenceError as error:
            payload = {
                "status": "error",
                "code": API_PERSISTENCE_PENDING_CODE,
                "message": str(error),
                "pending_events": error.pending_events,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        return JSONResponse(
            content={"status": "success", "persisted_events": persisted_events},
            status_code=status.HTTP_200_OK,
        )

    return router


def _api_ledger_execute(operation: Callable[[], LedgerOperationOutcome]) -> JSONResponse:
    """Run one ledger operation and map its outcome to a response.

    Args:
        operation: Zero-argument callable invoking the service.

    Returns:
        JSONResponse: Success payload with the notification and its persistence flag, or error envelope.
    """

    try:
        outcome = operation()
    except FundsAdapterError as error:
        payload = {
            "status": "error",
            "code": API_FUNDS_UNAVAILABLE_CODE,
            "message": str(error),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_402_PAYMENT_REQUIRED)
    except LedgerError as error:
        payload = {
            "status": "error",
            "code": error.error_code,
            "message": str(error),
        }
        status_code = API_LEDGER_ERROR_STATUS_CODES.get(error.error_code or "", status.HTTP_400_BAD_REQUEST)
        return JSONResponse(content=payload, status_code=status_code)

    payload = {
        "status": "success",
        "persisted": outcome.persisted,
        "event": ledger_serialize_event(outcome.event),
    }
    return JSONResponse(content=payload, status_code=status.HTTP_200_OK)


def _api_ledger_missing_caller() -> JSONResponse:
    payload = {
        "status": "error",
        "code": "MISSING_CALLER",
        "message": f"{CALLER_HEADER} header is required",
    }
    return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)


def api_serialize_ledger_state(ledger_id: str, state: LedgerStateRecord) -> dict[str, object]:
    """Serialize one ledger snapshot to JSON payload.

    Args:
        ledger_id: Ledger identifier.
        state: Ledger snapshot.

    Returns:
        dict[str, object]: JSON-serializable state payload.
    """

    return {
        "ledger_id": ledger_id,
        "owner": state.roles.owner,
        "payer": state.roles.payer,
        "first_beneficiary": state.roles.first_beneficiary,
        "second_beneficiary": state.roles.second_beneficiary,
        "closed": state.closed,
        "held_funds": str(state.held_funds),
        "total_deposited": str(state.total_deposited),
        "total_withdrawn": str(state.total_withdrawn),
        "last_event_sequence": state.last_event_sequence,
    }


__all__ = [
    "API_FUNDS_UNAVAILABLE_CODE",
    "API_LEDGER_ERROR_STATUS_CODES",
    "API_PERSISTENCE_PENDING_CODE",
    "CALLER_HEADER",
    "api_create_ledger_router",
    "api_serialize_ledger_state",
]
