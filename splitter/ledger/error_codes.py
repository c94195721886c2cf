"""Canonical ledger error-code semantics shared by the core and API layers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class LedgerErrorCode(str, Enum):
    """Deterministic codes surfaced by rejected ledger operations."""

    UNAUTHORIZED = "UNAUTHORIZED"
    ALREADY_CLOSED = "ALREADY_CLOSED"
    INVALID_ROLE = "INVALID_ROLE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    NOTHING_TO_WITHDRAW = "NOTHING_TO_WITHDRAW"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    TRANSFER_FAILED = "TRANSFER_FAILED"


LEDGER_ERROR_DEFAULT_MESSAGES: Final[dict[str, str]] = {
    LedgerErrorCode.UNAUTHORIZED.value: "Caller is not allowed to perform this operation.",
    LedgerErrorCode.ALREADY_CLOSED.value: "Ledger is closed.",
    LedgerErrorCode.INVALID_ROLE.value: "Role identity is null or unchanged.",
    LedgerErrorCode.INVALID_AMOUNT.value: "Deposit amount must be a positive integer.",
    LedgerErrorCode.NOTHING_TO_WITHDRAW.value: "Caller has no balance to withdraw.",
    LedgerErrorCode.UNSUPPORTED_OPERATION.value: "Ledger accepts funds only through split.",
    LedgerErrorCode.TRANSFER_FAILED.value: "Outbound transfer failed.",
}


def ledger_error_default_message(error_code: str, fallback_message: str) -> str:
    """Resolve the default message for a ledger error code.

    Args:
        error_code: Ledger error code value.
        fallback_message: Message returned for unknown codes.

    Returns:
        str: Known default message or fallback message.
    """

    return LEDGER_ERROR_DEFAULT_MESSAGES.get(error_code, fallback_message)
