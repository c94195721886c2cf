"""Project-native typed exceptions for rejected ledger operations."""

from __future__ import annotations

from .error_codes import LedgerErrorCode, ledger_error_default_message


class LedgerError(Exception):
    """Base exception for ledger operation failures.

    Every failure aborts the whole operation with no state change.

    Attributes:
        error_code: Deterministic ledger error code.
    """

    default_error_code: LedgerErrorCode | None = None

    def __init__(self, message: str | None = None, error_code: str | None = None):
        resolved_error_code = error_code or (
            self.default_error_code.value if self.default_error_code is not None else None
        )
        resolved_message = message or ledger_error_default_message(resolved_error_code or "", "ledger operation failed")
        super().__init__(resolved_message)
        self.error_code = resolved_error_code


class UnauthorizedError(LedgerError, PermissionError):
    """Caller identity does not hold the role the operation requires."""

    default_error_code = LedgerErrorCode.UNAUTHORIZED


class AlreadyClosedError(LedgerError, RuntimeError):
    """Operation is forbidden because the ledger has been closed."""

    default_error_code = LedgerErrorCode.ALREADY_CLOSED


class InvalidRoleError(LedgerError, ValueError):
    """Supplied role identity is null or identical to the current one."""

    default_error_code = LedgerErrorCode.INVALID_ROLE


class InvalidAmountError(LedgerError, ValueError):
    """Deposit amount is zero, negative or not an integer."""

    default_error_code = LedgerErrorCode.INVALID_AMOUNT


class NothingToWithdrawError(LedgerError, LookupError):
    """Caller has a zero balance."""

    default_error_code = LedgerErrorCode.NOTHING_TO_WITHDRAW


class UnsupportedOperationError(LedgerError, RuntimeError):
    """Untracked value transfer outside of split."""

    default_error_code = LedgerErrorCode.UNSUPPORTED_OPERATION


class TransferFailedError(LedgerError, RuntimeError):
    """Outbound payout failed and the withdrawal was rolled back.

    Attributes:
        recipient: Identity the payout was addressed to.
        amount: Amount that could not be sent.
    """

    default_error_code = LedgerErrorCode.TRANSFER_FAILED

    def __init__(self, message: str | None = None, recipient: str | None = None, amount: int | None = None):
        super().__init__(message=message)
        self.recipient = recipient
        self.amount = amount
