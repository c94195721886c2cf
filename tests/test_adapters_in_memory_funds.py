"""Regression tests for the in-memory funds transfer adapter."""

from __future__ import annotations

import pytest

from splitter.adapters import (
    AttachedDepositFundsAdapter,
    FundsAdapterError,
    InMemoryFundsTransferAdapter,
    InsufficientFundsError,
)


def test_adapters_funds_collect_and_send_move_value_through_custody() -> None:
    """Debit the sender into custody and credit the recipient out of it.

    Raises:
        AssertionError: Raised when wallet or custody balances are wrong.
    """

    adapter = InMemoryFundsTransferAdapter(initial_balances={"0xpayer": 50})

    adapter.funds_collect("0xpayer", 30)
    adapter.funds_send("0xfirst", 12)

    assert adapter.funds_balance_of("0xpayer") == 20
    assert adapter.funds_balance_of("0xfirst") == 12
    assert adapter.custody_balance == 18


def test_adapters_funds_collect_rejects_insufficient_wallet() -> None:
    """Raise a typed error and leave balances untouched when the sender is short.

    Raises:
        AssertionError: Raised when a short sender is debited.
    """

    adapter = InMemoryFundsTransferAdapter(initial_balances={"0xpayer": 5})

    with pytest.raises(InsufficientFundsError) as error_info:
        adapter.funds_collect("0xpayer", 6)

    assert error_info.value.identity == "0xpayer"
    assert error_info.value.amount == 6
    assert adapter.funds_balance_of("0xpayer") == 5
    assert adapter.custody_balance == 0


def test_adapters_funds_send_rejects_custody_shortfall_and_negative_inputs() -> None:
    """Refuse payouts exceeding custody and negative seed amounts.

    Raises:
        AssertionError: Raised when invalid movements are accepted.
    """

    adapter = InMemoryFundsTransferAdapter(initial_custody=3)

    with pytest.raises(FundsAdapterError, match="custody shortfall"):
        adapter.funds_send("0xfirst", 4)
    with pytest.raises(ValueError):
        adapter.funds_credit("0xfirst", -1)
    with pytest.raises(ValueError):
        InMemoryFundsTransferAdapter(initial_custody=-1)


def test_adapters_attached_deposit_enters_custody_without_sender_wallet() -> None:
    """Accept the amount attached to a split with no prior wallet top-up.

    Raises:
        AssertionError: Raised when the attached deposit is refused or misbooked.
    """

    adapter = AttachedDepositFundsAdapter(initial_custody=4)

    adapter.funds_collect("0xpayer", 11)
    adapter.funds_send("0xfirst", 5)

    assert adapter.custody_balance == 10
    assert adapter.funds_balance_of("0xpayer") == 0
    assert adapter.funds_balance_of("0xfirst") == 5
    with pytest.raises(ValueError, match="positive"):
        adapter.funds_collect("0xpayer", 0)
    with pytest.raises(FundsAdapterError, match="custody shortfall"):
        adapter.funds_send("0xsecond", 11)
