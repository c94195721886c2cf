"""Adapter layer package for funds movement boundaries."""

from .attached_deposit_funds import AttachedDepositFundsAdapter
from .funds_errors import FundsAdapterError, InsufficientFundsError
from .in_memory_funds import InMemoryFundsTransferAdapter

__all__ = [
	"AttachedDepositFundsAdapter",
	"FundsAdapterError",
	"InsufficientFundsError",
	"InMemoryFundsTransferAdapter",
]
