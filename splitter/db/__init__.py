"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort
from .ledger_state import SQLAlchemyLedgerStateService
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyLedgerStateService",
	"db_create_engine",
]
