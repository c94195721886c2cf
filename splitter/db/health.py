"""Database health service implementations for connectivity and schema checks."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from splitter.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Database health service verifying the ledger schema is reachable."""

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine used for health checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL with credentials masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Query the ledger state table to prove connectivity and migrations.

        Returns:
            HealthStatus: Health payload with status and hosted ledger count.

        Raises:
            ConnectionError: Raised when the database or ledger schema is unreachable.
        """

        try:
            with self._engine.connect() as connection:
                ledger_count = connection.execute(text("SELECT COUNT(*) FROM ledger_state")).scalar_one()
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error
        return HealthStatus(status="ok", detail=f"ledger schema reachable, ledgers={ledger_count}")
