"""Database service for ledger state snapshots, balances and notifications."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from splitter.ledger.events import LedgerEvent, ledger_deserialize_event_fields, ledger_serialize_event
from splitter.ledger.interfaces import LedgerRoles, LedgerStateRecord, LedgerStateRepositoryPort


class SQLAlchemyLedgerStateService(LedgerStateRepositoryPort):
    """SQLAlchemy implementation of ledger persistence.

    Amounts are stored as decimal text so integers of any size round-trip
    exactly on every backend. Statements use `ON CONFLICT` upserts supported by
    both PostgreSQL and SQLite.
    """

    _EVENT_SELECT_COLUMNS = (
        "SELECT event_sequence, event_name, payload, recorded_at_utc "
        "FROM ledger_event "
    )

    _EVENT_LIST_QUERY = (
        _EVENT_SELECT_COLUMNS
        + "WHERE ledger_id = :ledger_id "
        + "ORDER BY event_sequence asc LIMIT :limit OFFSET :offset"
    )

    _EVENT_LIST_BY_NAME_QUERY = (
        _EVENT_SELECT_COLUMNS
        + "WHERE ledger_id = :ledger_id AND event_name = :event_name "
        + "ORDER BY event_sequence asc LIMIT :limit OFFSET :offset"
    )

    def __init__(self, engine: Engine):
        """Initialize ledger state persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_ledger_state_load(self, ledger_id: str) -> LedgerStateRecord | None:
        """Load the persisted snapshot for one ledger.

        Args:
            ledger_id: Ledger identifier.

        Returns:
            LedgerStateRecord | None: Persisted snapshot or None when the ledger is new.

        Raises:
            ValueError: Raised when ledger_id is blank.
            RuntimeError: Raised when database read fails.
        """

        normalized_ledger_id = self._db_ledger_validate_non_empty_text(ledger_id, "ledger_id")

        try:
            with self._engine.connect() as connection:
                state_row = connection.execute(
                    text(
                        "SELECT owner, payer, first_beneficiary, second_beneficiary, closed, "
                        "total_deposited, total_withdrawn, last_event_sequence "
                        "FROM ledger_state WHERE ledger_id = :ledger_id"
                    ),
                    {"ledger_id": normalized_ledger_id},
                ).mappings().first()
                if state_row is None:
                    return None

                balance_rows = connection.execute(
                    text(
                        "SELECT identity, amount FROM ledger_balance "
                        "WHERE ledger_id = :ledger_id ORDER BY identity asc"
                    ),
                    {"ledger_id": normalized_ledger_id},
                ).mappings().all()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to load ledger state") from error

        return LedgerStateRecord(
            roles=LedgerRoles(
                owner=state_row["owner"],
                payer=state_row["payer"],
                first_beneficiary=state_row["first_beneficiary"],
                second_beneficiary=state_row["second_beneficiary"],
            ),
            closed=bool(state_row["closed"]),
            balances={balance_row["identity"]: int(balance_row["amount"]) for balance_row in balance_rows},
            total_deposited=int(state_row["total_deposited"]),
            total_withdrawn=int(state_row["total_withdrawn"]),
            last_event_sequence=int(state_row["last_event_sequence"]),
        )

    def db_ledger_state_save(
        self,
        ledger_id: str,
        state: LedgerStateRecord,
        events: list[LedgerEvent],
    ) -> None:
        """Persist one snapshot and its new notifications in one transaction.

        Args:
            ledger_id: Ledger identifier.
            state: Snapshot after the operation.
            events: Notifications emitted since the previous save.

        Raises:
            ValueError: Raised when inputs are blank or events do not end at the snapshot sequence.
            RuntimeError: Raised when persistence fails.
        """

        normalized_ledger_id = self._db_ledger_validate_non_empty_text(ledger_id, "ledger_id")
        if events and events[-1].sequence != state.last_event_sequence:
            raise ValueError("latest event sequence must match state.last_event_sequence")

        updated_at_utc = datetime.now(timezone.utc).isoformat()
        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO ledger_state ("
                        "ledger_id, owner, payer, first_beneficiary, second_beneficiary, closed, "
                        "total_deposited, total_withdrawn, last_event_sequence, updated_at_utc"
                        ") VALUES ("
                        ":ledger_id, :owner, :payer, :first_beneficiary, :second_beneficiary, :closed, "
                        ":total_deposited, :total_withdrawn, :last_event_sequence, :updated_at_utc"
                        ") "
                        "ON CONFLICT (ledger_id) DO UPDATE SET "
                        "payer = excluded.payer, "
                        "closed = excluded.closed, "
                        "total_deposited = excluded.total_deposited, "
                        "total_withdrawn = excluded.total_withdrawn, "
                        "last_event_sequence = excluded.last_event_sequence, "
                        "updated_at_utc = excluded.updated_at_utc"
                    ),
                    {
                        "ledger_id": normalized_ledger_id,
                        "owner": state.roles.owner,
                        "payer": state.roles.payer,
                        "first_beneficiary": state.roles.first_beneficiary,
                        "second_beneficiary": state.roles.second_beneficiary,
                        "closed": state.closed,
                        "total_deposited": str(state.total_deposited),
                        "total_withdrawn": str(state.total_withdrawn),
                        "last_event_sequence": state.last_event_sequence,
                        "updated_at_utc": updated_at_utc,
                    },
                )

                balance_parameters = [
                    {
                        "ledger_id": normalized_ledger_id,
                        "identity": identity,
                        "amount": str(amount),
                        "updated_at_utc": updated_at_utc,
                    }
                    for identity, amount in sorted(state.balances.items())
                ]
                if balance_parameters:
                    connection.execute(
                        text(
                            "INSERT INTO ledger_balance (ledger_id, identity, amount, updated_at_utc) "
                            "VALUES (:ledger_id, :identity, :amount, :updated_at_utc) "
                            "ON CONFLICT (ledger_id, identity) DO UPDATE SET "
                            "amount = excluded.amount, "
                            "updated_at_utc = excluded.updated_at_utc"
                        ),
                        balance_parameters,
                    )

                event_parameters = [self._db_ledger_build_event_parameters(normalized_ledger_id, event) for event in events]
                if event_parameters:
                    connection.execute(
                        text(
                            "INSERT INTO ledger_event (ledger_id, event_sequence, event_name, payload, recorded_at_utc) "
                            "VALUES (:ledger_id, :event_sequence, :event_name, :payload, :recorded_at_utc)"
                        ),
                        event_parameters,
                    )
        except SQLAlchemyError as error:
            raise RuntimeError("failed to save ledger state") from error

    def db_ledger_event_list(
        self,
        ledger_id: str,
        limit: int,
        offset: int,
        event_name: str | None = None,
    ) -> list[LedgerEvent]:
        """List persisted notifications in sequence order.

        Args:
            ledger_id: Ledger identifier.
            limit: Max rows to return.
            offset: Rows to skip.
            event_name: Optional notification name filter.

        Returns:
            list[LedgerEvent]: Matching notifications.

        Raises:
            ValueError: Raised when pagination inputs are invalid.
            RuntimeError: Raised when database read fails.
        """

        normalized_ledger_id = self._db_ledger_validate_non_empty_text(ledger_id, "ledger_id")
        if limit < 1:
            raise ValueError("limit must be positive")
        if offset < 0:
            raise ValueError("offset must not be negative")

        query_parameters: dict[str, Any] = {"ledger_id": normalized_ledger_id, "limit": limit, "offset": offset}
        list_query = self._EVENT_LIST_QUERY
        if event_name is not None:
            query_parameters["event_name"] = event_name
            list_query = self._EVENT_LIST_BY_NAME_QUERY

        try:
            with self._engine.connect() as connection:
                event_rows = connection.execute(text(list_query), query_parameters).mappings().all()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list ledger events") from error

        return [self._db_ledger_map_event_row(event_row) for event_row in event_rows]

    def _db_ledger_build_event_parameters(self, ledger_id: str, event: LedgerEvent) -> dict[str, Any]:
        serialized_event = ledger_serialize_event(event)
        return {
            "ledger_id": ledger_id,
            "event_sequence": event.sequence,
            "event_name": event.event_name,
            "payload": json.dumps(serialized_event["fields"], sort_keys=True),
            "recorded_at_utc": event.recorded_at_utc,
        }

    def _db_ledger_map_event_row(self, row: Any) -> LedgerEvent:
        return LedgerEvent(
            sequence=int(row["event_sequence"]),
            event_name=row["event_name"],
            fields=ledger_deserialize_event_fields(json.loads(row["payload"])),
            recorded_at_utc=row["recorded_at_utc"],
        )

    def _db_ledger_validate_non_empty_text(self, value: str, field_name: str) -> str:
        """Validate and normalize required text input.

        Args:
            value: Input value.
            field_name: Field name for error messages.

        Returns:
            str: Stripped non-empty text.

        Raises:
            ValueError: Raised when value is blank.
        """

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{field_name} must not be blank")
        return value.strip()
