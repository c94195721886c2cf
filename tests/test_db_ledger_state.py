"""Regression tests for ledger schema migration and SQLAlchemy persistence.

These tests run the Alembic baseline against a temporary SQLite database so
they need no external server.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import Engine, inspect
from alembic import command
from alembic.config import Config

from splitter.adapters import InMemoryFundsTransferAdapter
from splitter.db import SQLAlchemyDatabaseHealthService, SQLAlchemyLedgerStateService, db_create_engine
from splitter.ledger import (
    EVENT_CREATED,
    EVENT_SPLITTED,
    EVENT_WITHDRAW,
    LedgerRoles,
    LedgerServiceConfig,
    LedgerStateRecord,
    PersistentLedgerService,
    SplitterLedger,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ROLES = LedgerRoles(owner="0xowner", payer="0xpayer", first_beneficiary="0xfirst", second_beneficiary="0xsecond")


def _migration_upgrade(database_url: str) -> None:
    """Apply all migrations to the target database.

    Args:
        database_url: SQLAlchemy URL of the target database.

    Returns:
        None: Schema is created as a side effect.
    """

    alembic_config = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_config.set_main_option("sqlalchemy.url", database_url)
    alembic_config.attributes["configure_logger"] = False
    command.upgrade(alembic_config, "head")


@pytest.fixture()
def migrated_engine(tmp_path: Path) -> Engine:
    """Provide an engine bound to a freshly migrated SQLite database.

    Returns:
        Engine: SQLAlchemy engine with the ledger schema applied.
    """

    database_url = f"sqlite:///{tmp_path / 'ledger.db'}"
    _migration_upgrade(database_url)
    engine = db_create_engine(database_url)
    yield engine
    engine.dispose()


def _build_ledger_with_history() -> SplitterLedger:
    ledger = SplitterLedger(
        owner=ROLES.owner,
        payer=ROLES.payer,
        first_beneficiary=ROLES.first_beneficiary,
        second_beneficiary=ROLES.second_beneficiary,
        funds=InMemoryFundsTransferAdapter(initial_balances={"0xpayer": 1_000}),
    )
    ledger.ledger_split("0xpayer", 101)
    ledger.ledger_withdraw("0xsecond")
    return ledger


def test_db_migration_creates_ledger_tables(migrated_engine: Engine) -> None:
    """Create state, balance and event tables from the baseline revision.

    Raises:
        AssertionError: Raised when expected tables are missing.
    """

    table_names = set(inspect(migrated_engine).get_table_names())

    assert {"ledger_state", "ledger_balance", "ledger_event"} <= table_names


def test_db_ledger_state_load_returns_none_for_unknown_ledger(migrated_engine: Engine) -> None:
    """Return None before a ledger has been saved.

    Raises:
        AssertionError: Raised when a missing ledger yields a record.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)

    assert repository.db_ledger_state_load("missing") is None


def test_db_ledger_state_save_and_load_preserves_snapshot(migrated_engine: Engine) -> None:
    """Round-trip roles, balances and totals through the database.

    Raises:
        AssertionError: Raised when loaded state differs from saved state.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)
    ledger = _build_ledger_with_history()
    state = ledger.ledger_export_state()

    repository.db_ledger_state_save("ledger-1", state, ledger.ledger_events())
    loaded_state = repository.db_ledger_state_load("ledger-1")

    assert loaded_state == state
    assert loaded_state.balances == {"0xfirst": 50, "0xsecond": 0, "0xpayer": 1}
    assert loaded_state.held_funds == 51


def test_db_ledger_state_save_keeps_large_amounts_exact(migrated_engine: Engine) -> None:
    """Store amounts beyond 64-bit range without loss.

    Raises:
        AssertionError: Raised when large amounts are truncated.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)
    large_amount = 2**80 + 1
    state = LedgerStateRecord(
        roles=ROLES,
        closed=True,
        balances={"0xfirst": large_amount},
        total_deposited=large_amount,
        total_withdrawn=0,
        last_event_sequence=7,
    )

    repository.db_ledger_state_save("ledger-big", state, [])

    assert repository.db_ledger_state_load("ledger-big") == state


def test_db_ledger_state_save_rejects_events_out_of_step_with_snapshot(migrated_engine: Engine) -> None:
    """Refuse to write notifications that do not end at the snapshot sequence.

    Raises:
        AssertionError: Raised when mismatched input is accepted.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)
    ledger = _build_ledger_with_history()

    with pytest.raises(ValueError, match="last_event_sequence"):
        repository.db_ledger_state_save("ledger-1", ledger.ledger_export_state(), ledger.ledger_events()[:1])


def test_db_ledger_event_list_pages_and_filters_in_sequence_order(migrated_engine: Engine) -> None:
    """Return typed notifications ordered by sequence with optional filter.

    Raises:
        AssertionError: Raised when event rows are misordered or mistyped.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)
    ledger = _build_ledger_with_history()
    repository.db_ledger_state_save("ledger-1", ledger.ledger_export_state(), ledger.ledger_events())

    all_events = repository.db_ledger_event_list("ledger-1", limit=10, offset=0)
    second_page = repository.db_ledger_event_list("ledger-1", limit=1, offset=1)
    withdraw_events = repository.db_ledger_event_list("ledger-1", limit=10, offset=0, event_name=EVENT_WITHDRAW)

    assert all_events == ledger.ledger_events()
    assert [event.event_name for event in all_events] == [EVENT_CREATED, EVENT_SPLITTED, EVENT_WITHDRAW]
    assert second_page[0].fields["half"] == 50
    assert withdraw_events[0].fields == {"caller": "0xsecond", "amount": 50}


def test_db_ledger_event_list_rejects_invalid_pagination(migrated_engine: Engine) -> None:
    """Validate pagination inputs before querying.

    Raises:
        AssertionError: Raised when invalid pagination is accepted.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)

    with pytest.raises(ValueError, match="limit"):
        repository.db_ledger_event_list("ledger-1", limit=0, offset=0)
    with pytest.raises(ValueError, match="offset"):
        repository.db_ledger_event_list("ledger-1", limit=1, offset=-1)


def test_db_persistent_ledger_service_survives_restart(migrated_engine: Engine) -> None:
    """Resume a ledger from the database with balances and sequence intact.

    Raises:
        AssertionError: Raised when reopened ledger state diverges.
    """

    config = LedgerServiceConfig(ledger_id="ledger-1", roles=ROLES)
    funds = InMemoryFundsTransferAdapter(initial_balances={"0xpayer": 1_000})
    first_service = PersistentLedgerService(SQLAlchemyLedgerStateService(migrated_engine), funds, config)
    first_service.ledger_service_split("0xpayer", 10)

    second_service = PersistentLedgerService(SQLAlchemyLedgerStateService(migrated_engine), funds, config)
    outcome = second_service.ledger_service_withdraw("0xfirst")

    assert outcome.event.sequence == 3
    assert second_service.ledger_service_state().balances["0xfirst"] == 0
    assert funds.funds_balance_of("0xfirst") == 5
    assert len(second_service.ledger_service_events(limit=10, offset=0)) == 3


def test_db_health_service_reports_ledger_count(migrated_engine: Engine) -> None:
    """Report healthy schema with the number of hosted ledgers.

    Raises:
        AssertionError: Raised when health payload is wrong.
    """

    repository = SQLAlchemyLedgerStateService(migrated_engine)
    repository.db_ledger_state_save("ledger-1", _build_ledger_with_history().ledger_export_state(), [])

    health = SQLAlchemyDatabaseHealthService(migrated_engine).db_check_health()

    assert health.status == "ok"
    assert health.detail == "ledger schema reachable, ledgers=1"


def test_db_health_service_raises_connection_error_without_schema(tmp_path: Path) -> None:
    """Surface a missing schema as a connectivity failure.

    Raises:
        AssertionError: Raised when the failure is not reported.
    """

    engine = db_create_engine(f"sqlite:///{tmp_path / 'empty.db'}")

    with pytest.raises(ConnectionError):
        SQLAlchemyDatabaseHealthService(engine).db_check_health()
    engine.dispose()


def test_db_migration_falls_back_to_database_url_setting(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Resolve the migration target from `DATABASE_URL` when alembic.ini leaves it blank.

    Raises:
        AssertionError: Raised when the schema is not created at the configured URL.
    """

    database_url = f"sqlite:///{tmp_path / 'from_env.db'}"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", database_url)
    alembic_config = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_config.attributes["configure_logger"] = False

    command.upgrade(alembic_config, "head")

    engine = db_create_engine(database_url)
    try:
        assert "ledger_event" in inspect(engine).get_table_names()
    finally:
        engine.dispose()
