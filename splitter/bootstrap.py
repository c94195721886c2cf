"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI
from sqlalchemy import Engine

from splitter.adapters import AttachedDepositFundsAdapter
from splitter.api import create_api_application
from splitter.config import AppSettings, config_configure_logging, config_load_settings
from splitter.db import SQLAlchemyDatabaseHealthService, SQLAlchemyLedgerStateService, db_create_engine
from splitter.ledger import LedgerRoles, LedgerServiceConfig, PersistentLedgerService


def bootstrap_create_ledger_service(settings: AppSettings, engine: Engine) -> PersistentLedgerService:
    """Build the persistent ledger service for the configured ledger.

    Deposits are taken as attached to each split request. Custody is seeded
    from the persisted ledger so balances credited before a restart stay
    withdrawable.

    Args:
        settings: Validated runtime settings.
        engine: SQLAlchemy engine bound to the ledger database.

    Returns:
        PersistentLedgerService: Opened ledger service.

    Raises:
        InvalidRoleError: Raised when configured roles cannot create a new ledger.
        RuntimeError: Raised when persisted state cannot be read or written.
    """

    repository = SQLAlchemyLedgerStateService(engine=engine)
    persisted_state = repository.db_ledger_state_load(settings.ledger_id)
    funds_adapter = AttachedDepositFundsAdapter(
        initial_custody=0 if persisted_state is None else persisted_state.held_funds,
    )
    ledger_service = PersistentLedgerService(
        repository=repository,
        funds=funds_adapter,
        config=LedgerServiceConfig(
            ledger_id=settings.ledger_id,
            roles=LedgerRoles(
                owner=settings.ledger_owner,
                payer=settings.ledger_payer,
                first_beneficiary=settings.ledger_first_beneficiary,
                second_beneficiary=settings.ledger_second_beneficiary,
            ),
        ),
    )
    ledger_service.ledger_service_open()
    return ledger_service


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Already validated settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    config_configure_logging(resolved_settings.log_level)
    engine = db_create_engine(database_url=resolved_settings.database_url)
    return create_api_application(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        ledger_service=bootstrap_create_ledger_service(settings=resolved_settings, engine=engine),
    )
