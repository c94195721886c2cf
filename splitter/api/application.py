"""FastAPI application factory for the splitter ledger service."""

from fastapi import FastAPI

from splitter.config import AppSettings
from splitter.db import DatabaseHealthPort
from splitter.ledger import PersistentLedgerService

from .routers import api_create_health_router, api_create_ledger_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    ledger_service: PersistentLedgerService,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        ledger_service: Ledger service backing the ledger endpoints.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """
    application = FastAPI(title="Splitter Ledger")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal foundation response for bootstrap verification."""

        return {
            "service": "splitter-ledger",
            "status": "foundation-ready",
            "environment": settings.environment_name,
            "ledger_id": settings.ledger_id,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_ledger_router(settings=settings, ledger_service=ledger_service))

    return application
