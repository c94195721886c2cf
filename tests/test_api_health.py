"""Tests for API health endpoint behavior.

These tests validate deterministic response behavior for healthy and
database-unavailable states.
"""

from fastapi.testclient import TestClient

from splitter.adapters import InMemoryFundsTransferAdapter
from splitter.api.application import create_api_application
from splitter.config import AppSettings
from splitter.domain import HealthStatus
from splitter.ledger import LedgerRoles, LedgerServiceConfig, PersistentLedgerService


class _HealthyDatabaseService:
    """Test double that simulates a healthy database target."""

    def db_connection_label(self) -> str:
        """Return deterministic target label.

        Returns:
            str: Health target label.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        return "sqlite://test"

    def db_check_health(self) -> HealthStatus:
        """Return healthy database result.

        Returns:
            HealthStatus: Healthy DB response.

        Raises:
            ConnectionError: Never raised by this test double.
        """

        return HealthStatus(status="ok", detail="ledger schema reachable, ledgers=1")


class _FailingDatabaseService:
    """Test double that simulates a database connectivity failure."""

    def db_connection_label(self) -> str:
        return "sqlite://test"

    def db_check_health(self) -> HealthStatus:
        """Raise deterministic connection error.

        Returns:
            HealthStatus: This method does not return.

        Raises:
            ConnectionError: Always raised by this test double.
        """

        raise ConnectionError("database connectivity check failed")


class _LedgerRepositoryStub:
    """Minimal ledger repository stub for API factory dependency injection."""

    def db_ledger_state_load(self, ledger_id: str):
        _ = ledger_id
        return None

    def db_ledger_state_save(self, ledger_id: str, state, events) -> None:
        _ = (ledger_id, state, events)

    def db_ledger_event_list(self, ledger_id: str, limit: int, offset: int, event_name: str | None = None) -> list:
        _ = (ledger_id, limit, offset, event_name)
        return []


def _build_settings() -> AppSettings:
    """Create test settings object.

    Returns:
        AppSettings: Deterministic test settings for API creation.

    Raises:
        ValueError: Raised by AppSettings when values are invalid.
    """

    return AppSettings(
        environment_name="test",
        database_url="sqlite:///unused.db",
        ledger_owner="0xowner",
        ledger_payer="0xpayer",
        ledger_first_beneficiary="0xfirst",
        ledger_second_beneficiary="0xsecond",
    )


def _build_ledger_service() -> PersistentLedgerService:
    return PersistentLedgerService(
        repository=_LedgerRepositoryStub(),
        funds=InMemoryFundsTransferAdapter(),
        config=LedgerServiceConfig(
            ledger_id="DEFAULT_LEDGER",
            roles=LedgerRoles(
                owner="0xowner",
                payer="0xpayer",
                first_beneficiary="0xfirst",
                second_beneficiary="0xsecond",
            ),
        ),
    )


def test_api_health_returns_success_when_database_is_available() -> None:
    """Return HTTP 200 and healthy payload when DB service reports success.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    application = create_api_application(_build_settings(), _HealthyDatabaseService(), _build_ledger_service())
    client = TestClient(application)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["app"] == "up"
    assert response.json()["database"] == "ok"
    assert response.json()["target"] == "sqlite://test"


def test_api_health_returns_service_unavailable_when_database_is_down() -> None:
    """Return HTTP 503 and degraded payload when DB service reports failure.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    application = create_api_application(_build_settings(), _FailingDatabaseService(), _build_ledger_service())
    client = TestClient(application)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["app"] == "up"
    assert response.json()["database"] == "down"


def test_api_foundation_index_reports_service_and_ledger_id() -> None:
    """Expose service metadata on the root endpoint.

    Raises:
        AssertionError: Raised when metadata is missing.
    """

    application = create_api_application(_build_settings(), _HealthyDatabaseService(), _build_ledger_service())
    client = TestClient(application)

    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {
        "service": "splitter-ledger",
        "status": "foundation-ready",
        "environment": "test",
        "ledger_id": "DEFAULT_LEDGER",
    }
