"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or prints the persisted ledger state.
"""

import argparse
import json

import uvicorn

from splitter.api.routers.ledger import api_serialize_ledger_state
from splitter.bootstrap import bootstrap_create_application, bootstrap_create_ledger_service
from splitter.config import config_configure_logging, config_load_settings
from splitter.db import db_create_engine


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Splitter Ledger runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "show-state"),
        help="Runtime command: `api` starts server, `show-state` prints the persisted ledger state",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    if parsed_arguments.command == "show-state":
        main_print_ledger_state()
        return

    settings = config_load_settings()
    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_print_ledger_state() -> None:
    """Print the configured ledger state and balances as JSON to stdout."""

    settings = config_load_settings()
    config_configure_logging(settings.log_level)
    engine = db_create_engine(database_url=settings.database_url)
    try:
        ledger_service = bootstrap_create_ledger_service(settings=settings, engine=engine)
        state = ledger_service.ledger_service_state()
    finally:
        engine.dispose()
    payload = api_serialize_ledger_state(ledger_service.ledger_id, state)
    payload["balances"] = {identity: str(amount) for identity, amount in sorted(state.balances.items())}
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
