"""Root logger setup shared by the API server and command-line entrypoints."""

import logging

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def config_configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Args:
        level: Logging level name such as `INFO` or `DEBUG`.

    Returns:
        None: The root logger is configured as a side effect.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    resolved_level = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved_level, int):
        raise ValueError(f"unknown log level={level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)

    # Replace handlers installed by any earlier call.
    while root_logger.handlers:
        root_logger.handlers.pop()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved_level)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stream_handler)
