"""Logging setup for command-line and scheduler entry points."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | int = "INFO", log_file: str | None = None) -> None:
    """
    Configure root logging once for a process.

    Args:
        level: Level name or number
        log_file: Also write to this file when given
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level, handlers=handlers, format=LOG_FORMAT, force=True)
    # Per-request connection chatter
    logging.getLogger("urllib3").setLevel(logging.WARNING)
