"""Logging setup for the process entry point. Modules only ever call logging.getLogger(__name__)."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Install a single stream handler on the package logger (idempotent)."""
    package_logger = logging.getLogger("ttt_online")
    package_logger.setLevel(level)
    if not any(getattr(h, "_ttt_online", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ttt_online = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)
