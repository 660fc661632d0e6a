"""Logging utilities centralised for logpruner."""
from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

logger.configure(extra={"index": "-"})

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[service]} | {extra[index]} | {message}"


def configure_logging(service_name: str, level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure loguru sinks for a logpruner entry point.

    Console lines carry the index being processed. When ``log_dir`` is given,
    every record is also written as JSON to ``<service_name>.jsonl`` there.
    """

    logger.remove()
    logger.configure(extra={"service": service_name, "index": "-"})
    logger.add(
        sink=lambda msg: print(msg, end=""),
        level=level.upper(),
        format=CONSOLE_FORMAT,
        colorize=False,
        backtrace=False,
        diagnose=False,
    )

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        logger.add(
            path / f"{service_name}.jsonl",
            level=level.upper(),
            serialize=True,
            rotation="7 days",
            retention="30 days",
            compression="zip",
            enqueue=True,
        )


def index_logger(index: str):
    """Return a logger whose records are tagged with ``index``."""

    return logger.bind(index=index)


def get_log_level_from_env(default: str = "INFO") -> str:
    return os.getenv("LOGPRUNER_LOG_LEVEL", default)


__all__ = ["logger", "configure_logging", "index_logger", "get_log_level_from_env"]
