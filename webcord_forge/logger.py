"""Centralized logging configuration using Loguru."""

from __future__ import annotations

import pathlib
import sys
from typing import Optional

from loguru import logger


def setup_logging(
    *,
    console_level: str = "INFO",
    log_file: Optional[str] = None,
    file_level: str = "DEBUG",
) -> None:
    """Configure logging sinks for a packaging run.

    Parameters
    ----------
    console_level:
        Minimum log level for console output.
    log_file:
        Optional path of a file capturing structured JSON log records.
    file_level:
        Minimum log level for file output.

    Existing handlers are removed so that hooks invoked several times in one
    process do not duplicate their output.
    """

    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level.upper(),
        backtrace=True,
        diagnose=False,
        colorize=True,
    )

    if log_file is None:
        logger.bind(console_level=console_level).debug("Logging configured")
        return

    file_path = pathlib.Path(log_file).expanduser().resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        file_path,
        level=file_level.upper(),
        backtrace=False,
        diagnose=False,
        rotation="10 MB",
        retention="30 days",
        serialize=True,
    )

    logger.bind(
        console_level=console_level,
        file_level=file_level,
        log_file=str(file_path),
    ).debug("Logging configured")


__all__ = ["setup_logging"]
