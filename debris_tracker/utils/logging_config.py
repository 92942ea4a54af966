"""
Logging setup for the debris tracker.

Console output tagged with the emitting component, one JSON-lines file per
component for replaying a session, and a rotating application log.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_COMPONENT = "app"


class LogConfig:
    """Centralized logging configuration."""

    LOG_DIR = Path(os.environ.get("DEBRIS_TRACKER_LOG_DIR", "data/logs"))
    LOG_FORMAT = (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>{extra[component]: <10}</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    # Components that get their own JSONL file
    COMPONENTS = ("simulation", "tracking", "forecast", "ingestion")

    @classmethod
    def setup(cls, log_level: str = "INFO", enable_json: bool = True, log_dir: Optional[Path] = None):
        """
        Replace all loguru sinks.

        Args:
            log_level: Minimum level for console and application log
            enable_json: Also write per-component JSONL files
            log_dir: Where file sinks go (default LOG_DIR)
        """
        log_dir = Path(log_dir) if log_dir else cls.LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.remove()
        # Records from unbound loggers still satisfy {extra[component]}
        logger.configure(extra={"component": DEFAULT_COMPONENT})

        logger.add(sys.stderr, format=cls.LOG_FORMAT, level=log_level, colorize=True)

        if enable_json:
            for component in cls.COMPONENTS:
                logger.add(
                    log_dir / f"{component}.jsonl",
                    level="INFO",
                    rotation="00:00",
                    retention="7 days",
                    serialize=True,
                    filter=lambda record, comp=component: record["extra"].get("component") == comp,
                )

        logger.add(
            log_dir / "application.log",
            format=cls.LOG_FORMAT,
            level=log_level,
            rotation="50 MB",
            retention=5,
            compression="zip",
        )

    @classmethod
    def setup_from_env(cls):
        """Configure from DEBRIS_TRACKER_LOG_LEVEL and DEBRIS_TRACKER_JSON_LOGS."""
        cls.setup(
            log_level=os.environ.get("DEBRIS_TRACKER_LOG_LEVEL", "INFO").upper(),
            enable_json=os.environ.get("DEBRIS_TRACKER_JSON_LOGS", "true").lower() == "true",
        )


def get_logger(component: str):
    """
    Logger whose records carry `component` for filtering and display.

    Example:
        >>> logger = get_logger("forecast")
        >>> logger.info(f"Projected {len(points)} years")
    """
    return logger.bind(component=component)


try:
    LogConfig.setup_from_env()
except Exception as e:
    logging.basicConfig(level=logging.INFO)
    logging.warning(f"Failed to initialize advanced logging: {e}")
