"""
Service Logger Setup

Configures the root logger once per process from LoggingConfig.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("campaign_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig

_configured = False


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure logging handlers and return the service logger.

    Args:
        service_name: Logger name for the service
        level: Overrides LOG_LEVEL when given
        config: Logging config (loaded from environment if not provided)

    Returns:
        Logger named after the service
    """
    global _configured

    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)

    if not _configured:
        formatter = logging.Formatter(config.log_format)
        root = logging.getLogger()
        root.setLevel(log_level)

        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        # APScheduler logs every job execution at INFO
        logging.getLogger("apscheduler").setLevel(logging.WARNING)
        _configured = True

    service_logger = logging.getLogger(service_name)
    service_logger.setLevel(log_level)
    return service_logger


__all__ = ["setup_service_logger"]
