"""Logging configuration."""
import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "DOLLY_LOG_LEVEL"


def setup_logging(level: Optional[str] = None):
    """Configure logging for the application."""
    # Get log level from argument, environment or default to INFO
    log_level = (level or os.getenv(LOG_LEVEL_ENV, 'INFO')).upper()

    # Configure root logger
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),  # stderr
        ]
    )

    # Our application loggers
    logging.getLogger('dolly').setLevel(getattr(logging, log_level, logging.INFO))
