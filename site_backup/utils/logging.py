"""
Logging configuration for the site backup pipeline.

Console output goes through Rich for the CLI; an optional rotating file
handler keeps a plain-text trail of exports and imports.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "site_backup"

_PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rich_console: bool = True,
    max_log_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console: Optional[Console] = None
) -> logging.Logger:
    """
    Set up logging for the site backup pipeline.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, rotated at max_log_size
        rich_console: Whether to use the Rich console handler
        max_log_size: Maximum log file size before rotation
        backup_count: Number of rotated log files to keep
        console: Rich console to log to, e.g. the CLI's stderr console
    
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    
    # Clear existing handlers
    logger.handlers.clear()
    
    if rich_console:
        console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATE_FORMAT))
    
    logger.addHandler(console_handler)
    
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_log_size,
            backupCount=backup_count
        )
        file_handler.setFormatter(logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(file_handler)
    
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
