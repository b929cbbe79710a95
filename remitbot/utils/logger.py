"""Loguru sinks for the transfer agent: console, rotating file, error file."""

import os
import sys
from typing import Optional
from loguru import logger
from .config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"
ERROR_LOG_FILE = os.path.join(os.path.dirname(settings.log_file) or ".", "error.log")


def setup_logger():
    """Route every remitbot module through one set of sinks."""
    logger.remove()
    # Unbound records fall back to the package name
    logger.configure(extra={"name": "remitbot"})

    logger.add(sys.stdout, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)

    # Serverless hosts have a read-only file system
    if os.getenv("VERCEL"):
        return logger

    try:
        logger.add(
            settings.log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="zip",
        )
        logger.add(ERROR_LOG_FILE, level="ERROR", format=FILE_FORMAT, rotation="1 day", retention="7 days", compression="zip")
    except OSError as e:
        logger.warning(f"File logging not available, console only: {e}")

    return logger


setup_logger()


def get_logger(name: Optional[str] = None):
    """Logger bound to a module name, shown in every record."""
    if name:
        return logger.bind(name=name)
    return logger
