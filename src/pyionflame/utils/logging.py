"""
Logging setup for PyIonFlame.
"""
import logging
import sys
from typing import Optional

FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def level_for(loglevel: int) -> int:
    """Map the integer solver verbosity onto a logging level"""
    if loglevel <= 0:
        return logging.WARNING
    if loglevel == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(loglevel: int = 1, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the package logger with console and optional file output."""
    logger = logging.getLogger("pyionflame")
    logger.setLevel(level_for(loglevel))
    logger.handlers.clear()

    formatter = logging.Formatter(FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger
