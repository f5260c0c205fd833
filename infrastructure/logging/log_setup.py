# infrastructure/logging/log_setup.py
import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"


def setup_console_logging(level: str = "INFO", sink=None) -> None:
    logger.remove()
    logger.add(sink or sys.stderr, level=level.upper(), format=LOG_FORMAT)
