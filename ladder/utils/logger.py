import logging
import sys
from datetime import datetime
from pathlib import Path

from ladder.config import Config

LADDER_LOGGER = "ladder"

# Third-party loggers that flood INFO output
NOISY_LOGGERS = ("discord", "sqlalchemy.engine")


def _configure_ladder_logger() -> logging.Logger:
    """Attach console and daily file handlers to the shared ladder logger once"""
    ladder_logger = logging.getLogger(LADDER_LOGGER)
    if ladder_logger.handlers:
        return ladder_logger

    log_level = logging.DEBUG if Config.DEBUG else logging.INFO
    ladder_logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    ladder_logger.addHandler(console_handler)

    log_dir = Path(Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(
        log_dir / f'ladder_bot_{datetime.now().strftime("%Y%m%d")}.log',
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    ladder_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if Config.DEBUG else logging.WARNING)

    return ladder_logger


def setup_logger(name: str) -> logging.Logger:
    """
    Logger for a ladder module.

    Every module logger is a child of the shared `ladder` logger, so modules
    that use plain logging.getLogger(__name__) land in the same handlers.
    Names outside the package (e.g. `__main__`) are nested under it.
    """
    _configure_ladder_logger()
    if name != LADDER_LOGGER and not name.startswith(f"{LADDER_LOGGER}."):
        name = f"{LADDER_LOGGER}.{name}"
    return logging.getLogger(name)
