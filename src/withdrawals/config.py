"""Runtime settings read from the environment."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from withdrawals.domain.errors import ValidationError

DB_PATH_ENV = "WITHDRAWALS_DB_PATH"
STORAGE_TIMEOUT_ENV = "WITHDRAWALS_STORAGE_TIMEOUT"
LOG_LEVEL_ENV = "WITHDRAWALS_LOG_LEVEL"
USER_ENV = "WITHDRAWALS_USER"

DEFAULT_STORAGE_TIMEOUT = 5.0
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    db_path: Optional[str]
    storage_timeout: float
    log_level: str
    user: Optional[str]


def default_db_path() -> str:
    """Return ~/.withdrawals/withdrawals.db, creating the directory."""
    db_dir = Path.home() / ".withdrawals"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "withdrawals.db")


def parse_timeout(value: str) -> float:
    """Parse a storage timeout in seconds.

    Raises:
        ValidationError: If value is not a positive number
    """
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid storage timeout '{value}'")
    if timeout <= 0:
        raise ValidationError(f"Storage timeout must be positive, got {value}")
    return timeout


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance
    """
    env = os.environ if environ is None else environ
    raw_timeout = env.get(STORAGE_TIMEOUT_ENV)
    return Settings(
        db_path=env.get(DB_PATH_ENV) or None,
        storage_timeout=(
            parse_timeout(raw_timeout) if raw_timeout else DEFAULT_STORAGE_TIMEOUT
        ),
        log_level=(env.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper(),
        user=env.get(USER_ENV) or None,
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Install a single stderr handler on the package logger."""
    logger = logging.getLogger("withdrawals")
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValidationError(f"Unknown log level '{level}'")
    logger.setLevel(numeric_level)
    for handler in logger.handlers:
        if getattr(handler, "_withdrawals_handler", False):
            # sys.stderr may have been replaced since the last call
            handler.setStream(sys.stderr)
            return logger
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._withdrawals_handler = True
    logger.addHandler(handler)
    return logger
