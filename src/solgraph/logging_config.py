"""
Loguru sinks for solgraph.

Diagnostics go to stderr so DOT output on stdout stays clean. The
``SOLGRAPH_MACHINE_MODE`` variable silences the console sink and
``SOLGRAPH_FILE_LOGGING`` adds a rotating file under ``.solgraph/logs``.
"""

import sys
import os
from pathlib import Path
from loguru import logger

MACHINE_MODE_ENV = "SOLGRAPH_MACHINE_MODE"
FILE_LOGGING_ENV = "SOLGRAPH_FILE_LOGGING"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None):
    """
    Install the solgraph sinks, replacing any installed before.

    Args:
        level: Console level (default: INFO)
        suppress_console: Drop the stderr sink. None reads SOLGRAPH_MACHINE_MODE.
        enable_file_logging: Add the file sink. None reads SOLGRAPH_FILE_LOGGING.
    """
    logger.remove()

    if suppress_console is None:
        suppress_console = _env_flag(MACHINE_MODE_ENV)
    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging is None:
        enable_file_logging = _env_flag(FILE_LOGGING_ENV)
    if enable_file_logging:
        log_dir = Path.cwd() / ".solgraph" / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "solgraph.log",
            level="INFO",
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
        )


setup_logging()
