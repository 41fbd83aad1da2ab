"""
Logging setup using Loguru.

Engine modules log through ``loguru.logger`` and stay disabled until an
application calls setup_loguru, so importing song_ranker never writes output.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_log_file_path() -> Path:
    """Get the path to the default log file."""
    return get_data_dir() / "song-ranker.log"


def setup_loguru(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    console_output: bool = False,
) -> Path:
    """
    Configure loguru with a rotating file sink and optional stderr output.

    Args:
        log_file: Path to log file (default: ~/.local/share/song-ranker/song-ranker.log)
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        console_output: Also log to stderr

    Returns:
        The log file in use
    """
    log_path = log_file or get_log_file_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_path,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level.upper(),
        format=LOG_FORMAT,
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if console_output:
        logger.add(sys.stderr, level=level.upper(), format="{level}: {message}")

    logger.enable("song_ranker")
    logger.info(f"Loguru initialized: {log_path} (level={level.upper()})")
    return log_path


def setup_from_config(logging_config: LoggingConfig) -> Path:
    """Configure logging from the [logging] config section."""
    log_file = Path(logging_config.log_file) if logging_config.log_file else None
    return setup_loguru(
        log_file=log_file,
        level=logging_config.level,
        console_output=logging_config.console_output,
    )
