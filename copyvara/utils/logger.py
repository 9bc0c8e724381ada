"""Logging configuration using Loguru.

Every record carries the workspace it belongs to (`extra[workspace_id]`) and
the emitting module (`extra[module]`), so file logs from several workspaces
can be told apart.
"""

import sys
from pathlib import Path

from loguru import logger

DEFAULT_WORKSPACE_ID = "w1"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[workspace_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[workspace_id]} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
    workspace_id: str = DEFAULT_WORKSPACE_ID,
) -> None:
    """
    Configure Loguru sinks for a Copyvara process.

    Args:
        level: Minimum level for both sinks
        log_to_file: Also write rotating JSON files under log_dir
        log_dir: Directory for log files
        file_rotation: Loguru rotation policy
        file_retention: Loguru retention policy
        compression: Archive format for rotated files
        serialize: Write file records as JSON
        workspace_id: Default workspace bound to every record
    """
    logger.remove()
    logger.configure(extra={"workspace_id": workspace_id, "module": "copyvara"})

    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=True,
        serialize=False,
    )

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / f"copyvara_{workspace_id}_{{time:YYYY-MM-DD}}.log",
            level=level,
            format=FILE_FORMAT,
            rotation=file_rotation,
            retention=file_retention,
            compression=compression,
            serialize=serialize,
            enqueue=True,
        )


def get_logger(name: str, workspace_id: str | None = None):
    """
    Get a logger bound to a module.

    Args:
        name: Module name, usually __name__
        workspace_id: Overrides the process-wide workspace for this logger
    """
    if workspace_id is None:
        return logger.bind(module=name)
    return logger.bind(module=name, workspace_id=workspace_id)
