"""Centralized logging configuration for watchtrigger."""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure root logging.

    Args:
        level: Logging level or level name (default INFO)
        log_file: Optional file to log to in addition to stderr
        format_string: Optional custom format string
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # Uvicorn access logs drown out scan output
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
