"""
Logging Configuration
Console (and optional file) logging for the application and uvicorn
"""
import logging
import os
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handlers: List[logging.Handler] = []


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger once (idempotent)"""
    if _handlers:
        return

    root = logging.getLogger()
    root.setLevel(level.upper())

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    _handlers.append(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        _handlers.append(file_handler)

    for handler in _handlers:
        root.addHandler(handler)

    # Motor/pymongo are chatty at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def reset_logging() -> None:
    """Drop handlers installed by configure_logging. For tests."""
    root = logging.getLogger()
    while _handlers:
        handler = _handlers.pop()
        root.removeHandler(handler)
        handler.close()
