"""Logging setup shared by the CLI, the Streamlit app and the pipeline thread."""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

LOG_DIR = Path(os.environ.get("JOBSIFT_LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))

CONSOLE_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
FILE_FORMAT = "%(asctime)s  %(levelname)-8s  %(threadName)s  %(name)s  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP client libraries log every request at INFO.
QUIET_LOGGERS = ("urllib3", "httpx", "openai", "google.auth", "gspread")

_ready = False


def _file_handler() -> logging.Handler | None:
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(LOG_DIR / f"jobsift_{date.today():%Y-%m-%d}.log", encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("File logging disabled (%s): %s", LOG_DIR, exc)
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _setup() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Streamlit and pytest install their own root handlers; leave those alone.
    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)

    handler = _file_handler()
    if handler is not None:
        root.setLevel(logging.DEBUG)
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Named logger; the root handlers are installed on the first call."""
    global _ready
    if not _ready:
        _ready = True
        _setup()
    return logging.getLogger(name)


def set_level(level: int) -> None:
    """Change console verbosity (``--verbose``). The log file always keeps DEBUG."""
    root = logging.getLogger()
    root.setLevel(min(root.level, level))
    for handler in root.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
