"""Logging setup shared by the CLI, the search pipeline and the adapters."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

LOG_DIR: Path = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are noisy at INFO/DEBUG during adapter fan-out.
_CHATTY = ("urllib3", "requests", "pypdf")

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; installs the root handlers on first use."""
    if not _configured:
        configure()
    return logging.getLogger(name)


def configure(level: str | None = None, *, log_to_file: bool | None = None) -> None:
    """(Re)configure the root logger.

    *level* overrides ``LOG_LEVEL``.  File logging goes to ``logs/`` unless
    ``APPLYPILOT_LOG_FILE=0`` or *log_to_file* is False.
    """
    global _configured
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(numeric)
    for name in _CHATTY:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    if _configured or root.handlers:
        for handler in root.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric)
        _configured = True
        return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    root.addHandler(console)

    if log_to_file is None:
        log_to_file = os.environ.get("APPLYPILOT_LOG_FILE", "1").lower() not in ("0", "false", "no")
    if log_to_file:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            log_file = LOG_DIR / f"applypilot_{datetime.now().strftime('%Y-%m-%d')}.log"
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
            root.addHandler(fh)
        except OSError:
            pass

    _configured = True
