from __future__ import annotations

import logging
from pathlib import Path


LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logging(log_path: str | Path, verbose: bool = False) -> logging.Logger:
    """Attach an append-only file handler to the package logger."""
    logger = logging.getLogger("pomcli")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    path = Path(log_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError:
        # an unwritable log location must not stop the timer
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
