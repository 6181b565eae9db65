"""Root logger configuration shared by the CLI and scripts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_HANDLERS: List[logging.Handler] = []


def reset_logger() -> None:
    """Detach and close every handler installed by :func:`config_logger`."""

    logger = logging.getLogger()
    while _HANDLERS:
        handler = _HANDLERS.pop()
        handler.close()
        logger.removeHandler(handler)


def config_logger(path: str | Path | None = None, level: int | str = logging.INFO) -> logging.Logger:
    """Configure the root logger to write to the console and, optionally, ``path``.

    Handlers from an earlier call are removed first so repeated calls do not
    duplicate output.
    """

    reset_logger()
    logger = logging.getLogger()
    logger.setLevel(level)

    formatter = logging.Formatter(FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if path is not None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _HANDLERS.append(handler)
    return logger


__all__ = ["config_logger", "reset_logger"]
