# File: threepwood/logger.py
"""threepwood.logger: логгер ``Threepwood`` для CLI, краулера и классификатора.

Сообщения идут в stderr, чтобы stdout оставался за отчётом. При ``--log-file``
добавляется файл с ротацией (5 МБ, 3 копии).
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "Threepwood"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def init_logging(
    level: Union[int, str] = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Пересобирает обработчики логгера и выставляет уровень *level*."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["LOGGER_NAME", "init_logging", "logger"]
