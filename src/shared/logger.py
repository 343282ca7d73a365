"""Налаштування логування.

Інтерактивне меню пише у stdout, тому для сесій меню журнал можна
перенаправити у файл (``--log-file``), щоб він не перемішувався з меню.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

# requests/urllib3 are chatty at DEBUG; keep them at INFO or above
_NOISY_LOGGERS = ("urllib3", "requests")


def setup_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """Налаштовує кореневий логер: stderr або файл, лаконічний формат.

    Args:
        level: Рівень логування (DEBUG, INFO, WARNING, ERROR).
        log_file: Якщо задано — писати журнал у цей файл (дописувати),
            а не в stderr. Каталог створюється за потреби.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
        datefmt = "%Y-%m-%d %H:%M:%S"
    else:
        handler = logging.StreamHandler(sys.stderr)
        datefmt = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=datefmt))
    logging.basicConfig(level=numeric, handlers=[handler], force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.INFO))
