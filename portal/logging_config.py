"""Logging setup driven by ``settings.logging``.

Call :func:`setup_logging` once at process start (the API lifespan does).
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from .config import settings

TEXT_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger from settings.

    Args:
        level: Optional override of ``settings.logging.level``
    """
    log_level = (level or settings.logging.level).upper()

    if settings.logging.format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(log_level)

    # Clear existing handlers (avoid duplicates on reload)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if settings.logging.file:
        file_handler = logging.FileHandler(settings.logging.file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # pdfplumber/pdfminer are chatty at DEBUG
    logging.getLogger("pdfminer").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={log_level} format={settings.logging.format}")
