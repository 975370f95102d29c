import logging
from logging import Logger
from typing import Optional

from .config import get_settings

LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"


def configure_logging(name: Optional[str] = None) -> Logger:
    """تهيئة مسجل الخدمة مرة واحدة وإرجاعه، أو مسجل فرعي باسم الوحدة."""
    settings = get_settings()

    root = logging.getLogger(settings.app_name)
    if not root.handlers:
        root.setLevel(settings.log_level.upper())

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root.addHandler(handler)
        root.propagate = False

    return root.getChild(name) if name else root
