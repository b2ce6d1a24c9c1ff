from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from .settings import Settings


def _resolve_log_dir(settings: Settings) -> Path:
    """Resolve the log directory.

    - If MENUWORKS_LOG_DIR is absolute, use it directly.
    - Otherwise, treat it as relative to the directory holding the menu config.
    """

    raw = settings.MENUWORKS_LOG_DIR
    p = raw if isinstance(raw, Path) else Path(str(raw))
    p = p.expanduser()
    if p.is_absolute():
        return p

    return Path(settings.MENUWORKS_CONFIG).expanduser().resolve().parent / p


def setup_logging(settings: Settings, console: bool = False) -> Path:
    """Configure Python logging to write to a rotating diagnostic log file.

    Returns the resolved log file path.

    Rotation:
      - Daily rotation at midnight.
      - Keep the last `MENUWORKS_LOG_BACKUP_COUNT` rotated files.

    Notes:
      - A stderr handler is only added when `console` is true; the menu owns
        the terminal while it is drawing.
      - This function is safe to call multiple times (it resets handlers).
    """

    log_dir = _resolve_log_dir(settings)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "menuworks.log"

    level_name = str(settings.MENUWORKS_LOG_LEVEL or "INFO").upper().strip()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    file_handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        interval=1,
        backupCount=max(0, int(settings.MENUWORKS_LOG_BACKUP_COUNT or 0)),
        encoding="utf-8",
        utc=False,
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(fmt))

    # Reset root handlers so we don't duplicate logs on repeated starts.
    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers = []
    root.setLevel(level)
    root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(console_handler)

    logging.getLogger("menuworks").info(
        "menuworks logging enabled (file=%s, level=%s)",
        os.fspath(log_file),
        level_name,
    )

    return log_file
