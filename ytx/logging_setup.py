"""
Process-wide logging setup.

Library modules log through logging.getLogger(__name__); this module wires
the "ytx" logger to a JSON-lines file so stdout stays reserved for
transcript output.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ytx.config import Config

LOG_FILE_NAME = "ytx.log"


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def log_file_path(log_dir: Optional[Path] = None) -> Path:
    return (log_dir or Config.LOG_DIR) / LOG_FILE_NAME


def setup_logging(log_dir: Optional[Path] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Attach a JSON file handler to the package logger.

    Idempotent: calling it again returns the already configured logger.
    """
    logger = logging.getLogger("ytx")
    if any(getattr(h, "_ytx_handler", False) for h in logger.handlers):
        return logger

    path = log_file_path(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(JSONFormatter())
    handler._ytx_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(level or Config.LOG_LEVEL)
    logger.propagate = False

    logger.info("Logging initialized: %s", path)
    return logger
