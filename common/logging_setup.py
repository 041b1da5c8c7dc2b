from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Optional

# Attributes copied from the LogRecord when callers pass them via `extra=`.
_CONTEXT_FIELDS = ("tile", "source_tile", "provider", "status_code", "url")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line:
      { "t": 1700000000000, "lvl": "DEBUG", "name": "tile_providers.max_zoom",
        "msg": "overzoom", "tile": "16/12345/23456", "source_tile": "14/3086/5864" }
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = str(value) if not isinstance(value, (int, float)) else value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once with JSON output on stdout.
    Level precedence:
      - explicit `level` arg
      - env LOG_LEVEL (e.g., DEBUG/INFO/WARNING/ERROR)
      - default INFO
    """
    root = logging.getLogger()
    if getattr(root, "_tiles_configured", False):
        if level:
            root.setLevel(_resolve_level(level))
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level or os.environ.get("LOG_LEVEL")))
    root._tiles_configured = True  # type: ignore[attr-defined]


def _resolve_level(name: Optional[str]) -> int:
    lvl = logging.getLevelName((name or "INFO").upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensures root is configured."""
    setup_logging()
    return logging.getLogger(name)
