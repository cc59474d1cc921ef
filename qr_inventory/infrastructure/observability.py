"""Structured Logging — one JSON line per inventory event.

Invariants:
    - Every line has timestamp, level, logger, message
    - Only whitelisted extras are emitted (INVENTORY_EXTRAS); a token or secret
      passed as an extra by mistake never reaches the output
    - setup_logging() is idempotent: calling it again swaps the handler it
      installed earlier instead of stacking a second one

Design Decisions:
    - Settings-driven (log_level, log_format) so build_core can install it
      without the surrounding service repeating the wiring
    - Handlers are attached to the "qr_inventory" logger, not the root logger;
      the host application keeps control of its own handlers
"""

import json
import logging
from datetime import datetime, timezone

from qr_inventory.config import Settings

PACKAGE_LOGGER = "qr_inventory"

INVENTORY_EXTRAS = (
    "item_id", "qr_id", "lending_id", "role", "error_code", "operation",
    "keyword_count", "hit_count",
)

_HUMAN_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update({
            key: record.__dict__[key]
            for key in INVENTORY_EXTRAS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        # UUIDs and datetimes arrive as extras now and then
        return json.dumps(line, ensure_ascii=False, default=str)


class _InventoryHandler(logging.StreamHandler):
    """Marker type so setup_logging can find the handler it owns."""


def setup_logging(settings: Settings) -> logging.Logger:
    """Install (or replace) the package handler described by settings."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in [h for h in logger.handlers if isinstance(h, _InventoryHandler)]:
        logger.removeHandler(old)

    handler = _InventoryHandler()
    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_HUMAN_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger
