from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import config

# passed through `extra=` by the checkout and deduction code
CONTEXT_FIELDS = ("order_number", "menu_item_id", "inventory_id", "recipe_unit", "stock_unit")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with any POS context attached to the record."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_json_logging(level: str | None = None):
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO))
