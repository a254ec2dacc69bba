"""consensus.core.logging

Log lines are events, not prose.

Modules log a snake_case event name as the message and put context in
``extra=``. This module turns that into either a readable line or one JSON
object per line, depending on ``LoggingConfig.json_output``.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from consensus.core.config import LoggingConfig

ROOT_LOGGER = "consensus"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> dict[str, object]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        data.update(_extras(record))
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, sort_keys=True, default=str)


class KeyValueFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return line


def configure_logging(cfg: LoggingConfig | None = None) -> logging.Logger:
    """Install a single stream handler on the package logger. Idempotent."""

    cfg = cfg or LoggingConfig()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(cfg.level.upper())

    for h in list(logger.handlers):
        if getattr(h, "_consensus_handler", False):
            logger.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if cfg.json_output else KeyValueFormatter())
    handler._consensus_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger
