"""Structured JSON logging for engine calls"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from finance_engine.config import settings

logger = logging.getLogger("finance_engine")


class EngineJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines stamped with UTC time, level and service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Send every log record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(EngineJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)


def log_operation(
    request_id: str,
    operation: str,
    duration_ms: float,
    **fields: Any,
) -> None:
    """
    Log one engine computation.

    Calls slower than ``settings.slow_operation_ms`` are logged at WARNING
    so large projections stand out.
    """
    slow = duration_ms > settings.slow_operation_ms
    logger.log(
        logging.WARNING if slow else logging.INFO,
        "Slow engine operation" if slow else "Engine operation completed",
        extra={
            "request_id": request_id,
            "step": "operation_complete",
            "operation": operation,
            "duration_ms": round(duration_ms, 3),
            **fields,
        },
    )
