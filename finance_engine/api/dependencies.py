"""Request helpers shared by the v1 endpoints"""

import logging
import time
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, Request

from finance_engine.infrastructure.observability.logging import log_operation
from finance_engine.infrastructure.observability.metrics import record_operation

Result = TypeVar("Result")


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def run_operation(request: Request, operation: str, compute: Callable[[], Result], **log_fields: Any) -> Result:
    """
    Run an engine computation with timing, metrics and a structured log line.

    The engine normalizes its inputs instead of raising, so anything that
    escapes here is a bug and maps to 500.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = compute()
    except Exception as e:
        logging.error(f"Unexpected error in {operation}: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration = time.time() - start_time
    record_operation(operation, duration)
    log_operation(request_id, operation, duration * 1000, **log_fields)
    return result
