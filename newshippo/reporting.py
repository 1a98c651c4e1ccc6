"""Outcome reporting side-channel. Reports never gate or alter a result."""
import logging
import time
from typing import Any, Dict, Optional, Protocol

from .errors import NewsHippoError
from .schemas import OperationResult

logger = logging.getLogger(__name__)

LEVELS = {
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Reporter(Protocol):
    def report(self, level: str, message: str, context: Dict[str, Any]) -> None: ...


class LoggingReporter:
    """Reports outcomes to the ``newshippo.report`` logger."""

    def __init__(self, logger_name: str = "newshippo.report"):
        self.logger = logging.getLogger(logger_name)

    def report(self, level: str, message: str, context: Dict[str, Any]) -> None:
        self.logger.log(LEVELS.get(level, logging.INFO), message, extra={"context": context})


def safe_report(reporter: Reporter, level: str, message: str, context: Dict[str, Any]) -> None:
    """Call the reporter, logging and suppressing anything it raises."""
    try:
        reporter.report(level, message, context)
    except Exception as e:
        logger.warning(f"⚠️ Report failed: {e}")


def finish(
    reporter: Reporter,
    operation: str,
    started: float,
    data: Any = None,
    error: Optional[BaseException] = None,
    request: Optional[Dict[str, Any]] = None,
) -> OperationResult:
    """
    Build the operation's result, report it, and return it unchanged.

    Errors outside the NewsHippoError taxonomy are reported as InternalError.
    """
    processing_time = time.monotonic() - started
    if error is None:
        result = OperationResult(
            status="success",
            operation=operation,
            data=data,
            processing_time_seconds=processing_time,
        )
    else:
        error_type = error.error_type if isinstance(error, NewsHippoError) else "InternalError"
        result = OperationResult(
            status="error",
            operation=operation,
            error=str(error),
            error_type=error_type,
            processing_time_seconds=processing_time,
        )

    level = "info" if result.ok else "error"
    context = {
        "source": operation,
        "request": request or {},
        "data": result.model_dump(mode="json"),
    }
    safe_report(reporter, level, f"Request handled by {operation}", context)
    return result
