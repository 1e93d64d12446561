"""Logging setup and structured operation logging."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at application start-up."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class StructuredOperationLogger:
    """Structured logger for provider and persistence operations.

    Identifiers go into ``extra["structured"]``; embedding vectors and raw
    provider payloads are never passed here.
    """

    def log_success(self, operation: str, latency_ms: float, **ids: Any) -> None:
        """Log a completed operation with its identifiers."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "outcome": "success",
            "latency_ms": round(latency_ms, 2),
            **ids,
        }
        logger.info(f"Operation: {operation} - success", extra={"structured": log_data})

    def log_failure(self, operation: str, error: BaseException, **ids: Any) -> None:
        """Log a failed operation with its identifiers and error type."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "outcome": "error",
            "error_type": type(error).__name__,
            **ids,
        }
        logger.error(f"Operation: {operation} - failed: {error}", extra={"structured": log_data})


operation_logger = StructuredOperationLogger()
