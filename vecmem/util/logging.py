"""
Structured logging for vector memory operations.
"""

import logging
from typing import Any, Dict

MAX_DETAIL_LENGTH = 50


def _truncate(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_DETAIL_LENGTH:
        return value[:MAX_DETAIL_LENGTH] + "..."
    return value


class StructuredLogger:
    """Structured logger for embedding, storage and engine operations."""

    def __init__(self, name: str = "vecmem"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_debug(self, enabled: bool) -> None:
        """Switch between DEBUG and INFO verbosity."""
        self.logger.setLevel(logging.DEBUG if enabled else logging.INFO)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            safe_details = {k: _truncate(v) for k, v in details.items()}
            message += f", Details: {safe_details}"

        self.logger.log(level, message)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log an operation on a single stored entry."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_store_event(self, event: str, base_path: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a store-wide event (load, clear, corruption skip)."""
        log_details = {"base_path": str(base_path)}
        if details:
            log_details.update(details)

        level = logging.WARNING if status in ("skipped", "recovered", "failed") else logging.INFO
        self.log_operation(f"store.{event}", status, log_details, level=level)

    def log_embedding_fallback(self, provider: str, fallback: str, error: str):
        """Log a remote embedding failure and the fallback taken."""
        log_details = {
            "provider": provider,
            "fallback": fallback,
            "error": error
        }
        self.log_operation("embedding.fallback", "degraded", log_details, level=logging.WARNING)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
