"""
Structured logging for store, search and API operations.
"""

import logging
import os
from typing import Any, Dict, Optional


class StructuredLogger:
    """Structured logger for review store and search operations."""

    def __init__(self, name: str = "review_search", level: Optional[str] = None):
        self.logger = logging.getLogger(name)
        level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
        self.logger.setLevel(getattr(logging, level_name, logging.INFO))

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("repaired", "degraded"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_store_operation(self, operation: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a review store operation (insert, search, open)."""
        self.log_operation(f"store.{operation}", status, details)

    def log_repair(self, log_name: str, before: int, after: int, reason: str):
        """Log a truncation performed while reconciling the paired logs."""
        details = {
            "log": log_name,
            "records_before": before,
            "records_after": after,
            "reason": reason,
        }
        self.log_operation("store.repair", "repaired", details)

    def log_embedding_failure(self, text: str, error: Exception):
        """Log an embedding failure; the caller falls back to a zero vector."""
        details = {
            "text": text[:50] + "..." if len(text) > 50 else text,
            "error": str(error)[:100],
        }
        self.log_operation("embedding.encode", "failed", details)

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

    def exception(self, message: str) -> None:
        """Log an error message with the active traceback."""
        self.logger.exception(message)


# Global logger instance
logger = StructuredLogger()
