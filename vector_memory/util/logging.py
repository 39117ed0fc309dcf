"""
Structured logging for vector memory operations.
Never logs memory content verbatim; payloads go through sanitize_payload.
"""

import logging
from typing import Any, Dict, List


SENSITIVE_FIELDS = ['content', 'embedding', 'embedding_vector', 'query_embedding', 'secret', 'password']


class StructuredLogger:
    """Structured logger for store/search/delete/statistics operations."""

    def __init__(self, name: str = "vector_memory", level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None,
                      level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_payload(details)}"

        self.logger.log(level, message)

    def log_vector_operation(self, operation: str, driver: str, details: Dict[str, Any] = None,
                             status: str = "success", level: int = logging.DEBUG):
        """Log a vector driver operation."""
        log_details = {"driver": driver}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details, level=level)

    def log_vector_failure(self, operation: str, driver: str, error: Exception, details: Dict[str, Any] = None):
        """Log a failed vector driver operation."""
        log_details = {"error": str(error)[:200]}
        if details:
            log_details.update(details)

        self.log_vector_operation(operation, driver, log_details, status="failed", level=logging.ERROR)

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


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for logging."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        if len(payload) > 10:
            return f"[{len(payload)} items]"
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload


# Global logger instance
logger = StructuredLogger()
