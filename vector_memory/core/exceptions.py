"""
Error kinds raised by vector memory drivers and record stores.
"""

from typing import Optional


class VectorMemoryError(Exception):
    """Base exception for vector memory operations."""
    pass


class ConfigurationError(VectorMemoryError):
    """Backend selected but unavailable or misconfigured."""
    pass


class StorageError(VectorMemoryError):
    """Underlying persistence or engine call failed."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 agent_name: Optional[str] = None, namespace: Optional[str] = None):
        self.operation = operation
        self.agent_name = agent_name
        self.namespace = namespace
        self.original_message = message

        context = []
        if operation:
            context.append(f"operation={operation}")
        if agent_name:
            context.append(f"agent={agent_name}")
        if namespace:
            context.append(f"namespace={namespace}")

        if context:
            super().__init__(f"{message} ({', '.join(context)})")
        else:
            super().__init__(message)


class DimensionMismatchError(VectorMemoryError, ValueError):
    """Query vector length differs from stored vector length."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Vector dimension {actual} does not match expected dimension {expected}")
