from __future__ import annotations

from typing import Any, Optional


class MappingError(Exception):
    """Base class for every error raised by the mapper."""


class TypeMismatchError(MappingError, TypeError):
    def __init__(
        self,
        destination: str,
        field: str,
        expected: str,
        actual: str,
    ) -> None:
        self.destination = destination
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Type mismatch in '{destination}' for property '{field}': "
            f"expected '{expected}', got '{actual}'."
        )


class ConstructionError(MappingError, TypeError):
    def __init__(self, destination: str, reason: Optional[Any] = None) -> None:
        self.destination = destination
        message = f"Can't instantiate destination type {destination}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConverterNotFoundError(MappingError, KeyError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"No converter registered under key '{self.key}'."
