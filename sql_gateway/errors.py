"""
Error taxonomy for the SQL gateway.
Every failure the dispatcher can report is one of these, tagged with an ErrorKind.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Machine-readable classification carried on every failed response."""
    MISSING_FIELD = "MissingField"
    TYPE_MISMATCH = "TypeMismatch"
    INVALID_ENUM = "InvalidEnum"
    OUT_OF_RANGE = "OutOfRange"
    NOT_FOUND = "NotFound"
    GENERATION_ERROR = "GenerationError"
    MALFORMED_IDENTIFIER = "MalformedIdentifier"
    EXECUTION_ERROR = "ExecutionError"
    INTERNAL_ERROR = "InternalError"


class GatewayError(Exception):
    """Base class for errors raised inside the gateway core."""

    kind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class ValidationError(GatewayError):
    """Caller arguments do not satisfy the operation's schema."""

    kind = ErrorKind.MISSING_FIELD

    def __init__(self, message: str, kind: ErrorKind, field: Optional[str] = None):
        super().__init__(message, kind)
        self.field = field


class UnknownOperation(GatewayError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class GenerationError(GatewayError):
    """Validated arguments are internally inconsistent and cannot become SQL."""

    kind = ErrorKind.GENERATION_ERROR


class MalformedIdentifier(GenerationError):
    kind = ErrorKind.MALFORMED_IDENTIFIER


class ExecutionError(GatewayError):
    """The database rejected the statement, or could not be reached in time."""

    kind = ErrorKind.EXECUTION_ERROR
