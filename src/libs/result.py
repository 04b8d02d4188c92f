"""
Result type shared by the application layer.

Use cases return ``Result[T]`` instead of raising: ``Return.ok(value)`` on
success, ``Return.err(Error(code, message))`` on an expected failure.
"""

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Error:
    """A machine-readable code plus a human-readable message"""

    def __init__(self, code: str, message: str, reason: Optional[str] = None):
        self.code = code
        self.message = message
        # Internal detail for logs only, never rendered to clients
        self.reason = reason

    def __repr__(self) -> str:
        return f"Error(code={self.code!r}, message={self.message!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return self.code == other.code and self.message == other.message


class Result(Generic[T]):
    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result holds an error: {self._error!r}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Result holds a value, not an error")
        return self._error


class Return:
    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
