"""
ErrorCollege capture events.

Payloads produced by capture sources: an uncaught error with its location,
and a rejected awaitable with its reason.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import traceback

from dataclasses import dataclass
from typing import Any


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorEvent:
    """Uncaught error event.

    Attributes:
        type: Event type, e.g. "error".
        message: Human readable error message.
        filename: Source file where the error was raised.
        lineno: Line number in filename.
        colno: Column number in filename, None if unknown.
        error: The error object itself.
    """

    type: str = "error"
    message: str = ""
    filename: str = ""
    lineno: int | None = None
    colno: int | None = None
    error: Any = None

    @classmethod
    def from_exception(cls, exc: BaseException, type: str = "error") -> "ErrorEvent":
        """Build an event located at the innermost traceback frame of exc.

        Examples:
            >>> try:
            ...     1 / 0
            ... except ZeroDivisionError as e:
            ...     event = ErrorEvent.from_exception(e)
            >>> event.message
            'ZeroDivisionError: division by zero'
        """
        message = "".join(traceback.format_exception_only(exc.__class__, exc)).strip()
        frames = traceback.extract_tb(exc.__traceback__)
        if not frames:
            return cls(type=type, message=message, error=exc)

        frame = frames[-1]
        return cls(
            type=type,
            message=message,
            filename=frame.filename,
            lineno=frame.lineno,
            colno=getattr(frame, "colno", None),
            error=exc,
        )


@dataclass(frozen=True)
class RejectionEvent:
    """Unhandled rejection event of an awaitable.

    Attributes:
        type: Event type, e.g. "unhandledrejection".
        reason: The value the awaitable failed with, usually an exception.
    """

    type: str = "unhandledrejection"
    reason: Any = None
