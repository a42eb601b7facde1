"""Error types and error reporting helpers.

Two kinds of error reach the UI layer:

- ValidationError: raised when user input (currently only annotation
  construction) is rejected. Carries a field-specific message that is
  safe to show as-is.
- UnknownError: wraps any unexpected exception with a generic user-facing
  message while keeping the original for diagnostics.

Controllers never raise for invalid navigation; they return False.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

GENERIC_USER_MESSAGE = "An unexpected error occurred. Please try again."


class ReviewError(Exception):
    """Base class for errors surfaced to the reviewer.

    Attributes:
        message: Diagnostic message.
        code: Stable machine-readable error code.
        user_message: Text to show in the UI.
    """

    code = "REVIEW_ERROR"

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message if user_message is not None else message


class ValidationError(ReviewError, ValueError):
    """Rejected input, e.g. "Coordinate x must be between 0 and 512"."""

    code = "VALIDATION_ERROR"


class UnknownError(ReviewError):
    """Unexpected failure wrapped for display.

    Attributes:
        original: The wrapped exception, if any.
    """

    code = "UNKNOWN_ERROR"

    def __init__(
        self,
        message: str,
        user_message: str = GENERIC_USER_MESSAGE,
        original: BaseException | None = None,
    ) -> None:
        super().__init__(message, user_message)
        self.original = original
        if original is not None:
            self.__cause__ = original


def handle_error(error: BaseException | object, context: str | None = None) -> ReviewError:
    """Convert any raised object into a ReviewError.

    ReviewErrors pass through unchanged. Exceptions are wrapped in an
    UnknownError keeping their message and traceback; anything else
    becomes a generic UnknownError.

    Args:
        error: The caught exception (or arbitrary raised value).
        context: Optional name of the area where the error happened,
            used in the user-facing message.

    Returns:
        A ReviewError suitable for display.
    """
    if isinstance(error, ReviewError):
        return error

    if isinstance(error, BaseException):
        user_message = (
            f"An unexpected error occurred in {context}. Please try again."
            if context
            else GENERIC_USER_MESSAGE
        )
        return UnknownError(str(error), user_message=user_message, original=error)

    return UnknownError("An unknown error occurred")


def log_error(error: ReviewError, context: str | None = None) -> None:
    """Log a ReviewError with its code and traceback.

    Args:
        error: Error to log.
        context: Optional area name used as a log prefix.
    """
    source = error.original if isinstance(error, UnknownError) and error.original else error
    logger.error(
        f"[{context or 'App'}] {error.code}: {error.message}",
        exc_info=(type(source), source, source.__traceback__),
    )


__all__ = [
    "GENERIC_USER_MESSAGE",
    "ReviewError",
    "UnknownError",
    "ValidationError",
    "handle_error",
    "log_error",
]
