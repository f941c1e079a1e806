"""Exception types raised by the timeline engine."""

from typing import Any, Optional


class TimelineError(Exception):
    """Base class for timeline engine errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MalformedDocument(TimelineError):
    """A project document could not be parsed or is missing required fields.

    Examples:
        - payload is not valid JSON
        - payload has no ``slides`` array
        - a clip or action fails validation
    """
    pass
