"""Error kinds raised by the link core.

The HTTP layer maps each of these to a status code in ``main.py``; the
message of caller errors is safe to show, internal failures are not.
"""
from typing import Optional


class LinkError(Exception):
    """Base class for every error the core raises."""

    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(LinkError):
    """Malformed target URL or code."""

    message = "Invalid input"


class CodeConflict(LinkError):
    message = "Short code already exists"

    def __init__(self, code: str):
        self.code = code
        super().__init__()


class NotFound(LinkError):
    # Same message whether the code was deleted or never existed
    message = "Link not found"

    def __init__(self, code: str):
        self.code = code
        super().__init__()


class StoreUnavailable(LinkError):
    """The database failed underneath a registry operation."""


class CodeGenerationExhausted(LinkError):
    """Every generated candidate collided with an existing code."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__()
