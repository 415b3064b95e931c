"""
Application errors.

Use ServiceUnavailableError when the assistant LLM is misconfigured or
unreachable; QueryServiceError when it answered with nothing usable. The
dispatcher turns both into the cached error response, so neither reaches the
rendering layer.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. the assistant LLM) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class QueryServiceError(Exception):
    """Raised when the query service returns no answer for a message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ResponseConflictError(Exception):
    """Raised on an attempt to replace an already cached response with different text."""

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        super().__init__(f"Response for message {message_id!r} is already cached")
