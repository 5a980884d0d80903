"""Error types raised by responses_client.

Errors that happen while a reply is streaming never escape the producer
directly: they are pushed into the ResponseStream as error items and are
raised to the consumer from ``__anext__``.
"""

from typing import Optional


class ResponsesClientError(Exception):
    """Base class for all responses_client errors."""
    pass


class ConfigValidationError(ResponsesClientError):
    """Raised when configuration is invalid."""
    pass


class StreamClosedError(ResponsesClientError):
    """Raised on the producer side once the consumer has released the stream."""
    pass


class StreamProtocolError(ResponsesClientError):
    """The SSE reply was malformed or ended before ``response.completed``."""
    pass


class ResponseFailedError(ResponsesClientError):
    """The server reported ``response.failed`` for this turn.

    Attributes:
        message: Error message reported by the server.
        code: Optional machine-readable error code.
        response_id: Id of the failed response, when the server sent one.
    """

    def __init__(self, message: str, code: Optional[str] = None, response_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.response_id = response_id

    def __repr__(self) -> str:
        return f"ResponseFailedError({self.code}: {self.message})"
