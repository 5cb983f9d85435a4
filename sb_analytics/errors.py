"""Error taxonomy for the analytics service.

Every error that can reach a caller carries an HTTP-class status code and a
public message. Raw driver or exception text is never part of the public
message.
"""


class AnalyticsError(Exception):
    """Base class for errors surfaced as structured ``{ok: false}`` bodies."""

    status_code = 500
    public_message = "internal error"

    def __init__(self, message=None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class ProbeFailure(AnalyticsError):
    """Fast source failed its health probe. Only used for source selection."""


class QueryExecutionFailure(AnalyticsError):
    """A query attempt failed against a source."""

    status_code = 500
    public_message = "query failed"

    def __init__(self, source: str = "", cause: Exception = None):
        super().__init__()
        self.source = source
        self.cause = cause

    def __str__(self) -> str:
        return f"query failed on source={self.source}: {self.cause!r}"


class NotFound(AnalyticsError):
    """Requested identifier has no matching record."""

    status_code = 404
    public_message = "not found"


class ValidationError(AnalyticsError):
    """Missing or malformed request parameter."""

    status_code = 400
    public_message = "invalid request"
