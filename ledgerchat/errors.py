"""Request-level error taxonomy.

Each exception carries the HTTP status and the message shown to the user.
Tool failures are not part of this hierarchy: they are returned to the
model as error results and never abort a request.
"""


class LedgerChatError(Exception):
    """Base class for errors that abort a chat request."""

    status: int = 500
    user_message: str = "An error occurred. Please try again."

    def __init__(self, detail: str = "", *, user_message: str | None = None) -> None:
        if user_message is not None:
            self.user_message = user_message
        super().__init__(detail or self.user_message)


class InvalidRequestError(LedgerChatError):
    """Empty, oversized or malformed input. Rejected before any model call."""

    status = 400
    user_message = "Invalid request."


class RateLimitedError(LedgerChatError):
    """The session exceeded its request allowance for the current window."""

    status = 429
    user_message = "Too many requests. Please wait a minute."


class CompletionError(LedgerChatError):
    """The completion endpoint failed or returned something unusable."""


class ConfigurationError(CompletionError):
    """Missing or rejected credentials for the completion endpoint."""

    user_message = "API configuration error. Contact the administrator."


class UpstreamThrottledError(CompletionError):
    """The completion endpoint is rate limiting us."""

    status = 429
    user_message = "API rate limit reached. Try again later."


class CompletionTimeoutError(CompletionError):
    """A completion call did not finish within the request timeout."""
