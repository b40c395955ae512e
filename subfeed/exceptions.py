class FeedError(Exception):
    """Base error rendered as a ``{error, details}`` JSON envelope."""

    status_code = 500
    error_code = "feed_error"

    def __init__(self, message: str, status_code: int | None = None, details=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class MissingTokenError(FeedError):
    """Raised when the request carries no access token."""

    status_code = 401
    error_code = "missing_token"

    def __init__(self):
        super().__init__("Access token required")


class InvalidTokenError(FeedError):
    """Raised when Google rejects the access token."""

    status_code = 401
    error_code = "invalid_token"

    def __init__(self):
        super().__init__("Invalid or expired access token")


class UpstreamError(FeedError):
    """Raised when the subscriptions endpoint answers with an error payload."""

    status_code = 400
    error_code = "upstream_error"


class SubscriptionsNotFoundError(FeedError):
    """Raised when the user has no subscriptions."""

    status_code = 404
    error_code = "not_found"

    def __init__(self):
        super().__init__("No subscriptions found")


class ChannelFetchError(FeedError):
    """Raised when one channel's recent videos cannot be fetched."""

    error_code = "channel_fetch_error"

    def __init__(self, channel_id: str, message: str, details=None):
        super().__init__(message, details=details)
        self.channel_id = channel_id


class InternalError(FeedError):
    """Wraps any unexpected failure while building the feed."""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, details: str):
        super().__init__("Internal server error", details=details)
