class CompletionError(Exception):
    """Base error for the completion client."""


class ConfigurationError(CompletionError):
    """Raised when endpoint, auth headers or limiter settings are unusable."""


class CompletionTransportError(CompletionError):
    pass


class CompletionHTTPError(CompletionError):
    """Raised when the endpoint answers with an unexpected status."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        super().__init__(
            f"Request failed with status {status_code} and message {reason}"
        )
        self.status_code = status_code
        self.reason = reason


class EmptyResponseError(CompletionError):
    pass


class CompletionAPIError(CompletionError):
    """Raised when the response body carries an ``error`` field."""


class MalformedResponseError(CompletionError):
    pass
