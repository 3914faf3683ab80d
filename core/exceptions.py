"""Custom exception hierarchy for the gateway."""


class GatewayError(Exception):
    """Base exception for all gateway errors."""


class ConfigurationError(GatewayError):
    """Raised when configuration is missing or invalid."""


class PersistenceError(GatewayError):
    """Raised when the backend location cannot be written to disk.

    Attributes:
        path: File that could not be written
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class UpstreamError(GatewayError):
    """Raised when the backend origin cannot serve a forwarded request.

    Attributes:
        message: Error message
        target: Backend origin the request was sent to
    """

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.target = target


class UpstreamTimeoutError(UpstreamError):
    """Raised when the backend does not answer in time."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the backend origin."""
