"""Exception hierarchy for the perimeter proxy."""


class PerimeterError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        message: Error message
        status_code: HTTP status code returned to the caller
        stage: Pipeline stage that could not be reached (optional)
    """

    status_code = 500
    stage: str | None = None

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(PerimeterError):
    """Raised when configuration is missing or invalid."""


class MalformedCredential(PerimeterError):
    """Bearer credential is missing, malformed or lacks the identity claim."""

    status_code = 401


class UpstreamUnavailable(PerimeterError):
    """Raised when the destination cannot be reached.

    Attributes:
        destination: URL the request was forwarded to
    """

    status_code = 502

    def __init__(self, message: str, destination: str | None = None) -> None:
        super().__init__(message)
        self.destination = destination


class UpstreamTimeout(UpstreamUnavailable):
    """Raised when the destination does not answer within the timeout."""

    status_code = 504


class RequestTooLarge(PerimeterError):
    """Request body exceeds size limit."""

    status_code = 413
