"""Custom exception hierarchy for the dynamic proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        message: Plain-text message returned to the caller
        status_code: HTTP status code returned to the caller
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationMissing(ProxyError):
    """Raised when no proxy target has been stored yet."""

    status_code = 400


class InvalidTargetUrl(ProxyError):
    """Raised when a setUrl value is not an absolute URL."""

    status_code = 400


class UrlConstructionError(ProxyError):
    """Raised when the upstream URL cannot be resolved against the base."""

    status_code = 500


class UpstreamTransportError(ProxyError):
    """Raised when the upstream cannot be reached (DNS, connect, read...)."""

    status_code = 500


class InvalidJSON(ProxyError):
    """Request body is not valid JSON."""

    status_code = 400
