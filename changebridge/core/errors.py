"""Exceptions raised by the changebridge adapter and its connectors."""


class AdapterError(Exception):
    """Base class for adapter failures."""


class ConfigError(AdapterError):
    """Raised when adapter properties are invalid or missing."""


class TransportError(AdapterError):
    """Raised by a connector when a request fails or returns a bad status.

    Attributes:
        status_code: HTTP status of the failed response, if one was received.
        body: Response text of the failed response, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InstanceHibernatingError(TransportError):
    """Raised when the remote instance answers with its hibernation page."""


class EmptyResponseError(AdapterError):
    """Raised when an error-free response carries no body."""


class MalformedPayloadError(AdapterError):
    """Raised when a response body cannot be decoded into records."""
