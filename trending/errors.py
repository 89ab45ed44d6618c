class FetchError(Exception):
    """Base class for failures while fetching repositories."""


class TransportError(FetchError):
    """Network or HTTP failure talking to GitHub or the proxy."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ProtocolError(FetchError):
    """Response arrived but was malformed or had an unexpected shape."""


class ValidationError(Exception):
    """Bad request sent to the proxy (wrong method or unknown type)."""
