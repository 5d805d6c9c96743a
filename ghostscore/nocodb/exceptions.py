"""Exceptions raised by the NocoDB client."""


class NocoDBError(Exception):
    """Base exception for all NocoDB client errors.

    While listing tables this is fatal for the run; while writing one
    employer's row the pipeline catches it and moves on to the next employer.
    """

    pass


class NocoDBHTTPError(NocoDBError):
    """Request failed at the transport level or returned a 4xx/5xx status.

    ``status_code`` is 0 when no response was received (connection refused,
    DNS failure, ...).
    """

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class NocoDBTimeoutError(NocoDBError):
    """Request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class NocoDBResponseError(NocoDBError):
    """Response body was not JSON or not shaped like a row listing."""

    pass
