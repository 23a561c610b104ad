"""Error taxonomy for the TVM client."""

from typing import Optional


class TvmError(Exception):
    """Base exception for TVM client errors.

    Every error carries a stable ``code`` and renders as
    ``[TvmClient:<code>] <message>``.
    """

    code = "ERROR_UNKNOWN"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(f"[TvmClient:{self.code}] {message}")
        self.message = message
        self.cause = cause


class BadArgumentError(TvmError):
    """Invalid or missing initialization argument."""

    code = "ERROR_BAD_ARGUMENT"


class MissingOptionError(TvmError):
    """A retrieval call is missing one of its required options."""

    code = "ERROR_MISSING_OPTION"


class ResponseError(TvmError):
    """The TVM server answered with a non-2xx status."""

    code = "ERROR_RESPONSE"

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(f"Error response from TVM server with status code: {status_code}")
        self.status_code = status_code
        self.body = body


class TransportError(TvmError):
    """The request to the TVM server could not be completed."""

    code = "ERROR_TRANSPORT"
