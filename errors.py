"""Error taxonomy shared by the gateway, the document store and the API."""

from enum import Enum


class ErrorKind(str, Enum):
    UPSTREAM = "upstream"
    NOT_FOUND = "not_found"


class FinanceDataError(Exception):
    """Base class for failures talking to Plaid or the document store."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class UpstreamError(FinanceDataError):
    """Plaid or the database is unreachable or returned an error."""

    kind = ErrorKind.UPSTREAM


class NotFoundError(FinanceDataError):
    """A requested bank link or institution does not exist."""

    kind = ErrorKind.NOT_FOUND
