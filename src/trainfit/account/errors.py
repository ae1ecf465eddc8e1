# Account error taxonomy.
#
# AppError carries a server-supplied message that is safe to show verbatim.
# Everything else the user sees goes through a fallback message.

from __future__ import annotations


class TrainfitError(Exception):
    """Base class for account client errors."""


class AppError(TrainfitError):
    """The server rejected the request with a known reason."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnclassifiedError(TrainfitError):
    """Transport or server failure without a known reason."""


class NotAuthenticatedError(TrainfitError):
    """No identity is available in the session."""


class AssetPolicyError(TrainfitError):
    """A selected asset cannot be uploaded."""

    OVERSIZED = "oversized"
    MISSING = "missing"
    PROBE_FAILED = "probe_failed"
    SELECTION_FAILED = "selection_failed"

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(detail or reason)
        self.reason = reason
        self.detail = detail


def describe_error(error: BaseException, fallback: str) -> str:
    """Return the text to show the user for *error*."""
    if isinstance(error, AppError) and error.message:
        return error.message
    return fallback
