"""
Error types for the matching pipeline.

A backend call can fail in two ways that matter to us:
- the capability does not exist (the RPC function was never deployed), and
- anything else (network, permissions, bad input, server error).

The first one lets the cascade try the next tier, the second one stops the search.
"""

from typing import Optional

# Legacy message fragments returned by PostgREST / Postgres when an RPC is missing
CAPABILITY_ABSENT_MESSAGES = ("Could not find the function", "does not exist")

# PGRST202: function not in schema cache, 42883: undefined_function
CAPABILITY_ABSENT_CODES = ("PGRST202", "42883")


class MatchError(Exception):
    """Base class for all errors raised by the engine."""


class RpcError(MatchError):
    """Raw error returned by the backend."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class CapabilityAbsent(MatchError):
    """The requested backend operation does not exist."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        super().__init__(f"Capability {operation!r} is not available")
        self.operation = operation
        self.cause = cause


class BackendFailure(MatchError):
    """A backend operation exists but failed."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        detail = str(cause) if cause else "unknown error"
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.cause = cause


def is_capability_absent(error: Exception) -> bool:
    """Check whether an error means "this operation does not exist"."""
    if isinstance(error, CapabilityAbsent):
        return True
    if isinstance(error, RpcError) and error.code in CAPABILITY_ABSENT_CODES:
        return True
    message = getattr(error, "message", None) or str(error)
    return any(fragment in message for fragment in CAPABILITY_ABSENT_MESSAGES)
