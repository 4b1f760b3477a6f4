"""
Warden - Backend Error Taxonomy
=================================
Exceptions raised by the response interceptor (client/api.py).

Every backend call ends in exactly one of these outcomes when it does not
succeed:

    SessionExpired -> HTTP 401, the login redirect policy has already run
    ClientError    -> any other HTTP 4xx
    RemoteFailure  -> the envelope says success=false (or cannot be decoded)
    Unreachable    -> no response at all (DNS, refused connection, timeout)

None of them are retried here. Callers decide whether to notify the user.
"""


class ApiError(Exception):
    """Base class for every failure surfaced by ApiClient."""

    kind = "error"


class SessionExpired(ApiError):
    """
    The backend rejected the session (HTTP 401).

    Attributes:
        detail: Raw response body text, kept for diagnostics.
    """

    kind = "session_expired"

    def __init__(self, detail: str = ""):
        super().__init__("Session expired")
        self.detail = detail


class ClientError(ApiError):
    """
    The backend rejected the request itself (HTTP 4xx other than 401).

    Attributes:
        status: The numeric HTTP status code.
    """

    kind = "client_error"

    def __init__(self, status: int):
        super().__init__(f"HTTP {status}")
        self.status = status


class RemoteFailure(ApiError):
    """
    The backend answered but reported a logical failure.

    Attributes:
        message: Error identifier from the envelope (usually a lang key).
        cause:   Optional underlying cause string from the envelope.
    """

    kind = "remote_failure"

    def __init__(self, message: str | None, cause: str | None = None):
        super().__init__(message or "remote failure")
        self.message = message
        self.cause = cause


class Unreachable(ApiError):
    """The transport never produced a response."""

    kind = "unreachable"

    def __init__(self, reason: str = ""):
        super().__init__(reason or "Backend unreachable")
        self.reason = reason
