"""
Error taxonomy for the SCIM directory.

Every error raised towards the HTTP surface derives from SCIMDirectoryError
and carries the status code it is answered with. Responses are bare status
codes; no SCIM Error body is written.
"""


class SCIMDirectoryError(Exception):
    """Base class for errors that end a SCIM request."""

    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class AuthenticationError(SCIMDirectoryError):
    """Missing, malformed or unknown bearer token."""

    status_code = 401


class ValidationFailure(SCIMDirectoryError):
    """Request body is not valid JSON or does not fit the expected shape."""

    status_code = 400


class NotFound(SCIMDirectoryError):
    """Resource is absent for the calling tenant (or belongs to another one)."""

    status_code = 404


class StoreFailure(SCIMDirectoryError):
    """Parent-record persistence failed."""

    status_code = 500


class InternalError(SCIMDirectoryError):
    """Store fault while resolving the caller's token."""

    status_code = 500
