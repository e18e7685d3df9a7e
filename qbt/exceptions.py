# qbt/exceptions.py


class QbtError(Exception):
    """Base class for every error raised by this package."""


class ParameterError(QbtError, ValueError):
    """A call argument cannot be sent to qBittorrent."""


class AuthenticationError(QbtError):
    """Login was refused or never reached the WebUI."""

    def __init__(self, username, reason=None):
        self.username = username
        message = f"Login failed with username: {username}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class RequestFailedError(QbtError):
    """qBittorrent answered with a status other than 200."""

    def __init__(self, operation: str, status_code: int):
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation} failed with HTTP {status_code}")


class ResponseParseError(QbtError, ValueError):
    """A 200 response was expected to carry JSON but did not."""

    def __init__(self, operation: str, body: str):
        self.operation = operation
        self.body = body
        preview = body[:80] + ("..." if len(body) > 80 else "")
        super().__init__(f"Invalid JSON response from {operation}: {preview!r}")
