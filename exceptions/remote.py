"""
Sales backend (JSON-RPC) exceptions.
"""

from .base import PosCartException


class RemoteCallException(PosCartException):
    """
    Raised when a call to the sales backend fails.

    Attributes:
        method: Remote model/method that was called
        server_message: Error message reported by the backend, if any
        payload: Raw error payload returned by the backend
    """

    def __init__(self, method: str, reason: str, server_message: str | None = None, payload=None):
        super().__init__(
            f"Remote call {method} failed: {server_message or reason}",
            details={'method': method, 'reason': reason}
        )
        self.method = method
        self.reason = reason
        self.server_message = server_message
        self.payload = payload


class RemoteAuthenticationException(RemoteCallException):
    """Raised when the backend rejects the configured credentials."""

    def __init__(self, username: str):
        super().__init__(
            "common.login",
            "authentication failed",
            server_message=f"Login rejected for user {username}"
        )
        self.username = username
