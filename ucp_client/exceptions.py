"""Exception taxonomy for UCP client operations.

Every failure surfaced by :class:`ucp_client.client.UcpClient` is an instance
of :class:`UcpError`. The subclasses are mutually exclusive kinds; callers
decide on retry or backoff themselves.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class UcpError(Exception):
    """Base exception for all UCP client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class TransportError(UcpError):
    """No response was obtained (connection refused, timeout, DNS, TLS)."""

    def __str__(self) -> str:
        return f"HTTP request failed: {self.message}"


class DecodeError(UcpError):
    """Malformed text or JSON in a response body or stream line."""

    def __init__(self, message: str, line: Optional[str] = None) -> None:
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        return f"JSON error: {self.message}"


class ServerError(UcpError):
    """The server answered with a non-2xx status.

    ``message`` holds the server's message verbatim when the body was a
    structured error, otherwise the raw body text.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"UCP server error: {self.message}"


class NotFoundError(ServerError):
    """Raised for 404 responses; still a :class:`ServerError`."""


class AuthenticationError(UcpError):
    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class RateLimitError(UcpError):
    def __init__(self, message: str = "Rate limit exceeded") -> None:
        super().__init__(message)


class ConfigurationError(UcpError):
    """Invalid client configuration detected at construction time."""

    def __str__(self) -> str:
        return f"Invalid configuration: {self.message}"


__all__ = [
    "UcpError",
    "TransportError",
    "DecodeError",
    "ServerError",
    "NotFoundError",
    "AuthenticationError",
    "RateLimitError",
    "ConfigurationError",
]
