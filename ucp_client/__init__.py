"""Async client for the UCP memory/context service."""

from .version import __version__
from .config import Settings
from .exceptions import (
    UcpError,
    TransportError,
    DecodeError,
    ServerError,
    NotFoundError,
    AuthenticationError,
    RateLimitError,
    ConfigurationError,
)
from .types import (
    MemoryRequest,
    MemoryResponse,
    VectorQuery,
    SearchResponse,
    ProjectsResponse,
    ProjectStats,
    HealthStatus,
    ErrorResponse,
)
from .classifier import classify_response, classify_transport_error
from .stream import LineBuffer, StreamItem, decode_stream
from .retry import retry_policy
from .logging import configure_logging
from .client import UcpClient

__all__ = [
    "__version__",
    "Settings",
    "UcpError",
    "TransportError",
    "DecodeError",
    "ServerError",
    "NotFoundError",
    "AuthenticationError",
    "RateLimitError",
    "ConfigurationError",
    "MemoryRequest",
    "MemoryResponse",
    "VectorQuery",
    "SearchResponse",
    "ProjectsResponse",
    "ProjectStats",
    "HealthStatus",
    "ErrorResponse",
    "classify_response",
    "classify_transport_error",
    "LineBuffer",
    "StreamItem",
    "decode_stream",
    "retry_policy",
    "configure_logging",
    "UcpClient",
]
