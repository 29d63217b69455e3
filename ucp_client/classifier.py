"""Map failed HTTP exchanges onto the :mod:`ucp_client.exceptions` taxonomy."""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from .exceptions import (
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TransportError,
    UcpError,
)
from .logging import logger
from .types import ErrorResponse


async def _read_text(response: httpx.Response) -> str:
    try:
        await response.aread()
        return response.text
    except (httpx.HTTPError, httpx.StreamError) as exc:
        logger.warning(
            "ucp_error_body_unreadable", status=response.status_code, error=str(exc)
        )
        return f"HTTP {response.status_code} error"


async def classify_response(response: httpx.Response) -> UcpError:
    """Return the error for a completed non-2xx ``response``.

    401 and 429 are decided on status alone. Any other status consumes the
    body, so this must be its only reader.
    """
    status = response.status_code
    if status == 401:
        error: UcpError = AuthenticationError()
    elif status == 429:
        error = RateLimitError()
    else:
        text = await _read_text(response)
        error_cls = NotFoundError if status == 404 else ServerError
        try:
            envelope = ErrorResponse.model_validate_json(text)
        except ValidationError:
            error = error_cls(text, status_code=status)
        else:
            error = error_cls(
                envelope.message,
                status_code=status,
                code=envelope.code,
                details=envelope.details,
            )
    try:
        url = str(response.request.url)
    except RuntimeError:
        url = None
    logger.warning(
        "ucp_response_error", status=status, url=url, error=type(error).__name__
    )
    return error


def classify_transport_error(exc: Exception) -> TransportError:
    """Wrap a transport failure that produced no response."""
    return TransportError(str(exc) or type(exc).__name__)


__all__ = ["classify_response", "classify_transport_error"]
