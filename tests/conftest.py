from typing import AsyncIterator, Callable, Iterable

import httpx
import pytest

from ucp_client import Settings, UcpClient

BASE_URL = "http://ucp.test"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "UCP_BASE_URL",
        "UCP_API_KEY",
        "UCP_TIMEOUT",
        "UCP_RETRY_ENABLED",
        "UCP_MAX_RETRIES",
        "UCP_RETRY_BACKOFF",
        "UCP_USER_AGENT",
        "UCP_LOG_LEVEL",
        "UCP_CONFIG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered in the given chunks, optionally failing after them."""

    def __init__(self, chunks: Iterable[bytes], error: Exception | None = None) -> None:
        self.chunks = list(chunks)
        self.error = error
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = {"base_url": BASE_URL, "retry_backoff": 0}
    values.update(overrides)
    return Settings(**values)


def make_client(handler: Callable, **overrides) -> UcpClient:
    transport = httpx.MockTransport(handler)
    http = httpx.AsyncClient(transport=transport)
    return UcpClient(make_settings(**overrides), client=http)
