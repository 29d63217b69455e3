"""Async HTTP client for the UCP memory service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .classifier import classify_response, classify_transport_error
from .config import Settings
from .exceptions import DecodeError
from .logging import logger
from .retry import REPLAY_SAFE, RETRYABLE, retry_policy
from .stream import StreamItem, decode_stream
from .tracing import async_span
from .types import (
    HealthStatus,
    MemoryRequest,
    MemoryResponse,
    ProjectsResponse,
    ProjectStats,
    SearchResponse,
    VectorQuery,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

NDJSON = "application/x-ndjson"


class UcpClient:
    """Client for the UCP REST API.

    The client keeps no per-call state, so one instance can be shared by
    any number of concurrent tasks. Pass ``client`` to reuse an existing
    ``httpx.AsyncClient`` (it is then not closed by :meth:`close`); keyword
    overrides such as ``base_url=`` or ``api_key=`` take precedence over the
    environment.

    Each request is sent once unless ``retry_enabled`` is set. Even then a
    store is only replayed after a 429, never after a lost response.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        **overrides: Any,
    ) -> None:
        if settings is None:
            settings = Settings.load(**overrides)
        elif overrides:
            settings = Settings.load(**{**settings.model_dump(), **overrides})
        self.settings = settings
        self._timeout = httpx.Timeout(float(settings.timeout))
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

    @classmethod
    def from_env(cls) -> "UcpClient":
        """Construct a client from ``UCP_*`` environment variables."""
        return cls(Settings.load())

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "UcpClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def store_memory(self, request: MemoryRequest) -> MemoryResponse:
        """Store memory content and return the server's record."""
        response = await self._request(
            "POST",
            self._url("/api/v1/memory"),
            payload=request.model_dump(mode="json"),
            operation="store",
            project=request.project,
            replayable=False,
        )
        return self._decode(response, MemoryResponse)

    async def get_memory(self, project: str, memory_id: str) -> MemoryResponse:
        response = await self._request(
            "GET",
            self._url("/api/v1/memory", project, memory_id),
            operation="get",
            project=project,
        )
        return self._decode(response, MemoryResponse)

    async def search_memories(self, query: VectorQuery) -> List[MemoryResponse]:
        """Run a similarity search; results keep the server's relevance order."""
        response = await self._request(
            "POST",
            self._url("/api/v1/search"),
            payload=query.model_dump(mode="json"),
            operation="search",
            project=query.project,
        )
        return self._decode(response, SearchResponse).results

    @asynccontextmanager
    async def search_memories_stream(
        self, query: VectorQuery
    ) -> AsyncIterator[AsyncIterator[StreamItem]]:
        """Open a streaming search.

        Usage::

            async with client.search_memories_stream(query) as results:
                async for item in results:
                    if isinstance(item, UcpError):
                        ...

        A non-2xx status raises the classified error on entry. Items are
        :class:`MemoryResponse` records or per-line :class:`UcpError` values.
        Leaving the block on any path closes the connection.
        """
        request = self._build_request(
            "POST",
            self._url("/api/v1/search/stream"),
            payload=query.model_dump(mode="json"),
            accept=NDJSON,
        )
        async with async_span("ucp.search_stream", project=query.project):
            response = await self._send(request, stream=True)
            items = decode_stream(response.aiter_bytes())
            try:
                yield items
            finally:
                await items.aclose()
                await response.aclose()

    async def delete_memory(self, project: str, memory_id: str) -> None:
        await self._request(
            "DELETE",
            self._url("/api/v1/memory", project, memory_id),
            operation="delete",
            project=project,
        )

    async def list_projects(self) -> List[str]:
        response = await self._request(
            "GET", self._url("/api/v1/projects"), operation="list_projects"
        )
        return self._decode(response, ProjectsResponse).projects

    async def get_stats(self, project: str) -> ProjectStats:
        response = await self._request(
            "GET", self._url("/api/v1/stats", project), operation="stats", project=project
        )
        return self._decode(response, ProjectStats)

    async def health_check(self) -> HealthStatus:
        response = await self._request("GET", self._url("/api/v1/health"), operation="health")
        return self._decode(response, HealthStatus)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _url(self, path: str, *segments: str) -> str:
        tail = "".join("/" + quote(segment, safe="") for segment in segments)
        return f"{self.settings.base_url}{path}{tail}"

    def _headers(self, accept: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.settings.user_agent,
        }
        if accept:
            headers["Accept"] = accept
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def _build_request(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
        accept: Optional[str] = None,
    ) -> httpx.Request:
        return self._client.build_request(
            method,
            url,
            json=payload,
            headers=self._headers(accept),
            timeout=self._timeout,
        )

    async def _send_once(self, request: httpx.Request, stream: bool) -> httpx.Response:
        logger.debug("ucp_request", method=request.method, url=str(request.url))
        try:
            response = await self._client.send(request, stream=stream)
        except httpx.TransportError as exc:
            raise classify_transport_error(exc) from exc
        if response.is_success:
            return response
        try:
            raise await classify_response(response)
        finally:
            await response.aclose()

    async def _send(
        self, request: httpx.Request, stream: bool = False, replayable: bool = True
    ) -> httpx.Response:
        if not self.settings.retry_enabled:
            return await self._send_once(request, stream)
        retrying = retry_policy(
            self.settings.max_retries,
            self.settings.retry_backoff,
            retry_on=RETRYABLE if replayable else REPLAY_SAFE,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._send_once(request, stream)
        return response

    async def _request(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
        *,
        operation: str,
        project: Optional[str] = None,
        replayable: bool = True,
    ) -> httpx.Response:
        request = self._build_request(method, url, payload)
        async with async_span(f"ucp.{operation}", project=project):
            return await self._send(request, replayable=replayable)

    @staticmethod
    def _decode(response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(
                exc.errors()[0]["msg"], line=response.text[:200]
            ) from exc


__all__ = ["UcpClient", "NDJSON"]
