"""Wire types exchanged with the UCP server."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MemoryRequest(BaseModel):
    """Payload for storing a memory."""

    project: str
    session: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)


class MemoryResponse(BaseModel):
    """A stored memory record as returned by the server.

    Only ``id`` is mandatory so that sparse records from the streaming
    endpoint still decode. ``metadata`` is passed through untouched.
    """

    id: str
    content: str = ""
    score: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    timestamp: int = 0


class VectorQuery(BaseModel):
    """Vector similarity search query."""

    project: str
    session: Optional[str] = None
    query: str
    limit: int = Field(10, ge=0)
    threshold: float = 0.7
    tags: Optional[List[str]] = None


class SearchResponse(BaseModel):
    results: List[MemoryResponse]
    total: int = 0
    # milliseconds
    took: int = 0


class ProjectsResponse(BaseModel):
    projects: List[str]


class ProjectStats(BaseModel):
    project: str
    total_memories: int
    total_sessions: int
    total_size_bytes: int
    created_at: int
    last_updated: int


class HealthStatus(BaseModel):
    status: str
    version: str
    uptime: int
    memory_usage: Dict[str, int] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Structured error envelope returned by the server on failure."""

    message: str
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


__all__ = [
    "MemoryRequest",
    "MemoryResponse",
    "VectorQuery",
    "SearchResponse",
    "ProjectsResponse",
    "ProjectStats",
    "HealthStatus",
    "ErrorResponse",
]
