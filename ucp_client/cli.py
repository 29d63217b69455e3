"""Command line interface for :mod:`ucp_client`.

This module uses `Typer` to expose every client operation. Results are
printed as JSON; failures go to stderr with a non-zero exit code.
"""

import asyncio
import json
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

import typer

from .client import UcpClient
from .config import Settings
from .exceptions import ConfigurationError, UcpError
from .logging import configure_logging
from .types import MemoryRequest, VectorQuery

app = typer.Typer(add_completion=False, help="Talk to a UCP memory server")


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _open_client(obj: dict) -> UcpClient:
    return UcpClient(
        base_url=obj.get("base_url"),
        api_key=obj.get("api_key"),
        timeout=obj.get("timeout"),
    )


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def _run(ctx: typer.Context, call: Callable[[UcpClient], Awaitable[Any]]) -> Any:
    async def runner() -> Any:
        async with _open_client(ctx.obj) as client:
            return await call(client)

    try:
        return asyncio.run(runner())
    except UcpError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)


def _query(
    project: str,
    query: str,
    session: Optional[str],
    limit: int,
    threshold: float,
    tags: Optional[List[str]],
) -> VectorQuery:
    return VectorQuery(
        project=project,
        session=session,
        query=query,
        limit=limit,
        threshold=threshold,
        tags=tags or None,
    )


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(None, help="Server base URL (UCP_BASE_URL)"),
    api_key: Optional[str] = typer.Option(None, help="Bearer token (UCP_API_KEY)"),
    timeout: Optional[int] = typer.Option(None, help="Request timeout in seconds"),
    log_level: Optional[LogLevel] = typer.Option(
        None, case_sensitive=False, help="Log level for client events (UCP_LOG_LEVEL)"
    ),
) -> None:
    """UCP client command line interface."""
    ctx.obj = {"base_url": base_url, "api_key": api_key, "timeout": timeout}
    if log_level is None:
        try:
            level = Settings.load(**ctx.obj).log_level
        except ConfigurationError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)
    else:
        level = log_level.value
    configure_logging(level)


@app.command()
def health(ctx: typer.Context) -> None:
    """Show server health."""
    status = _run(ctx, lambda c: c.health_check())
    _echo_json(status.model_dump(mode="json"))


@app.command()
def projects(ctx: typer.Context) -> None:
    """List known projects."""
    _echo_json(_run(ctx, lambda c: c.list_projects()))


@app.command()
def stats(ctx: typer.Context, project: str = typer.Argument(..., help="Project name")) -> None:
    """Show aggregate counters for a project."""
    result = _run(ctx, lambda c: c.get_stats(project))
    _echo_json(result.model_dump(mode="json"))


@app.command()
def store(
    ctx: typer.Context,
    project: str = typer.Option(..., help="Project identifier"),
    session: str = typer.Option(..., help="Session identifier"),
    content: str = typer.Option(..., help="Memory content"),
    tag: Optional[List[str]] = typer.Option(None, help="Tag (repeatable)"),
    metadata: Optional[str] = typer.Option(None, help="Metadata as a JSON object"),
) -> None:
    """Store a memory."""
    meta = {}
    if metadata:
        try:
            meta = json.loads(metadata)
        except ValueError:
            typer.echo("metadata must be valid JSON", err=True)
            raise typer.Exit(code=2)
        if not isinstance(meta, dict):
            typer.echo("metadata must be a JSON object", err=True)
            raise typer.Exit(code=2)
    request = MemoryRequest(
        project=project, session=session, content=content, metadata=meta, tags=tag or []
    )
    result = _run(ctx, lambda c: c.store_memory(request))
    _echo_json(result.model_dump(mode="json"))


@app.command()
def get(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project name"),
    memory_id: str = typer.Argument(..., help="Memory identifier"),
) -> None:
    """Fetch one memory."""
    result = _run(ctx, lambda c: c.get_memory(project, memory_id))
    _echo_json(result.model_dump(mode="json"))


@app.command()
def delete(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project name"),
    memory_id: str = typer.Argument(..., help="Memory identifier"),
) -> None:
    """Delete one memory."""
    _run(ctx, lambda c: c.delete_memory(project, memory_id))
    typer.echo(f"deleted {memory_id}")


@app.command()
def search(
    ctx: typer.Context,
    project: str = typer.Option(..., help="Project identifier"),
    query: str = typer.Option(..., help="Query text"),
    session: Optional[str] = typer.Option(None, help="Restrict to one session"),
    limit: int = typer.Option(10, help="Number of results"),
    threshold: float = typer.Option(0.7, help="Minimum similarity"),
    tag: Optional[List[str]] = typer.Option(None, help="Tag filter (repeatable)"),
) -> None:
    """Similarity search returning all results at once."""
    q = _query(project, query, session, limit, threshold, tag)
    results = _run(ctx, lambda c: c.search_memories(q))
    _echo_json([r.model_dump(mode="json") for r in results])


@app.command()
def stream(
    ctx: typer.Context,
    project: str = typer.Option(..., help="Project identifier"),
    query: str = typer.Option(..., help="Query text"),
    session: Optional[str] = typer.Option(None, help="Restrict to one session"),
    limit: int = typer.Option(10, help="Number of results"),
    threshold: float = typer.Option(0.7, help="Minimum similarity"),
    tag: Optional[List[str]] = typer.Option(None, help="Tag filter (repeatable)"),
) -> None:
    """Streaming search; prints one JSON record per line as results arrive."""
    q = _query(project, query, session, limit, threshold, tag)

    async def consume(client: UcpClient) -> int:
        failures = 0
        async with client.search_memories_stream(q) as items:
            async for item in items:
                if isinstance(item, UcpError):
                    failures += 1
                    typer.echo(str(item), err=True)
                else:
                    typer.echo(item.model_dump_json())
        return failures

    if _run(ctx, consume):
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
