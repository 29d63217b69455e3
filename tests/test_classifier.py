import httpx
import pytest

from conftest import ChunkStream
from ucp_client import (
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TransportError,
    classify_response,
    classify_transport_error,
)


@pytest.mark.asyncio
async def test_401_ignores_structured_body():
    resp = httpx.Response(401, json={"message": "token expired"})
    err = await classify_response(resp)
    assert isinstance(err, AuthenticationError)
    assert str(err) == "Authentication failed"


@pytest.mark.asyncio
async def test_429_ignores_body():
    err = await classify_response(httpx.Response(429, text="slow down"))
    assert isinstance(err, RateLimitError)


@pytest.mark.asyncio
async def test_structured_server_error():
    resp = httpx.Response(500, json={"message": "db unavailable"})
    err = await classify_response(resp)
    assert type(err) is ServerError
    assert err.message == "db unavailable"
    assert err.status_code == 500
    assert str(err) == "UCP server error: db unavailable"


@pytest.mark.asyncio
async def test_unstructured_body_kept_verbatim():
    err = await classify_response(httpx.Response(500, text="not json"))
    assert isinstance(err, ServerError)
    assert err.message == "not json"


@pytest.mark.asyncio
async def test_code_and_details_preserved():
    body = {"message": "bad query", "code": "E_QUERY", "details": {"field": "limit"}}
    err = await classify_response(httpx.Response(400, json=body))
    assert err.message == "bad query"
    assert err.code == "E_QUERY"
    assert err.details == {"field": "limit"}


@pytest.mark.asyncio
async def test_json_without_message_is_raw_text():
    err = await classify_response(httpx.Response(502, text='{"error": "upstream"}'))
    assert err.message == '{"error": "upstream"}'


@pytest.mark.asyncio
async def test_404_is_not_found_and_server_error():
    err = await classify_response(httpx.Response(404, json={"message": "no such memory"}))
    assert isinstance(err, NotFoundError)
    assert isinstance(err, ServerError)
    assert err.message == "no such memory"


@pytest.mark.asyncio
async def test_unreadable_body_falls_back_to_status():
    stream = ChunkStream([b"partial"], error=httpx.ReadError("reset"))
    err = await classify_response(httpx.Response(503, stream=stream))
    assert isinstance(err, ServerError)
    assert err.message == "HTTP 503 error"


def test_transport_failure_is_never_a_server_error():
    err = classify_transport_error(httpx.ConnectError("connection refused"))
    assert isinstance(err, TransportError)
    assert not isinstance(err, ServerError)
    assert "connection refused" in str(err)
