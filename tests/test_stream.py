import json

import httpx
import pytest

from ucp_client import DecodeError, LineBuffer, MemoryResponse, TransportError, decode_stream


async def chunks_of(*parts: bytes):
    for part in parts:
        yield part


async def collect(chunks):
    return [item async for item in decode_stream(chunks)]


def ndjson(ids):
    return b"".join(json.dumps({"id": i, "content": f"c-{i}"}).encode() + b"\n" for i in ids)


@pytest.mark.asyncio
async def test_object_split_across_chunks():
    items = await collect(chunks_of(b'{"id":"a"}\n{"id":"b', b'"}\n'))
    assert [i.id for i in items] == ["a", "b"]
    assert all(isinstance(i, MemoryResponse) for i in items)


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 1000])
async def test_any_chunking_yields_all_records_in_order(size):
    body = ndjson(["m1", "m2", "m3", "m4", "m5"])
    parts = [body[i : i + size] for i in range(0, len(body), size)]
    items = await collect(chunks_of(*parts))
    assert [i.id for i in items] == ["m1", "m2", "m3", "m4", "m5"]
    assert items[2].content == "c-m3"


@pytest.mark.asyncio
async def test_invalid_line_yields_one_error_in_place():
    body = b'{"id":"a"}\nnot json\n{"id":"c"}\n'
    items = await collect(chunks_of(body[:15], body[15:]))
    assert len(items) == 3
    assert items[0].id == "a"
    assert isinstance(items[1], DecodeError)
    assert items[1].line == "not json"
    assert items[2].id == "c"


@pytest.mark.asyncio
async def test_record_missing_id_is_a_decode_error():
    items = await collect(chunks_of(b'{"content":"x"}\n{"id":"ok"}\n'))
    assert isinstance(items[0], DecodeError)
    assert items[1].id == "ok"


@pytest.mark.asyncio
async def test_invalid_utf8_line():
    items = await collect(chunks_of(b'\xff\xfe{"id":"x"}\n{"id":"y"}\n'))
    assert isinstance(items[0], DecodeError)
    assert items[0].message == "Invalid UTF-8 in response"
    assert items[1].id == "y"


@pytest.mark.asyncio
async def test_trailing_partial_line_is_dropped():
    items = await collect(chunks_of(b'{"id":"a"}\n{"id":', b'"b"}'))
    assert [i.id for i in items] == ["a"]


@pytest.mark.asyncio
async def test_blank_lines_emit_nothing():
    items = await collect(chunks_of(b"\n   \n", b'{"id":"a"}\r\n\t\n\n'))
    assert [i.id for i in items] == ["a"]


@pytest.mark.asyncio
async def test_transport_error_ends_stream():
    async def failing():
        yield b'{"id":"a"}\n{"id":"b'
        raise httpx.ReadError("connection reset")

    items = await collect(failing())
    assert len(items) == 2
    assert items[0].id == "a"
    assert isinstance(items[1], TransportError)
    assert "connection reset" in str(items[1])


@pytest.mark.asyncio
async def test_empty_stream():
    assert await collect(chunks_of()) == []


def test_line_buffer_holds_only_the_unterminated_tail():
    buf = LineBuffer()
    items = buf.feed(b'{"id":"a"}\n{"id":"b"}\n{"id"')
    assert [i.id for i in items] == ["a", "b"]
    assert buf.pending == len(b'{"id"')
    assert buf.feed(b':"c"}') == []
    items = buf.feed(b"\n")
    assert items[0].id == "c"
    assert buf.pending == 0


def test_line_buffer_preserves_metadata_untouched():
    buf = LineBuffer()
    record = {"id": "m", "metadata": {"nested": {"k": [1, None, True]}}, "tags": ["b", "a"]}
    (item,) = buf.feed(json.dumps(record).encode() + b"\n")
    assert item.metadata == record["metadata"]
    assert item.tags == ["b", "a"]
    assert item.score is None


@pytest.mark.asyncio
@pytest.mark.parametrize("line", [b"[1,2]", b'"str"', b"42", b"null"])
async def test_json_of_wrong_shape_is_a_decode_error_in_place(line):
    items = await collect(chunks_of(b'{"id":"a"}\n', line + b"\n", b'{"id":"b"}\n'))
    assert items[0].id == "a"
    assert isinstance(items[1], DecodeError)
    assert items[1].line == line.decode()
    assert items[2].id == "b"


@pytest.mark.asyncio
async def test_whitespace_line_split_across_chunks_emits_nothing():
    items = await collect(chunks_of(b'{"id":"a"}\n', b" ", b" \n", b"\t", b'\n{"id":"b"}\n'))
    assert [i.id for i in items] == ["a", "b"]


def test_line_buffer_many_lines_in_one_chunk():
    buf = LineBuffer()
    items = buf.feed(ndjson([f"m{i}" for i in range(5000)]))
    assert len(items) == 5000
    assert items[-1].id == "m4999"
    assert buf.pending == 0


def test_line_buffer_long_line_in_tiny_chunks():
    record = json.dumps({"id": "big", "content": "x" * 20000}).encode()
    buf = LineBuffer()
    for i in range(0, len(record), 3):
        assert buf.feed(record[i : i + 3]) == []
    assert buf.pending == len(record)
    (item,) = buf.feed(b"\n")
    assert item.id == "big"
    assert len(item.content) == 20000
