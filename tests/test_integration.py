"""
Integration tests against a local HTTP server.

These tests use the real AsyncioNetworkBackend and a small h11
based server bound to 127.0.0.1, so no external network is needed.
"""

import asyncio
import gzip
from contextlib import asynccontextmanager

import h11
import pytest

from reqstream import Request, RequestStatus, RequestTimeout


async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    connection = h11.Connection(h11.SERVER)
    request = None
    body = b""

    while True:
        event = connection.next_event()
        if event is h11.NEED_DATA:
            connection.receive_data(await reader.read(65536))
            continue
        if isinstance(event, h11.Request):
            request = event
        elif isinstance(event, h11.Data):
            body += event.data
        elif isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
            break

    target = request.target.decode()
    headers = [("connection", "close")]
    status = 200

    if target == "/hang":
        # Never answer; wait for the client to give up
        await reader.read()
        writer.close()
        return
    elif target == "/echo":
        content_type = dict(request.headers).get(b"content-type", b"application/octet-stream")
        headers.append(("content-type", content_type.decode()))
        payload = body
    elif target == "/gzip":
        headers.append(("content-encoding", "gzip"))
        payload = gzip.compress(b"compressed " * 500)
    elif target == "/redirect":
        status = 302
        headers.append(("location", "/echo"))
        payload = b""
    else:
        status = 404
        payload = b"not found"

    headers.append(("content-length", str(len(payload))))
    writer.write(connection.send(h11.Response(status_code=status, headers=headers)))
    writer.write(connection.send(h11.Data(data=payload)))
    writer.write(connection.send(h11.EndOfMessage()))
    await writer.drain()
    writer.close()


@asynccontextmanager
async def serve():
    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        server.close()


class TestLocalServer:
    @pytest.mark.asyncio
    async def test_json_round_trip(self):
        document = {"name": "reqstream", "values": [1, 2.5, None, True], "nested": {"k": "v"}}

        async with serve() as base_url:
            message = await Request(f"{base_url}/echo", timeout=5000).set_data(document).send()

        assert message.status() == 200
        assert message.content_type.mime_type == "application/json"
        assert message.json() == document

    @pytest.mark.asyncio
    async def test_gzip_response(self):
        async with serve() as base_url:
            message = await Request(f"{base_url}/gzip", accept_encoding=True, chunk_size=256).send()

        assert message.text() == "compressed " * 500

    @pytest.mark.asyncio
    async def test_redirect(self):
        async with serve() as base_url:
            request = Request(f"{base_url}/redirect", follow_redirects=True).set_data("hello")
            message = await request.send()

        assert request.url.endswith("/echo")
        assert message.text() == "hello"

    @pytest.mark.asyncio
    async def test_not_found(self):
        async with serve() as base_url:
            with pytest.raises(RequestStatus) as exc_info:
                await Request(f"{base_url}/missing").send()

        assert exc_info.value.code == 404

    @pytest.mark.asyncio
    async def test_timeout(self):
        loop = asyncio.get_running_loop()

        async with serve() as base_url:
            start = loop.time()
            with pytest.raises(RequestTimeout):
                await Request(f"{base_url}/hang", timeout=50).send()
            elapsed = loop.time() - start

        assert 0.04 <= elapsed < 1.0

    @pytest.mark.asyncio
    async def test_streaming_callback(self):
        received = []

        async with serve() as base_url:
            message = await Request(f"{base_url}/echo", chunk_size=1024).set_data(b"x" * 10000).send(
                lambda message, chunk: received.append(len(chunk))
            )

        assert sum(received) == 10000
        assert max(received) <= 1024
        assert message.content == b""
        assert message.header("content-type") == "application/octet-stream"
