import asyncio
import socket

import pytest
import pytest_asyncio

from socketbridge.common import Constants
from socketbridge.endpoint import Endpoint
from socketbridge.transport import TcpAddress, UnixAddress


async def echo_callback(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
    while True:
        data = await reader.read(65536)
        if not data:
            break
        writer.write(data)
        await writer.drain()
    writer.close()


@pytest_asyncio.fixture
async def stream_pair():
    """Factory for an ``Endpoint`` connected to a raw reader/writer pair."""

    writers: list[asyncio.StreamWriter] = []

    async def factory(kind: str = Constants.UNIX):
        near, far = socket.socketpair()
        near_reader, near_writer = await asyncio.open_connection(sock=near)
        far_reader, far_writer = await asyncio.open_connection(sock=far)
        writers.extend([near_writer, far_writer])
        return Endpoint(near_reader, near_writer, kind=kind, name="pair"), (far_reader, far_writer)

    yield factory

    for writer in writers:
        if not writer.is_closing():
            writer.close()


@pytest_asyncio.fixture
async def tcp_echo_server():
    server = await asyncio.start_server(echo_callback, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    yield TcpAddress(host, port)
    server.close()


@pytest_asyncio.fixture
async def unix_echo_server(tmp_path):
    path = str(tmp_path / "echo.sock")
    server = await asyncio.start_unix_server(echo_callback, path)
    yield UnixAddress(path)
    server.close()


@pytest.fixture
def unix_path(tmp_path) -> str:
    return str(tmp_path / "bridge.sock")
