import asyncio
import dataclasses
import os
import socket
import stat
from typing import Awaitable, Callable

from .common import Constants, FatalError
from .endpoint import Endpoint
from .logging import get_logger


LOGGER = get_logger(__name__)

ConnectionCallback = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


@dataclasses.dataclass(slots=True, frozen=True)
class TcpAddress:
    host: str
    port: int

    kind = Constants.TCP

    @classmethod
    def parse(cls, address: str) -> "TcpAddress":
        """Parses ``host:port``. IPv6 hosts are written in brackets, ``[::1]:80``."""

        host, sep, port = address.rpartition(":")
        if not sep or not host:
            raise ValueError(f"Invalid TCP address: {address}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        try:
            port_number = int(port)
        except ValueError:
            raise ValueError(f"Invalid TCP address: {address}") from None
        if not 0 <= port_number <= 65535:
            raise ValueError(f"Invalid TCP address: {address}")
        return cls(host, port_number)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    async def validate(self):
        loop = asyncio.get_running_loop()
        try:
            await loop.getaddrinfo(self.host, self.port, type=socket.SOCK_STREAM)
        except OSError as e:
            raise FatalError(f"Invalid TCP address {self}: {e}") from e

    async def prepare_listen(self, probe_stale: bool = False):
        pass

    async def start_server(self, callback: ConnectionCallback) -> asyncio.Server:
        return await asyncio.start_server(callback, self.host, self.port)

    async def connect(self) -> Endpoint:
        reader, writer = await asyncio.open_connection(self.host, self.port)
        return Endpoint(reader, writer, kind=self.kind, name=str(self))

    def cleanup(self):
        pass


@dataclasses.dataclass(slots=True, frozen=True)
class UnixAddress:
    path: str

    kind = Constants.UNIX

    def __str__(self) -> str:
        return self.path

    async def validate(self):
        if not self.path:
            raise FatalError("Invalid UNIX socket path: empty")

    async def prepare_listen(self, probe_stale: bool = False):
        """Removes a socket file left behind by a previous run.

        With ``probe_stale`` the existing path is connected to first, and a
        listener that still answers aborts startup instead of being unlinked.
        """

        if not os.path.lexists(self.path):
            return

        if probe_stale and await self._is_alive():
            raise FatalError(f"UNIX socket {self.path} is in use by a running listener.")

        LOGGER.info("Removing stale UNIX socket file %s.", self.path)
        try:
            os.remove(self.path)
        except OSError as e:
            raise FatalError(f"Failed to remove existing UNIX socket file {self.path}: {e}") from e

    async def _is_alive(self) -> bool:
        try:
            mode = os.stat(self.path).st_mode
        except OSError:
            return False
        if not stat.S_ISSOCK(mode):
            return False

        try:
            _, writer = await asyncio.open_unix_connection(self.path)
        except OSError:
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    async def start_server(self, callback: ConnectionCallback) -> asyncio.Server:
        return await asyncio.start_unix_server(callback, self.path)

    async def connect(self) -> Endpoint:
        reader, writer = await asyncio.open_unix_connection(self.path)
        return Endpoint(reader, writer, kind=self.kind, name=self.path)

    def cleanup(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass


Address = TcpAddress | UnixAddress
