import asyncio

from .logging import get_logger


LOGGER = get_logger(__name__)


class Endpoint:
    """One connected end of a byte stream, TCP or UNIX domain.

    Wraps an ``asyncio`` reader/writer pair behind the same four operations
    regardless of transport. Errors raised by the underlying transport are
    passed through as they are.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        kind: str,
        name: str | None = None,
    ):
        self._reader = reader
        self._writer = writer
        self.kind = kind
        self.name = name if name is not None else _describe_peer(writer)
        self._closed = False

    def __repr__(self) -> str:
        return f"Endpoint({self.kind}, {self.name!r})"

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self, n: int) -> bytes:
        """Reads up to ``n`` bytes. Returns ``b""`` at end-of-stream."""
        return await self._reader.read(n)

    def pending(self) -> int:
        """Number of bytes already received and waiting to be read."""
        # StreamReader exposes no public accessor for its buffer.
        return len(self._reader._buffer)

    async def write(self, data: bytes):
        """Writes all of ``data`` and waits until it has been flushed."""
        self._writer.write(data)
        await self._writer.drain()

    def shutdown_write(self) -> bool:
        """Half-closes the stream so the remote side reads end-of-stream.

        Returns
        -------
        bool
            Whether end-of-stream was signalled.
        """

        if self._closed or self._writer.is_closing() or not self._writer.can_write_eof():
            return False
        self._writer.write_eof()
        return True

    async def close(self):
        if self._closed:
            return
        self._closed = True

        if not self._writer.is_closing():
            self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            LOGGER.debug("Error while closing %r: %s", self, e)

    def abort(self):
        """Drops the connection without flushing, waking any pending read or write."""
        transport = self._writer.transport
        if not transport.is_closing():
            transport.abort()


def _describe_peer(writer: asyncio.StreamWriter) -> str:
    peer = writer.get_extra_info("peername")
    if isinstance(peer, tuple):
        return f"{peer[0]}:{peer[1]}"
    if peer:
        return str(peer)
    # Accepted UNIX connections have an unnamed peer.
    sockname = writer.get_extra_info("sockname")
    return str(sockname) if sockname else "unknown"
