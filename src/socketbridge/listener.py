import asyncio
import signal
from uuid import UUID, uuid4

from .bridge import bridge
from .common import FatalError
from .config import BridgeConfig
from .endpoint import Endpoint
from .logging import get_logger
from .transport import Address


LOGGER = get_logger(__name__)


class Listener:
    """Accepts connections on ``local`` and bridges each one to a new
    connection to ``peer``.

    Every accepted connection is served by its own task, so the accept loop
    never waits on a running bridge.
    """

    def __init__(self, local: Address, peer: Address, config: BridgeConfig | None = None):
        self.local = local
        self.peer = peer
        self.config = config if config is not None else BridgeConfig()

        self._server: asyncio.Server | None = None
        self._stopping = False
        self._active = 0
        self._connections: dict[UUID, tuple[Endpoint, Endpoint]] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_connections(self) -> int:
        return self._active

    @property
    def sockname(self):
        """Address the server is bound to, useful when listening on port 0."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()

    async def start(self):
        await self.peer.validate()
        await self.local.validate()
        await self.local.prepare_listen(self.config.probe_stale)

        try:
            self._server = await self.local.start_server(self._on_connection)
        except OSError as e:
            raise FatalError(f"Failed to bind to {self.local.kind} address {self.local}: {e}") from e

        LOGGER.info(
            "%s server listening on %s, forwarding to %s %s (buffer size: %d, strategy: %s).",
            self.local.kind.upper(),
            self.local,
            self.peer.kind.upper(),
            self.peer,
            self.config.buffer_size,
            self.config.strategy,
        )

    async def stop(self):
        """Stops accepting, aborts in-flight bridges and waits for them to end."""
        if self._server is None:
            return
        self._stopping = True

        LOGGER.info("Shutting down, %d connections active.", self._active)
        self._server.close()

        for client, peer in list(self._connections.values()):
            client.abort()
            peer.abort()

        if self._tasks:
            await asyncio.wait(list(self._tasks))
        await self._server.wait_closed()
        self._server = None
        self.local.cleanup()

    async def _on_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        client = Endpoint(reader, writer, kind=self.local.kind)

        if self._stopping:
            await client.close()
            return

        if self._active >= self.config.max_connections:
            LOGGER.warning(
                "Connection limit of %d reached, rejecting %s client %s.",
                self.config.max_connections,
                self.local.kind,
                client.name,
            )
            await client.close()
            return

        task = asyncio.current_task()
        self._tasks.add(task)
        self._active += 1
        try:
            await self._serve_connection(client)
        except Exception:
            LOGGER.exception("An error occurred while bridging %s.", client.name)
            await client.close()
        finally:
            self._active -= 1
            self._tasks.discard(task)

    async def _serve_connection(self, client: Endpoint):
        uuid = uuid4()
        LOGGER.info("[%s] %s client connected from %s.", uuid, self.local.kind, client.name)

        try:
            peer = await self.peer.connect()
        except OSError as e:
            LOGGER.error("[%s] Failed to connect to %s peer %s: %s", uuid, self.peer.kind, self.peer, e)
            await client.close()
            return

        LOGGER.debug("[%s] Connected to %s peer %s.", uuid, self.peer.kind, peer.name)

        if self._stopping:
            await client.close()
            await peer.close()
            return

        self._connections[uuid] = (client, peer)
        try:
            await bridge(
                client,
                peer,
                self.config.buffer_size,
                strategy=self.config.strategy,
                name=str(uuid),
            )
        finally:
            del self._connections[uuid]

        LOGGER.info("[%s] Connection closed.", uuid)


async def run_listener(listener: Listener):
    """Serves until SIGINT or SIGTERM, then shuts ``listener`` down."""

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    try:
        await listener.start()
        await stop.wait()
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)
        await listener.stop()
