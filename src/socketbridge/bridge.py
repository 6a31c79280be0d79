import asyncio

from .common import Burst, Constants, EndOfStream, Outcome, TransportError
from .copier import copy, copy_burst
from .endpoint import Endpoint
from .logging import get_logger


LOGGER = get_logger(__name__)


def log_outcome(name: str, direction: str, outcome: Outcome):
    if isinstance(outcome, EndOfStream):
        if outcome.no_data:
            LOGGER.info("[%s] %s closed without sending data.", name, direction)
        else:
            LOGGER.info(
                "[%s] %s closed after %d bytes.", name, direction, outcome.bytes_copied
            )
    else:
        LOGGER.warning(
            "[%s] %s failed to %s after %d bytes: %s: %s",
            name,
            direction,
            outcome.operation,
            outcome.bytes_copied,
            outcome.kind,
            outcome.message,
        )


async def _relay(
    source: Endpoint, destination: Endpoint, buffer_size: int, *, name: str, direction: str
) -> Outcome:
    outcome = await copy(source, destination, buffer_size)
    log_outcome(name, direction, outcome)

    # Pass the end of this direction on, the opposite direction keeps flowing.
    try:
        destination.shutdown_write()
    except OSError as e:
        LOGGER.debug("[%s] Could not half-close %r: %s", name, destination, e)

    return outcome


async def duplex(
    client: Endpoint, peer: Endpoint, buffer_size: int, *, name: str
) -> tuple[Outcome, Outcome]:
    """Relays both directions concurrently until each has ended on its own."""

    upstream, downstream = await asyncio.gather(
        _relay(client, peer, buffer_size, name=name, direction="client -> peer"),
        _relay(peer, client, buffer_size, name=name, direction="peer -> client"),
    )
    return upstream, downstream


async def half_duplex(
    client: Endpoint, peer: Endpoint, buffer_size: int, *, name: str
) -> tuple[Outcome, Outcome]:
    """Relays strictly alternating turns: the client speaks, then the peer answers.

    Only suitable for protocols where each request is followed by exactly one
    response and neither side sends unprompted.
    """

    turns = [
        (client, peer, "client -> peer"),
        (peer, client, "peer -> client"),
    ]
    totals = [0, 0]
    index = 0

    while True:
        source, destination, direction = turns[index]
        result = await copy_burst(source, destination, buffer_size)

        if isinstance(result, Burst):
            totals[index] += result.bytes_copied
            index = 1 - index
            continue

        if isinstance(result, EndOfStream):
            result = EndOfStream(totals[index])
        else:
            result = TransportError(
                operation=result.operation,
                kind=result.kind,
                message=result.message,
                error=result.error,
                bytes_copied=totals[index] + result.bytes_copied,
            )
        log_outcome(name, direction, result)

        other = EndOfStream(totals[1 - index])
        if index == 0:
            return result, other
        return other, result


STRATEGIES = {
    Constants.DUPLEX: duplex,
    Constants.HALF_DUPLEX: half_duplex,
}


async def bridge(
    client: Endpoint,
    peer: Endpoint,
    buffer_size: int = Constants.DEFAULT_BUFFER_SIZE,
    *,
    strategy: str = Constants.DUPLEX,
    name: str = "bridge",
) -> tuple[Outcome, Outcome]:
    """Relays bytes between ``client`` and ``peer`` and closes both once done.

    Returns
    -------
    tuple[Outcome, Outcome]
        Terminal outcome of the client -> peer and the peer -> client direction.
    """

    try:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive.")
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown bridging strategy: {strategy}")

        return await STRATEGIES[strategy](client, peer, buffer_size, name=name)
    finally:
        await client.close()
        await peer.close()
