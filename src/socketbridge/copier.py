from .common import Burst, EndOfStream, Outcome, TransportError
from .endpoint import Endpoint


async def copy(source: Endpoint, destination: Endpoint, buffer_size: int) -> Outcome:
    """Relays bytes from ``source`` to ``destination`` until the source ends.

    Short reads are not treated as the end of the data, only an empty read
    is. Every chunk is written in full and flushed before the next read.

    Parameters
    ----------
    source : Endpoint
        Stream to read from.
    destination : Endpoint
        Stream to write to.
    buffer_size : int
        Maximum number of bytes read at a time.

    Returns
    -------
    Outcome
        ``EndOfStream`` once the source is exhausted, ``TransportError`` on the
        first failed read or write. Both carry the number of bytes relayed.
    """

    if buffer_size <= 0:
        raise ValueError("buffer_size must be positive.")

    bytes_copied = 0

    while True:
        try:
            data = await source.read(buffer_size)
        except OSError as e:
            return TransportError.from_exception("read", e, bytes_copied)

        if not data:
            return EndOfStream(bytes_copied)

        try:
            await destination.write(data)
        except OSError as e:
            return TransportError.from_exception("write", e, bytes_copied)

        bytes_copied += len(data)


async def copy_burst(
    source: Endpoint, destination: Endpoint, buffer_size: int
) -> Burst | Outcome:
    """Relays one turn of a request/response exchange.

    The turn ends once a read leaves nothing buffered on the source, which
    is taken as the point where the sender stopped to wait for an answer.
    A read shorter than ``buffer_size`` always ends the turn.
    """

    if buffer_size <= 0:
        raise ValueError("buffer_size must be positive.")

    bytes_copied = 0

    while True:
        try:
            data = await source.read(buffer_size)
        except OSError as e:
            return TransportError.from_exception("read", e, bytes_copied)

        if not data:
            if bytes_copied == 0:
                return EndOfStream()
            return Burst(bytes_copied)

        try:
            await destination.write(data)
        except OSError as e:
            return TransportError.from_exception("write", e, bytes_copied)

        bytes_copied += len(data)

        if len(data) < buffer_size or not source.pending():
            return Burst(bytes_copied)
