import asyncio

import tap

from socketbridge.copier import copy
from socketbridge.endpoint import Endpoint
from socketbridge.logging import get_logger
from socketbridge.transport import TcpAddress, UnixAddress

LOGGER = get_logger("echo")


class Args(tap.Tap):
    """Echo peer for trying out a bridge by hand."""

    address: str = "localhost:1123"
    """host:port to listen on, or a UNIX socket path with --unix."""

    unix: bool = False

    buffer_size: int = 4096


def echo_callback(args: Args):
    kind = "unix" if args.unix else "tcp"

    async def on_connection(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        endpoint = Endpoint(reader, writer, kind=kind)
        LOGGER.info("Echoing for %s.", endpoint.name)
        outcome = await copy(endpoint, endpoint, args.buffer_size)
        LOGGER.info("%s done: %s", endpoint.name, outcome)
        await endpoint.close()

    return on_connection


async def main(args: Args):
    if args.unix:
        address = UnixAddress(args.address)
        await address.prepare_listen()
    else:
        address = TcpAddress.parse(args.address)

    server = await address.start_server(echo_callback(args))
    LOGGER.info("Echo server listening on %s.", address)
    async with server:
        await server.serve_forever()


if __name__ == "__main__":
    args = Args(underscores_to_dashes=True).parse_args()
    asyncio.run(main(args))
