import asyncio
import sys

from socketbridge.common import FatalError
from socketbridge.config import BridgeArgs
from socketbridge.listener import Listener, run_listener
from socketbridge.logging import get_logger, set_log_level
from socketbridge.transport import TcpAddress, UnixAddress

LOGGER = get_logger(__name__)


class Args(BridgeArgs):
    """Creates a TCP server and forwards every connection to a UNIX socket."""

    def process_args(self):
        super().process_args()
        try:
            TcpAddress.parse(self.listen)
        except ValueError as e:
            self.error(str(e))


async def main(args: Args):
    listener = Listener(
        TcpAddress.parse(args.listen),
        UnixAddress(args.peer),
        args.to_config(),
    )
    await run_listener(listener)


def run():
    args = Args(underscores_to_dashes=True).parse_args()
    set_log_level(args.log_level)

    try:
        asyncio.run(main(args))
    except FatalError as e:
        LOGGER.error(e.message)
        sys.exit(1)


if __name__ == "__main__":
    run()
