import asyncio
import os
import time

import tap
from tqdm import tqdm

from socketbridge.endpoint import Endpoint
from socketbridge.transport import TcpAddress, UnixAddress


class Args(tap.Tap):
    """Pushes a fixed amount of data through a bridge in front of echo.py and
    checks that all of it comes back."""

    address: str = "localhost:9987"
    """Bridge to connect to: host:port, or a UNIX socket path with --unix."""

    unix: bool = False

    total_mib: int = 256
    """Amount of data to send, in MiB."""

    chunk_size: int = 64 * 1024


async def send(endpoint: Endpoint, total: int, chunk_size: int):
    chunk = os.urandom(chunk_size)
    remaining = total
    while remaining > 0:
        await endpoint.write(chunk[:remaining])
        remaining -= len(chunk)
    endpoint.shutdown_write()


async def receive(endpoint: Endpoint, total: int, chunk_size: int) -> int:
    received = 0
    with tqdm(total=total, desc="Bytes echoed", unit="B", unit_scale=True) as pbar:
        while True:
            data = await endpoint.read(chunk_size)
            if not data:
                break
            received += len(data)
            pbar.update(len(data))
    return received


async def main(args: Args):
    if args.unix:
        address = UnixAddress(args.address)
    else:
        address = TcpAddress.parse(args.address)

    endpoint = await address.connect()
    total = args.total_mib * 1024 ** 2

    started = time.monotonic()
    _, received = await asyncio.gather(
        send(endpoint, total, args.chunk_size),
        receive(endpoint, total, args.chunk_size),
    )
    elapsed = time.monotonic() - started
    await endpoint.close()

    print(f"{received} of {total} bytes in {elapsed:.2f}s ({received / elapsed / 1024 ** 2:.1f} MiB/s)")
    if received != total:
        raise SystemExit(1)


if __name__ == "__main__":
    args = Args(underscores_to_dashes=True).parse_args()
    asyncio.run(main(args))
