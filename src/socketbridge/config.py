import dataclasses
from typing import Literal

import tap

from .common import Constants


@dataclasses.dataclass(slots=True, frozen=True)
class BridgeConfig:
    buffer_size: int = Constants.DEFAULT_BUFFER_SIZE
    max_connections: int = Constants.DEFAULT_MAX_CONNECTIONS
    strategy: str = Constants.DUPLEX
    probe_stale: bool = False

    def __post_init__(self):
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be a positive integer.")
        if self.max_connections <= 0:
            raise ValueError("max_connections must be a positive integer.")
        if self.strategy not in (Constants.DUPLEX, Constants.HALF_DUPLEX):
            raise ValueError(f"Unknown bridging strategy: {self.strategy}")


class BridgeArgs(tap.Tap):

    listen: str
    """Address to accept connections on."""

    peer: str
    """Address to open a connection to for every accepted connection."""

    buffer_size: int = Constants.DEFAULT_BUFFER_SIZE
    """Maximum number of bytes read at a time in each direction."""

    max_connections: int = Constants.DEFAULT_MAX_CONNECTIONS
    """Connections beyond this many concurrently bridged ones are rejected."""

    strategy: Literal["duplex", "half-duplex"] = "duplex"
    """Relay both directions concurrently, or in strictly alternating turns."""

    probe_stale: bool = False
    """Only unlink an existing UNIX socket file if nothing is listening on it."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def configure(self):
        self.add_argument("listen")
        self.add_argument("peer")
        self.add_argument("-b", "--buffer_size")

    def process_args(self):
        if self.buffer_size <= 0:
            self.error("--buffer-size must be a positive integer.")
        if self.max_connections <= 0:
            self.error("--max-connections must be a positive integer.")

    def to_config(self) -> BridgeConfig:
        return BridgeConfig(
            buffer_size=self.buffer_size,
            max_connections=self.max_connections,
            strategy=self.strategy,
            probe_stale=self.probe_stale,
        )
