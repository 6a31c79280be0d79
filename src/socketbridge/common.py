import dataclasses


class GenericException(Exception):
    def __init__(self, msg: str):
        super().__init__(msg)
        self._msg = msg

    @property
    def message(self) -> str:
        return self._msg


class FatalError(GenericException):
    """Raised when the bridge cannot start serving. The process exits non-zero."""


class Constants:

    DEFAULT_BUFFER_SIZE = 4096
    DEFAULT_MAX_CONNECTIONS = 1024

    DUPLEX = "duplex"
    HALF_DUPLEX = "half-duplex"

    TCP = "tcp"
    UNIX = "unix"


@dataclasses.dataclass(slots=True, frozen=True)
class EndOfStream:
    """The source reported end-of-stream. Graceful termination."""

    bytes_copied: int = 0

    @property
    def no_data(self) -> bool:
        return self.bytes_copied == 0


@dataclasses.dataclass(slots=True, frozen=True)
class TransportError:
    """A read or write failed. The direction stops relaying."""

    operation: str
    kind: str
    message: str
    error: OSError | None = None
    bytes_copied: int = 0

    @classmethod
    def from_exception(
        cls, operation: str, error: OSError, bytes_copied: int = 0
    ) -> "TransportError":
        return cls(
            operation=operation,
            kind=type(error).__name__,
            message=str(error),
            error=error,
            bytes_copied=bytes_copied,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class Burst:
    """A half-duplex turn was relayed up to a drain point."""

    bytes_copied: int


Outcome = EndOfStream | TransportError
