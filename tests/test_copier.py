import pytest

from socketbridge.common import Burst, EndOfStream, TransportError
from socketbridge.copier import copy, copy_burst


class FakeEndpoint:
    def __init__(self, chunks=(), read_error: OSError | None = None, write_error: OSError | None = None):
        self.chunks = list(chunks)
        self.read_error = read_error
        self.write_error = write_error
        self.read_sizes: list[int] = []
        self.writes: list[bytes] = []

    async def read(self, n: int) -> bytes:
        self.read_sizes.append(n)
        if self.chunks:
            chunk = self.chunks.pop(0)
            assert len(chunk) <= n
            return chunk
        if self.read_error is not None:
            raise self.read_error
        return b""

    def pending(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    async def write(self, data: bytes):
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(data)

    @property
    def written(self) -> bytes:
        return b"".join(self.writes)


@pytest.mark.asyncio
async def test_copy_relays_all_chunks_in_order():
    chunks = [b"a" * 10, b"bc", b"d" * 16, b"e"]
    source = FakeEndpoint(chunks)
    destination = FakeEndpoint()

    outcome = await copy(source, destination, 16)

    assert outcome == EndOfStream(29)
    assert not outcome.no_data
    assert destination.written == b"".join(chunks)
    assert destination.writes == chunks
    assert set(source.read_sizes) == {16}


@pytest.mark.asyncio
async def test_copy_keeps_reading_after_short_reads():
    source = FakeEndpoint([b"x", b"y", b"z"])
    destination = FakeEndpoint()

    outcome = await copy(source, destination, 4096)

    assert outcome == EndOfStream(3)
    assert destination.written == b"xyz"
    assert len(source.read_sizes) == 4


@pytest.mark.asyncio
async def test_copy_reports_no_data():
    outcome = await copy(FakeEndpoint(), FakeEndpoint(), 4096)

    assert isinstance(outcome, EndOfStream)
    assert outcome.no_data


@pytest.mark.asyncio
async def test_copy_read_failure_is_returned():
    error = ConnectionResetError("reset by peer")
    source = FakeEndpoint([b"hello"], read_error=error)
    destination = FakeEndpoint()

    outcome = await copy(source, destination, 4096)

    assert isinstance(outcome, TransportError)
    assert outcome.operation == "read"
    assert outcome.kind == "ConnectionResetError"
    assert outcome.error is error
    assert outcome.bytes_copied == 5
    assert destination.written == b"hello"


@pytest.mark.asyncio
async def test_copy_write_failure_stops_relay():
    source = FakeEndpoint([b"one", b"two"])
    destination = FakeEndpoint(write_error=BrokenPipeError("broken"))

    outcome = await copy(source, destination, 4096)

    assert isinstance(outcome, TransportError)
    assert outcome.operation == "write"
    assert outcome.kind == "BrokenPipeError"
    assert outcome.bytes_copied == 0
    # No further reads after the failed write.
    assert source.chunks == [b"two"]


@pytest.mark.asyncio
async def test_copy_rejects_non_positive_buffer_size():
    with pytest.raises(ValueError):
        await copy(FakeEndpoint(), FakeEndpoint(), 0)


@pytest.mark.asyncio
async def test_copy_burst_stops_at_short_read():
    source = FakeEndpoint([b"a" * 8, b"b" * 3, b"c" * 8])
    destination = FakeEndpoint()

    result = await copy_burst(source, destination, 8)

    assert result == Burst(11)
    assert destination.written == b"a" * 8 + b"b" * 3
    assert source.chunks == [b"c" * 8]


@pytest.mark.asyncio
async def test_copy_burst_end_of_stream():
    result = await copy_burst(FakeEndpoint(), FakeEndpoint(), 8)
    assert result == EndOfStream()

    # End-of-stream after a full read still completes the burst.
    source = FakeEndpoint([b"a" * 8])
    result = await copy_burst(source, FakeEndpoint(), 8)
    assert result == Burst(8)


@pytest.mark.asyncio
async def test_copy_burst_ends_on_full_read_with_nothing_pending():
    source = FakeEndpoint([b"12345678"])
    destination = FakeEndpoint()

    result = await copy_burst(source, destination, 8)

    assert result == Burst(8)
    assert destination.written == b"12345678"
    # The turn ended without waiting on another read.
    assert source.read_sizes == [8]


@pytest.mark.asyncio
async def test_copy_burst_continues_while_data_is_pending():
    source = FakeEndpoint([b"a" * 8, b"b" * 8])
    destination = FakeEndpoint()

    result = await copy_burst(source, destination, 8)

    assert result == Burst(16)
    assert source.read_sizes == [8, 8]
