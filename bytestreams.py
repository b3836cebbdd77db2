import io
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterable, Union

BUF_SIZE = 65536


def combine(*arr: Union[bytes, Iterable[bytes]]) -> bytes:
    def args():
        for b in arr:
            if isinstance(b, (bytes, bytearray, memoryview)):
                yield b
            else:
                for ba in b:
                    yield ba
    return b"".join(args())


def __seekable(stream) -> bool:
    seekable = getattr(stream, "seekable", None)
    return seekable is not None and seekable()


def read_into(stream: BinaryIO, view: memoryview) -> int:
    """
    Performs one read into the given buffer, returning the number of bytes placed in it.
    This may be fewer than len(view) without the stream being at its end. 0 means end of data.
    """
    readinto = getattr(stream, "readinto", None)
    if readinto is not None:
        return readinto(view) or 0
    data = stream.read(len(view))
    view[:len(data)] = data
    return len(data)


def read_fully_into(stream: BinaryIO, view: memoryview) -> int:
    total = 0
    while total < len(view) and (n := read_into(stream, view[total:])) != 0:
        total += n
    return total


def chunks(stream: BinaryIO, size: int = BUF_SIZE) -> Iterable[bytes]:
    while len(buf := stream.read(size)) != 0:
        yield buf


def skip(stream: BinaryIO, n: int) -> int:
    """
    Skips at most n bytes using the stream's own skip() if it has one, or by seeking if it is seekable.
    Returns the number of bytes skipped, which is 0 when the stream cannot skip at all.
    """
    if n <= 0:
        return 0
    stream_skip = getattr(stream, "skip", None)
    if stream_skip is not None:
        return stream_skip(n)
    if not __seekable(stream):
        return 0
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    if pos >= end:
        stream.seek(pos)
        return 0
    target = min(pos + n, end)
    stream.seek(target)
    return target - pos


def available(stream: BinaryIO) -> int:
    """
    Estimates how many bytes can be read without blocking.
    """
    stream_available = getattr(stream, "available", None)
    if stream_available is not None:
        return stream_available()
    if not __seekable(stream):
        return 0
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(pos)
    return max(end - pos, 0)


def skip_up_to(stream: BinaryIO, n: int) -> int:
    total = 0
    buf = None
    while total < n:
        skipped = skip(stream, n - total)
        if skipped == 0:
            # skip() is unsupported or stalled, so read and discard instead
            if buf is None:
                buf = memoryview(bytearray(min(n - total, BUF_SIZE)))
            skipped = read_into(stream, buf[:min(n - total, len(buf))])
            if skipped == 0:
                break
        total += skipped
    return total


def skip_fully(stream: BinaryIO, n: int):
    skipped = skip_up_to(stream, n)
    if skipped < n:
        raise EOFError(f"Reached end of stream after skipping {skipped} bytes; {n} bytes expected.")


def copy(istream: BinaryIO, ostream: BinaryIO, buf_size: int = BUF_SIZE) -> int:
    total = 0
    for buf in chunks(istream, buf_size):
        ostream.write(buf)
        total += len(buf)
    return total


def to_bytes(stream: BinaryIO) -> bytes:
    return combine(chunks(stream))


def exhaust(stream: BinaryIO) -> int:
    total = 0
    buf = memoryview(bytearray(BUF_SIZE))
    while (n := read_into(stream, buf)) != 0:
        total += n
    return total


class ByteProcessor(ABC):
    @abstractmethod
    def process_bytes(self, data: memoryview) -> bool:
        """
        Consumes the next chunk of the stream. Return False to stop reading.
        """

    @abstractmethod
    def get_result(self):
        pass


def read_bytes(stream: BinaryIO, processor: ByteProcessor):
    buf = memoryview(bytearray(BUF_SIZE))
    while (n := read_into(stream, buf)) != 0:
        if not processor.process_bytes(buf[:n]):
            break
    return processor.get_result()


class LimitedStream(io.RawIOBase):
    """
    Exposes at most `limit` bytes of the wrapped stream. Closing it closes the wrapped stream.
    """

    def __init__(self, stream: BinaryIO, limit: int):
        super().__init__()
        self.__stream = stream
        self.__left = max(limit, 0)
        if limit < 0:
            raise ValueError(f"limit ({limit}) may not be negative")

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self.__left == 0:
            return 0
        view = memoryview(b).cast("B")
        if len(view) == 0:
            return 0
        n = read_into(self.__stream, view[:min(len(view), self.__left)])
        self.__left -= n
        return n

    def skip(self, n: int) -> int:
        skipped = skip(self.__stream, min(n, self.__left))
        self.__left -= skipped
        return skipped

    def available(self) -> int:
        return min(available(self.__stream), self.__left)

    def close(self):
        if self.closed:
            return
        try:
            self.__stream.close()
        finally:
            super().close()
