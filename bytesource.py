import io
import logging
import os
import stat
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterable, Optional, Union

import bytestreams
import hashing
from bytesink import ByteSink
from bytestreams import ByteProcessor, LimitedStream
from closer import Closer
from multistream import MultiStream

log = logging.getLogger(__name__)

# the largest amount size() asks a stream to skip in one call
MAX_SKIP = 2 ** 31 - 1


class ByteSource(ABC):
    """
    A readable source of bytes, such as a file or a buffer.

    A ByteSource is not a stream. It holds no open resource; instead it opens a new, independent stream every time
    open_stream() is called. The remaining operations are built on open_stream() and close every stream they open,
    even when they fail.
    """

    @abstractmethod
    def open_stream(self) -> BinaryIO:
        """
        Opens a new stream over this source's bytes. The caller is responsible for closing it.
        """

    def open_buffered_stream(self) -> BinaryIO:
        stream = self.open_stream()
        if isinstance(stream, io.RawIOBase):
            return io.BufferedReader(stream)
        return stream

    def slice(self, offset: int, length: int) -> "ByteSource":
        """
        Returns a view of at most `length` bytes of this source, starting `offset` bytes in.
        """
        return SlicedByteSource(self, offset, length)

    def size_if_known(self) -> Optional[int]:
        """
        Returns the size of this source if it can be determined without opening it, otherwise None.
        """
        return None

    def is_empty(self) -> bool:
        if self.size_if_known() == 0:
            return True
        with Closer() as closer:
            stream = closer.register(self.open_stream())
            return len(stream.read(1)) == 0

    def size(self) -> int:
        """
        Returns the size of this source in bytes.

        This uses size_if_known() if possible. Otherwise a stream is opened and the size is counted by skipping,
        and if that does not work, a second stream is opened and the size is counted by reading.
        """
        size = self.size_if_known()
        if size is not None:
            return size

        with Closer() as closer:
            try:
                stream = closer.register(self.open_stream())
                return self.__count_by_skipping(stream)
            except OSError as e:
                # skip() may not be supported, try reading instead
                log.debug("Could not count %r by skipping (%r). Counting by reading.", self, e)

        with Closer() as closer:
            stream = closer.register(self.open_stream())
            return bytestreams.exhaust(stream)

    @staticmethod
    def __count_by_skipping(stream: BinaryIO) -> int:
        count = 0
        while True:
            # never skip past what's available, some streams misreport their position if you do
            skipped = bytestreams.skip(stream, min(bytestreams.available(stream), MAX_SKIP))
            if skipped <= 0:
                if len(stream.read(1)) == 0:
                    return count
                elif count == 0 and bytestreams.available(stream) == 0:
                    # available() is still 0 after reading a byte, so it will probably always be 0
                    raise OSError("Skipping made no progress.")
                count += 1
            else:
                count += skipped

    def copy_to(self, output: Union[BinaryIO, ByteSink]) -> int:
        """
        Copies this source's bytes to an output stream, or to a new stream opened from a sink.
        Returns the number of bytes copied. The output stream is only closed if it was opened here.
        """
        if output is None:
            raise ValueError("output may not be None")
        with Closer() as closer:
            stream = closer.register(self.open_stream())
            if isinstance(output, ByteSink):
                output = closer.register(output.open_stream())
            return bytestreams.copy(stream, output)

    def read(self, processor: Optional[ByteProcessor] = None):
        """
        Reads this source fully into memory, or feeds it to a processor and returns the processor's result.
        """
        with Closer() as closer:
            stream = closer.register(self.open_stream())
            if processor is None:
                return bytestreams.to_bytes(stream)
            return bytestreams.read_bytes(stream, processor)

    def hash(self, hashfunc: str = "SHA256") -> bytes:
        hasher = hashing.Hasher(hashfunc)
        self.copy_to(hasher)
        return hasher.finalize()

    def content_equals(self, other: "ByteSource") -> bool:
        """
        Checks if this source and another have the same bytes, without reading either fully into memory.
        """
        if other is None:
            raise ValueError("other may not be None")

        buf = memoryview(bytearray(2 * bytestreams.BUF_SIZE))
        seg1, seg2 = buf[:bytestreams.BUF_SIZE], buf[bytestreams.BUF_SIZE:]

        with Closer() as closer:
            in1 = closer.register(self.open_stream())
            in2 = closer.register(other.open_stream())
            while True:
                read1 = bytestreams.read_fully_into(in1, seg1)
                read2 = bytestreams.read_fully_into(in2, seg2)
                if read1 != read2 or seg1[:read1] != seg2[:read2]:
                    return False
                elif read1 != bytestreams.BUF_SIZE:
                    return True


class SlicedByteSource(ByteSource):
    def __init__(self, source: ByteSource, offset: int, length: int):
        if offset < 0:
            raise ValueError(f"offset ({offset}) may not be negative")
        if length < 0:
            raise ValueError(f"length ({length}) may not be negative")
        self.source = source
        self.offset = offset
        self.length = length

    def open_stream(self) -> BinaryIO:
        return self.__slice_stream(self.source.open_stream())

    def open_buffered_stream(self) -> BinaryIO:
        return self.__slice_stream(self.source.open_buffered_stream())

    def __slice_stream(self, stream: BinaryIO) -> BinaryIO:
        if self.offset > 0:
            try:
                skipped = bytestreams.skip_up_to(stream, self.offset)
            except BaseException as e:
                closer = Closer()
                closer.register(stream)
                closer.close(e)
                raise
            if skipped < self.offset:
                # the source ended before the slice started
                return LimitedStream(stream, 0)
        return LimitedStream(stream, self.length)

    def slice(self, offset: int, length: int) -> ByteSource:
        if offset < 0:
            raise ValueError(f"offset ({offset}) may not be negative")
        if length < 0:
            raise ValueError(f"length ({length}) may not be negative")
        max_length = self.length - offset
        if max_length <= 0:
            return empty()
        return self.source.slice(self.offset + offset, min(length, max_length))

    def is_empty(self) -> bool:
        return self.length == 0 or super().is_empty()

    def size_if_known(self) -> Optional[int]:
        unsliced = self.source.size_if_known()
        if unsliced is None:
            return None
        return max(min(self.offset + self.length, unsliced) - self.offset, 0)

    def __repr__(self) -> str:
        return f"{self.source!r}.slice({self.offset}, {self.length})"


class ByteArrayByteSource(ByteSource):
    def __init__(self, data, offset: int = 0, length: Optional[int] = None):
        self.__bytes = data
        self.__offset = offset
        self.__length = memoryview(data).nbytes - offset if length is None else length

    def __view(self) -> memoryview:
        return memoryview(self.__bytes).cast("B")[self.__offset:self.__offset + self.__length]

    def open_stream(self) -> BinaryIO:
        return io.BytesIO(self.__view())

    def open_buffered_stream(self) -> BinaryIO:
        return self.open_stream()

    def is_empty(self) -> bool:
        return self.__length == 0

    def size(self) -> int:
        return self.__length

    def size_if_known(self) -> Optional[int]:
        return self.__length

    def read(self, processor: Optional[ByteProcessor] = None):
        if processor is None:
            return bytes(self.__view())
        processor.process_bytes(self.__view())
        return processor.get_result()

    def copy_to(self, output: Union[BinaryIO, ByteSink]) -> int:
        if output is None:
            raise ValueError("output may not be None")
        if isinstance(output, ByteSink):
            return output.write(self.__view())
        output.write(self.__view())
        return self.__length

    def hash(self, hashfunc: str = "SHA256") -> bytes:
        return hashing.hash_bytes(self.__view(), hashfunc)

    def slice(self, offset: int, length: int) -> ByteSource:
        if offset < 0:
            raise ValueError(f"offset ({offset}) may not be negative")
        if length < 0:
            raise ValueError(f"length ({length}) may not be negative")
        new_offset = self.__offset + min(self.__length, offset)
        end_offset = self.__offset + min(self.__length, offset + length)
        return ByteArrayByteSource(self.__bytes, new_offset, end_offset - new_offset)

    def __repr__(self) -> str:
        hexstr = self.__view().hex().upper()
        if len(hexstr) > 30:
            hexstr = hexstr[:27] + "..."
        return f"wrap({hexstr})"


class EmptyByteSource(ByteArrayByteSource):
    def __init__(self):
        super().__init__(b"")

    def read(self, processor: Optional[ByteProcessor] = None):
        if processor is None:
            return b""
        return super().read(processor)

    def __repr__(self) -> str:
        return "empty()"


class ConcatenatedByteSource(ByteSource):
    def __init__(self, sources: Iterable[ByteSource]):
        if sources is None:
            raise ValueError("sources may not be None")
        self.__sources = sources

    def open_stream(self) -> BinaryIO:
        return MultiStream(self.__sources)

    def is_empty(self) -> bool:
        return all(source.is_empty() for source in self.__sources)

    def size_if_known(self) -> Optional[int]:
        total = 0
        for source in self.__sources:
            size = source.size_if_known()
            if size is None:
                return None
            total += size
        return total

    def size(self) -> int:
        return sum(source.size() for source in self.__sources)

    def __repr__(self) -> str:
        return f"concat({', '.join(repr(source) for source in self.__sources)})"


class FileByteSource(ByteSource):
    def __init__(self, path: str):
        self.path = os.fspath(path)

    def open_stream(self) -> BinaryIO:
        return open(self.path, "rb")

    def size_if_known(self) -> Optional[int]:
        try:
            st = os.stat(self.path)
        except OSError:
            return None
        return st.st_size if stat.S_ISREG(st.st_mode) else None

    def __repr__(self) -> str:
        return f"FileByteSource({self.path!r})"


__EMPTY = EmptyByteSource()


def wrap(data) -> ByteSource:
    """
    Returns a source over the given buffer. The buffer is not copied.
    """
    return ByteArrayByteSource(data)


def empty() -> ByteSource:
    return __EMPTY


def concat(*sources: Union[ByteSource, Iterable[ByteSource]]) -> ByteSource:
    """
    Returns a source over the concatenation of the given sources.

    A single reusable collection (such as a list) is used as is, so later changes to it are reflected in the
    returned source. A single iterator, like multiple arguments, is copied when this is called.
    """
    if len(sources) == 1 and not isinstance(sources[0], ByteSource):
        members = sources[0]
        if iter(members) is members:
            members = tuple(members)
        return ConcatenatedByteSource(members)

    def args():
        for s in sources:
            if isinstance(s, ByteSource):
                yield s
            else:
                for ss in s:
                    yield ss
    return ConcatenatedByteSource(tuple(args()))


def files(*paths: str) -> ByteSource:
    return concat(FileByteSource(path) for path in paths)
