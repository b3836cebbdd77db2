import io
import logging
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO, Iterable, Optional

import bytestreams

if TYPE_CHECKING:
    from bytesource import ByteSource

log = logging.getLogger(__name__)


class State(Enum):
    NOT_STARTED = "not started"
    OPEN = "open"
    EXHAUSTED = "exhausted"


class MultiStream(io.RawIOBase):
    """
    A stream over the concatenation of the streams of several byte sources.

    Only one source is open at a time. A source's stream is opened the first time data is needed from it,
    and the previous source's stream is closed before that happens. Reads never return end of data until
    every source has been exhausted, but a single read never spans more than one source.

    Once closed, the stream stays exhausted: reads return end of data instead of opening anything else.
    """

    def __init__(self, sources: Iterable["ByteSource"]):
        super().__init__()
        self.__sources = iter(sources)
        self.__current: Optional[BinaryIO] = None
        self.__index = -1
        self.__state = State.NOT_STARTED

    @property
    def state(self) -> State:
        return self.__state

    @property
    def index(self) -> int:
        return self.__index

    def readable(self) -> bool:
        return True

    def __close_current(self):
        current, self.__current = self.__current, None
        if self.__state is State.OPEN:
            self.__state = State.NOT_STARTED
        if current is not None:
            log.debug("Closing stream of source %d", self.__index)
            current.close()

    def __advance(self) -> bool:
        self.__close_current()
        try:
            source = next(self.__sources, None)
            if source is None:
                log.debug("Exhausted after %d sources", self.__index + 1)
                self.__state = State.EXHAUSTED
                return False
            self.__index += 1
            log.debug("Opening stream of source %d: %r", self.__index, source)
            self.__current = source.open_stream()
        except BaseException:
            self.__state = State.EXHAUSTED
            raise
        self.__state = State.OPEN
        return True

    def __ensure_open(self) -> bool:
        if self.__state is State.EXHAUSTED:
            return False
        if self.__current is None:
            return self.__advance()
        return True

    def readinto(self, b) -> int:
        view = memoryview(b).cast("B")
        if len(view) == 0:
            return 0
        while self.__ensure_open():
            n = bytestreams.read_into(self.__current, view)
            if n != 0:
                return n
            self.__close_current()
        return 0

    def skip(self, n: int) -> int:
        if n <= 0 or not self.__ensure_open():
            return 0
        skipped = bytestreams.skip(self.__current, n)
        if skipped != 0:
            return skipped
        # the current stream can't skip, or is at its end; a read makes progress either way
        return len(self.read(1))

    def available(self) -> int:
        if self.__current is None:
            return 0
        return bytestreams.available(self.__current)

    def close(self):
        try:
            self.__close_current()
        finally:
            self.__state = State.EXHAUSTED
            super().close()
