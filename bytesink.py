import os
from abc import ABC, abstractmethod
from typing import BinaryIO

from closer import Closer


class ByteSink(ABC):
    """
    A destination that can open a new writable stream on demand.
    """

    @abstractmethod
    def open_stream(self) -> BinaryIO:
        pass

    def write(self, data) -> int:
        with Closer() as closer:
            stream = closer.register(self.open_stream())
            stream.write(data)
            stream.flush()
        return len(data)


class FileByteSink(ByteSink):
    def __init__(self, path: str, append: bool = False):
        self.path = os.fspath(path)
        self.append = append

    def open_stream(self) -> BinaryIO:
        return open(self.path, "ab" if self.append else "wb")

    def __repr__(self) -> str:
        return f"FileByteSink({self.path!r}{', append' if self.append else ''})"
