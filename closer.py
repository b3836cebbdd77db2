import logging
from typing import List, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class Closer:
    """
    Closes every registered resource when the with-block exits, most recently registered first.

    A failure while closing never replaces an exception raised by the block itself. It is logged
    and attached to that exception as a note instead. When the block succeeds, the first close
    failure is raised after every resource has had its chance to close.
    """

    def __init__(self):
        self.__stack: List = []

    def __enter__(self):
        return self

    def register(self, closeable: T) -> T:
        if closeable is not None:
            self.__stack.append(closeable)
        return closeable

    def close(self, primary: Optional[BaseException] = None):
        thrown: Optional[BaseException] = primary
        while self.__stack:
            closeable = self.__stack.pop()
            try:
                closeable.close()
            except Exception as e:
                if thrown is None:
                    thrown = e
                    continue
                log.warning("Suppressing exception thrown when closing %r: %r", closeable, e)
                thrown.add_note(f"Suppressed while closing {closeable!r}: {e!r}")

        if thrown is not None and thrown is not primary:
            raise thrown

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close(exc_val)
        return False
