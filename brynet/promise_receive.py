"""Promise-style receiving: queue "read N bytes" and "read until delimiter" steps."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional, Union

Handle = Callable[[bytes], bool]
Length = Union[int, Callable[[], int]]


def memsearch(hay: bytes | bytearray | memoryview, needle: bytes | bytearray) -> Optional[int]:
    """Return the offset of the first occurrence of needle in hay, or None."""
    hay_bytes = bytes(hay)
    needle_bytes = bytes(needle)
    if len(needle_bytes) > len(hay_bytes):
        return None
    index = hay_bytes.find(needle_bytes)
    return None if index < 0 else index


@dataclass
class _PendingReceive:
    length: Optional[Length]
    delimiter: bytes
    handle: Handle

    def wanted(self) -> int:
        value = self.length() if callable(self.length) else self.length
        if value is None or value < 0:
            raise ValueError("receive length must not be negative")
        return value


class PromiseReceive:
    """A queue of receive steps that consumes incoming data in order.

    Each handle gets the matched bytes; returning True keeps the step at the
    front of the queue so it runs again on the following data.
    """

    def __init__(self) -> None:
        self._pending: deque[_PendingReceive] = deque()

    def receive(self, length: Length, handle: Handle) -> PromiseReceive:
        """Queue a step that waits for exactly ``length`` bytes.

        ``length`` may be a callable, read each time the step is tried, so the
        amount can be decided by an earlier step.
        """
        if not callable(length) and length < 0:
            raise ValueError("receive length must not be negative")
        self._pending.append(_PendingReceive(length, b"", handle))
        return self

    def receive_until(self, delimiter: bytes | str, handle: Handle) -> PromiseReceive:
        """Queue a step that waits for ``delimiter``; the handle gets what precedes it."""
        delim = delimiter.encode("utf-8") if isinstance(delimiter, str) else bytes(delimiter)
        if not delim:
            raise ValueError("delimiter is empty")
        self._pending.append(_PendingReceive(None, delim, handle))
        return self

    def process(self, data: bytes | bytearray | memoryview) -> int:
        """Run queued steps over ``data`` and return how many bytes were consumed."""
        data = bytes(data)
        consumed = 0
        while self._pending:
            pending = self._pending[0]
            if pending.length is not None:
                wanted = pending.wanted()
                if len(data) - consumed < wanted:
                    break
                self._pending.popleft()
                chunk = data[consumed:consumed + wanted]
                consumed += wanted
                if pending.handle(chunk) and wanted > 0:
                    self._pending.appendleft(pending)
            else:
                pos = memsearch(data[consumed:], pending.delimiter)
                if pos is None:
                    break
                self._pending.popleft()
                chunk = data[consumed:consumed + pos]
                consumed += pos + len(pending.delimiter)
                if pending.handle(chunk):
                    self._pending.appendleft(pending)
        return consumed

    def __len__(self) -> int:
        return len(self._pending)


def setup_promise_receive(session) -> PromiseReceive:
    """Attach a new PromiseReceive to a connection's data callback and return it."""
    receiver = PromiseReceive()

    def on_data(reader) -> None:
        consumed = receiver.process(reader.buffer)
        reader.add_pos(consumed)
        reader.save_pos()

    session.set_data_callback(on_data)
    return receiver