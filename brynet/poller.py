"""A poll(2) style file descriptor set with read, write and error checks."""

from __future__ import annotations

import select
import sys
import time
from enum import IntFlag
from typing import Iterable


def _flag(name: str, default: int) -> int:
    return getattr(select, name, default)


POLLIN = _flag("POLLIN", 0x001)
POLLPRI = _flag("POLLPRI", 0x002)
POLLOUT = _flag("POLLOUT", 0x004)
POLLERR = _flag("POLLERR", 0x008)
POLLHUP = _flag("POLLHUP", 0x010)
POLLRDNORM = _flag("POLLRDNORM", 0x040)
POLLRDBAND = _flag("POLLRDBAND", 0x080)
POLLWRNORM = _flag("POLLWRNORM", 0x100)
POLLWRBAND = _flag("POLLWRBAND", 0x200)

if sys.platform == "win32":
    CHECK_READ_FLAG = POLLIN | POLLRDNORM | POLLRDBAND
    CHECK_WRITE_FLAG = POLLOUT | POLLWRNORM
else:
    CHECK_READ_FLAG = POLLIN | POLLRDNORM | POLLRDBAND | POLLPRI
    CHECK_WRITE_FLAG = POLLOUT | POLLWRNORM | POLLWRBAND
CHECK_ERROR_FLAG = POLLERR | POLLHUP


class CheckType(IntFlag):
    READ = 0x1
    WRITE = 0x2
    ERROR = 0x4


def _fileno(fd) -> int:
    return fd if isinstance(fd, int) else fd.fileno()


def _check_event(revents: int, check: CheckType) -> bool:
    if check & CheckType.READ and revents & CHECK_READ_FLAG:
        return True
    if check & CheckType.WRITE and revents & CHECK_WRITE_FLAG:
        return True
    if check & CheckType.ERROR and revents & CHECK_ERROR_FLAG:
        return True
    return False


class Poller:
    """Tracks interest per descriptor and the events seen by the last poll."""

    def __init__(self) -> None:
        self._events: dict[int, int] = {}
        self._revents: dict[int, int] = {}

    def add(self, fd, check: CheckType) -> None:
        """Register interest; a descriptor added with ERROR only stays with no events."""
        fd = _fileno(fd)
        check = CheckType(check)
        events = self._events.get(fd, 0)
        if check & CheckType.READ:
            events |= CHECK_READ_FLAG
        if check & CheckType.WRITE:
            events |= CHECK_WRITE_FLAG
        self._events[fd] = events

    def unregister(self, fd, check: CheckType) -> None:
        """Drop interest; the descriptor is removed once no events are left."""
        fd = _fileno(fd)
        if fd not in self._events:
            return
        check = CheckType(check)
        events = self._events[fd]
        if check & CheckType.READ:
            events &= ~CHECK_READ_FLAG
        if check & CheckType.WRITE:
            events &= ~CHECK_WRITE_FLAG
        if check & CheckType.ERROR:
            events &= ~CHECK_ERROR_FLAG
        if events == 0:
            self.remove(fd)
        else:
            self._events[fd] = events

    def remove(self, fd) -> None:
        fd = _fileno(fd)
        self._events.pop(fd, None)
        self._revents.pop(fd, None)

    def poll(self, timeout_ms: int) -> int:
        """Wait up to timeout_ms (negative waits forever); return the number of ready fds."""
        self._revents = {}
        try:
            if hasattr(select, "poll"):
                self._revents = self._poll_native(timeout_ms)
            else:
                self._revents = self._poll_select(timeout_ms)
        except InterruptedError:
            return 0
        return sum(1 for revents in self._revents.values() if revents)

    def _poll_native(self, timeout_ms: int) -> dict[int, int]:
        poller = select.poll()
        for fd, events in self._events.items():
            poller.register(fd, events)
        timeout = None if timeout_ms < 0 else timeout_ms
        return {fd: revents for fd, revents in poller.poll(timeout)}

    def _poll_select(self, timeout_ms: int) -> dict[int, int]:
        timeout = None if timeout_ms < 0 else timeout_ms / 1000
        if not self._events:
            if timeout:
                time.sleep(timeout)
            return {}
        readers = [fd for fd, ev in self._events.items() if ev & CHECK_READ_FLAG]
        writers = [fd for fd, ev in self._events.items() if ev & CHECK_WRITE_FLAG]
        readable, writable, failed = select.select(readers, writers, list(self._events), timeout)
        revents: dict[int, int] = {}
        for fd in readable:
            revents[fd] = revents.get(fd, 0) | POLLIN
        for fd in writable:
            revents[fd] = revents.get(fd, 0) | POLLOUT
        for fd in failed:
            revents[fd] = revents.get(fd, 0) | POLLERR
        return revents

    def check(self, fd, check: CheckType) -> bool:
        """Report whether the last poll saw the requested event on fd."""
        fd = _fileno(fd)
        if fd not in self._events:
            return False
        return _check_event(self._revents.get(fd, 0), CheckType(check))

    def visit(self, check: CheckType) -> list[int]:
        """Return the registered descriptors, in order, that have the requested event."""
        check = CheckType(check)
        return [fd for fd in self._events if _check_event(self._revents.get(fd, 0), check)]

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, fd) -> bool:
        return _fileno(fd) in self._events

    def __iter__(self) -> Iterable[int]:
        return iter(list(self._events))