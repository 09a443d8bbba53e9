"""Binary packet writer and reader with selectable byte order."""

from __future__ import annotations

import struct

from brynet.errors import PacketError

BIG_PACKET_SIZE = 32 * 1024


class _NoCopy:
    """Mixin that forbids copying instances."""

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} objects cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} objects cannot be copied")


def _to_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class PacketWriter(_NoCopy):
    """Writes integers and raw bytes into a bounded, optionally growing buffer."""

    def __init__(self, capacity: int, big_endian: bool = False, auto_grow: bool = False):
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._big_endian = big_endian
        self._auto_grow = auto_grow
        self._data = bytearray()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_auto_grow(self) -> bool:
        return self._auto_grow

    @property
    def big_endian(self) -> bool:
        return self._big_endian

    def reset(self) -> None:
        """Rewind the write position to the start."""
        self._data.clear()

    def _grow(self, length: int) -> None:
        if not self._auto_grow or len(self._data) + length <= self._capacity:
            return
        self._capacity += length

    def _write(self, data: bytes) -> PacketWriter:
        self._grow(len(data))
        if self._capacity < len(self._data) + len(data):
            raise PacketError("not enough space left in packet")
        self._data += data
        return self

    def _pack(self, code: str, value: int) -> PacketWriter:
        order = ">" if self._big_endian else "<"
        try:
            packed = struct.pack(order + code, value)
        except struct.error as exc:
            raise ValueError(f"value {value!r} does not fit: {exc}") from None
        return self._write(packed)

    def write_bool(self, value: bool) -> PacketWriter:
        return self._write(b"\x01" if value else b"\x00")

    def write_int8(self, value: int) -> PacketWriter:
        return self._pack("b", value)

    def write_uint8(self, value: int) -> PacketWriter:
        return self._pack("B", value)

    def write_int16(self, value: int) -> PacketWriter:
        return self._pack("h", value)

    def write_uint16(self, value: int) -> PacketWriter:
        return self._pack("H", value)

    def write_int32(self, value: int) -> PacketWriter:
        return self._pack("i", value)

    def write_uint32(self, value: int) -> PacketWriter:
        return self._pack("I", value)

    def write_int64(self, value: int) -> PacketWriter:
        return self._pack("q", value)

    def write_uint64(self, value: int) -> PacketWriter:
        return self._pack("Q", value)

    def write_binary(self, data: bytes | bytearray | memoryview | str) -> PacketWriter:
        """Append raw bytes; text is encoded as UTF-8."""
        return self._write(_to_bytes(data))

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)


class PacketReader:
    """Reads integers from a byte buffer, tracking current and saved positions."""

    def __init__(self, buffer: bytes | bytearray | memoryview, big_endian: bool = False):
        self._buffer = bytes(buffer)
        self._big_endian = big_endian
        self._pos = 0
        self._saved_pos = 0

    @property
    def buffer(self) -> bytes:
        return self._buffer

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def saved_pos(self) -> int:
        return self._saved_pos

    @property
    def current_buffer(self) -> bytes:
        return self._buffer[self._pos:]

    @property
    def big_endian(self) -> bool:
        return self._big_endian

    def use_big_endian(self) -> None:
        self._big_endian = True

    def use_little_endian(self) -> None:
        self._big_endian = False

    def save_pos(self) -> None:
        self._saved_pos = self._pos

    def get_left(self) -> int:
        if self._pos > len(self._buffer):
            raise PacketError("current pos is greater than max len")
        return len(self._buffer) - self._pos

    def enough(self, length: int) -> bool:
        if self._pos > len(self._buffer):
            return False
        return len(self._buffer) - self._pos >= length

    def consume_all(self) -> None:
        self._pos = len(self._buffer)
        self.save_pos()

    def add_pos(self, diff: int) -> None:
        new_pos = self._pos + diff
        if new_pos > len(self._buffer) or new_pos < 0:
            raise PacketError("diff is to big")
        self._pos = new_pos

    def _unpack(self, code: str):
        size = struct.calcsize(code)
        if self._pos + size > len(self._buffer):
            raise PacketError("T size is to big")
        order = ">" if self._big_endian else "<"
        (value,) = struct.unpack_from(order + code, self._buffer, self._pos)
        self._pos += size
        return value

    def read_bool(self) -> bool:
        return self._unpack("B") != 0

    def read_int8(self) -> int:
        return self._unpack("b")

    def read_uint8(self) -> int:
        return self._unpack("B")

    def read_int16(self) -> int:
        return self._unpack("h")

    def read_uint16(self) -> int:
        return self._unpack("H")

    def read_int32(self) -> int:
        return self._unpack("i")

    def read_uint32(self) -> int:
        return self._unpack("I")

    def read_int64(self) -> int:
        return self._unpack("q")

    def read_uint64(self) -> int:
        return self._unpack("Q")

    def __len__(self) -> int:
        return len(self._buffer)


def big_packet(big_endian: bool = False, auto_grow: bool = False) -> PacketWriter:
    """Return a writer with the standard 32 KiB capacity."""
    return PacketWriter(BIG_PACKET_SIZE, big_endian, auto_grow)