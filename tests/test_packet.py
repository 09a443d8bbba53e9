import copy

import pytest

from brynet.errors import PacketError
from brynet.packet import PacketReader, PacketWriter, big_packet


@pytest.mark.parametrize("big_endian", [False, True])
def test_round_trip_all_types(big_endian):
    writer = PacketWriter(128, big_endian)
    (
        writer.write_bool(True)
        .write_int8(-5)
        .write_uint8(250)
        .write_int16(-30000)
        .write_uint16(60000)
        .write_int32(-2_000_000_000)
        .write_uint32(4_000_000_000)
        .write_int64(-(2**62))
        .write_uint64(2**63 + 7)
        .write_binary(b"tail")
    )
    reader = PacketReader(bytes(writer), big_endian)
    assert reader.read_bool() is True
    assert reader.read_int8() == -5
    assert reader.read_uint8() == 250
    assert reader.read_int16() == -30000
    assert reader.read_uint16() == 60000
    assert reader.read_int32() == -2_000_000_000
    assert reader.read_uint32() == 4_000_000_000
    assert reader.read_int64() == -(2**62)
    assert reader.read_uint64() == 2**63 + 7
    assert reader.current_buffer == b"tail"
    assert reader.get_left() == 4


def test_byte_order():
    little = PacketWriter(8).write_uint16(0x0102)
    big = PacketWriter(8, big_endian=True).write_uint16(0x0102)
    assert bytes(little) == b"\x02\x01"
    assert bytes(big) == b"\x01\x02"


def test_overflow_without_growth_raises():
    writer = PacketWriter(3)
    writer.write_uint16(1)
    with pytest.raises(PacketError):
        writer.write_uint16(2)
    assert len(writer) == 2


def test_auto_grow_extends_capacity():
    writer = PacketWriter(2, auto_grow=True)
    writer.write_uint32(7).write_binary("abc")
    assert len(writer) == 7
    assert writer.capacity >= 7
    assert PacketReader(bytes(writer)).read_uint32() == 7


def test_reset_rewinds():
    writer = PacketWriter(4)
    writer.write_uint32(1)
    writer.reset()
    writer.write_uint8(9)
    assert bytes(writer) == b"\x09"


def test_value_out_of_range():
    with pytest.raises(ValueError):
        PacketWriter(4).write_uint8(256)


def test_read_past_end_raises():
    reader = PacketReader(b"\x01")
    with pytest.raises(PacketError):
        reader.read_uint16()
    assert reader.pos == 0


def test_add_pos_and_bounds():
    reader = PacketReader(b"abcdef")
    reader.add_pos(4)
    assert reader.pos == 4
    assert reader.enough(2)
    assert not reader.enough(3)
    with pytest.raises(PacketError):
        reader.add_pos(3)


def test_save_pos_and_consume_all():
    reader = PacketReader(b"abcdef")
    reader.add_pos(2)
    reader.save_pos()
    assert reader.saved_pos == 2
    reader.consume_all()
    assert reader.pos == len(reader)
    assert reader.saved_pos == len(reader)
    assert reader.get_left() == 0


def test_switch_endianness():
    reader = PacketReader(b"\x01\x02\x01\x02")
    reader.use_big_endian()
    assert reader.read_uint16() == 0x0102
    reader.use_little_endian()
    assert reader.read_uint16() == 0x0201


def test_big_packet_capacity():
    assert big_packet().capacity == 32 * 1024


def test_writer_cannot_be_copied():
    with pytest.raises(TypeError):
        copy.copy(PacketWriter(4))