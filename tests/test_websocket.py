import pytest

from brynet.websocket import FrameType, build_frame, extract_frame, handshake_response


def test_handshake_accept_key():
    response = handshake_response("dGhlIHNhbXBsZSBub25jZQ==")
    assert response.startswith("HTTP/1.1 101 Switching Protocols\r\n")
    assert "Sec-WebSocket-Accept: s3pPLMBiTxaQ9kYGzzhZRbK+xOo=\r\n\r\n" in response


def test_build_unmasked_text_frame():
    assert build_frame(b"Hello") == b"\x81\x05Hello"


def test_extract_masked_example_frame():
    frame = extract_frame(b"\x81\x85\x37\xfa\x21\x3d\x7f\x9f\x4d\x51\x58")
    assert frame.payload == b"Hello"
    assert frame.opcode is FrameType.TEXT_FRAME
    assert frame.is_fin
    assert frame.frame_size == 11


def test_not_fin_flag():
    data = build_frame(b"x", FrameType.TEXT_FRAME, is_fin=False)
    assert data[0] == FrameType.TEXT_FRAME
    assert extract_frame(data).is_fin is False


@pytest.mark.parametrize("size", [0, 125, 126, 200, 0xFFFF, 0x10000, 70000])
@pytest.mark.parametrize("masking", [False, True])
def test_round_trip_lengths(size, masking):
    payload = bytes(i % 251 for i in range(size))
    data = build_frame(payload, FrameType.BINARY_FRAME, True, masking)
    frame = extract_frame(data + b"trailing")
    assert frame.payload == payload
    assert frame.opcode is FrameType.BINARY_FRAME
    assert frame.frame_size == len(data)
    assert bool(data[1] & 0x80) == masking


def test_medium_length_header():
    data = build_frame(b"a" * 200)
    assert data[1] == 126
    assert data[2:4] == (200).to_bytes(2, "big")


def test_long_length_header():
    data = build_frame(b"a" * 70000)
    assert data[1] == 127
    assert data[2:6] == b"\x00\x00\x00\x00"
    assert data[6:10] == (70000).to_bytes(4, "big")


def test_text_payload_is_utf8():
    frame = extract_frame(build_frame("héllo", masking=True))
    assert frame.payload.decode("utf-8") == "héllo"


@pytest.mark.parametrize("cut", [0, 1, 3, 7])
def test_incomplete_frame_returns_none(cut):
    data = build_frame(b"payload", masking=True)
    assert extract_frame(data[:cut]) is None


def test_incomplete_extended_length():
    data = build_frame(b"a" * 300)
    assert extract_frame(data[:3]) is None
    assert extract_frame(data[:-1]) is None


def test_oversized_length_rejected():
    data = b"\x82\x7f\x00\x00\x00\x01\x00\x00\x00\x01" + b"a"
    assert extract_frame(data) is None


def test_high_bit_length_rejected():
    data = b"\x82\x7f\x00\x00\x00\x00\x80\x00\x00\x00"
    assert extract_frame(data) is None


def test_unknown_opcode_maps_to_error_frame():
    frame = extract_frame(b"\x83\x00")
    assert frame.opcode is FrameType.ERROR_FRAME
    assert frame.payload == b""


def test_control_frame_round_trip():
    frame = extract_frame(build_frame(b"", FrameType.PING_FRAME))
    assert frame.opcode is FrameType.PING_FRAME
    assert frame.frame_size == 2