"""WebSocket handshake and frame building and parsing."""

from __future__ import annotations

import base64
import hashlib
import os
from dataclasses import dataclass
from enum import IntEnum

_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"


class FrameType(IntEnum):
    ERROR_FRAME = 0xFF
    CONTINUATION_FRAME = 0x00
    TEXT_FRAME = 0x01
    BINARY_FRAME = 0x02
    CLOSE_FRAME = 0x08
    PING_FRAME = 0x09
    PONG_FRAME = 0x0A


@dataclass(frozen=True)
class Frame:
    """A decoded frame and the number of buffer bytes it occupied."""

    payload: bytes
    opcode: FrameType
    frame_size: int
    is_fin: bool


def handshake_response(sec_key: str) -> str:
    """Build the server's 101 response for a client's Sec-WebSocket-Key."""
    digest = hashlib.sha1((sec_key + _GUID).encode("latin-1")).digest()
    accept = base64.b64encode(digest).decode("ascii")
    return (
        "HTTP/1.1 101 Switching Protocols\r\n"
        "Upgrade: websocket\r\n"
        "Connection: Upgrade\r\n"
        f"Sec-WebSocket-Accept: {accept}\r\n\r\n"
    )


def build_frame(
    payload: bytes | str,
    frame_type: FrameType = FrameType.TEXT_FRAME,
    is_fin: bool = True,
    masking: bool = False,
) -> bytes:
    """Encode one frame; text payloads are UTF-8 encoded."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    length = len(payload)
    frame = bytearray([(int(frame_type) | (0x80 if is_fin else 0x00)) & 0xFF])

    if length <= 125:
        frame.append(length)
    elif length <= 0xFFFF:
        frame.append(126)
        frame += length.to_bytes(2, "big")
    else:
        # Lengths are assumed to fit in 32 bits.
        frame.append(127)
        frame += b"\x00\x00\x00\x00"
        frame += (length & 0xFFFFFFFF).to_bytes(4, "big")

    if masking:
        frame[1] |= 0x80
        mask = os.urandom(4)
        frame += mask
        frame += bytes(b ^ mask[i % 4] for i, b in enumerate(payload))
    else:
        frame += payload
    return bytes(frame)


def extract_frame(buffer: bytes | bytearray | memoryview) -> Frame | None:
    """Decode the frame at the start of buffer, or return None if it is incomplete."""
    buf = bytes(buffer)
    if len(buf) < 2:
        return None

    is_fin = (buf[0] & 0x80) != 0
    try:
        opcode = FrameType(buf[0] & 0x0F)
    except ValueError:
        opcode = FrameType.ERROR_FRAME
    is_masking = (buf[1] & 0x80) != 0
    payload_len = buf[1] & 0x7F
    pos = 2

    if payload_len == 126:
        if len(buf) < 4:
            return None
        payload_len = int.from_bytes(buf[2:4], "big")
        pos = 4
    elif payload_len == 127:
        if len(buf) < 10:
            return None
        if any(buf[2:6]) or buf[6] & 0x80:
            return None
        payload_len = int.from_bytes(buf[6:10], "big")
        pos = 10

    mask = b""
    if is_masking:
        if len(buf) < pos + 4:
            return None
        mask = buf[pos:pos + 4]
        pos += 4

    if len(buf) < pos + payload_len:
        return None

    body = buf[pos:pos + payload_len]
    if is_masking:
        body = bytes(b ^ mask[i % 4] for i, b in enumerate(body))
    return Frame(body, opcode, pos + payload_len, is_fin)