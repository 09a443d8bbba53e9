"""Incremental HTTP/1.x request and response parser."""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import Callable, Optional
from urllib.parse import urlsplit

from brynet.errors import BrynetError
from brynet.websocket import FrameType

MAX_HEADER_SIZE = 80 * 1024

_METHODS = frozenset(
    {
        "DELETE", "GET", "HEAD", "POST", "PUT", "CONNECT", "OPTIONS", "TRACE",
        "COPY", "LOCK", "MKCOL", "MOVE", "PROPFIND", "PROPPATCH", "SEARCH",
        "UNLOCK", "BIND", "REBIND", "UNBIND", "ACL", "REPORT", "MKACTIVITY",
        "CHECKOUT", "MERGE", "M-SEARCH", "NOTIFY", "SUBSCRIBE", "UNSUBSCRIBE",
        "PATCH", "PURGE", "MKCALENDAR", "LINK", "UNLINK", "SOURCE",
    }
)

_VERSION_RE = re.compile(r"HTTP/\d\.\d")
_STATUS_RE = re.compile(r"HTTP/\d\.\d (\d{3})(?: (.*))?")
_CHUNK_RE = re.compile(rb"[0-9a-fA-F]+")


class HttpParseError(BrynetError, ValueError):
    """Raised when the input is not valid HTTP."""


class ParserType(Enum):
    REQUEST = 0
    RESPONSE = 1
    BOTH = 2


class _State(Enum):
    START = auto()
    HEADERS = auto()
    BODY_LENGTH = auto()
    BODY_EOF = auto()
    CHUNK_SIZE = auto()
    CHUNK_DATA = auto()
    CHUNK_DATA_END = auto()
    CHUNK_TRAILER = auto()
    FAILED = auto()


_LINE_STATES = frozenset(
    {_State.START, _State.HEADERS, _State.CHUNK_SIZE, _State.CHUNK_DATA_END, _State.CHUNK_TRAILER}
)


def _split_url(url: str) -> Optional[tuple[str, str]]:
    if url == "*":
        return "*", ""
    if not (url.startswith("/") or "://" in url):
        return None
    parts = urlsplit(url)
    if not parts.path:
        return None
    return parts.path, parts.query


class HttpParser:
    """Parses HTTP messages fed in pieces; results describe the last complete message.

    ``header_callback`` and ``end_callback`` run once and are then cleared.
    While ``body_callback`` is set, body bytes go to it instead of ``body``;
    it is cleared when a message ends.
    """

    def __init__(self, parser_type: ParserType):
        self.parser_type = ParserType(parser_type)
        self._state = _State.START
        self._pending = b""

        self._method: Optional[str] = None
        self._is_upgrade = False
        self._is_websocket = False
        self._is_keep_alive = False
        self._is_completed = False
        self._path = ""
        self._query = ""
        self._status = ""
        self._status_code = 0
        self._headers: dict[str, str] = {}
        self._url = ""
        self._body = bytearray()

        self.ws_cache_frame = bytearray()
        self.ws_parse_payload = bytearray()
        self.ws_frame_type = FrameType.ERROR_FRAME

        self.header_callback: Optional[Callable[[], None]] = None
        self.body_callback: Optional[Callable[[bytes], None]] = None
        self.end_callback: Optional[Callable[[], None]] = None

        self._reset_message_state()
        self._stop = False

    @property
    def is_upgrade(self) -> bool:
        return self._is_upgrade

    @property
    def is_websocket(self) -> bool:
        return self._is_websocket

    @property
    def is_keep_alive(self) -> bool:
        return self._is_keep_alive

    @property
    def is_completed(self) -> bool:
        return self._is_completed

    @property
    def method(self) -> Optional[str]:
        """Request method of the completed message, or None."""
        return self._method

    @property
    def path(self) -> str:
        return self._path

    @property
    def query(self) -> str:
        return self._query

    @property
    def status(self) -> str:
        return self._status

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def has_entry(self, key: str, value: str) -> bool:
        return self._headers.get(key) == value

    def has_key(self, key: str) -> bool:
        return key in self._headers

    def get_value(self, key: str) -> str:
        return self._headers.get(key, "")

    def feed(self, data: bytes | bytearray | memoryview) -> int:
        """Parse data and return how many bytes of it were used.

        Everything is used unless an upgrade ends the message, in which case
        the bytes after it are left for the caller. Empty data marks end of input.
        """
        if self._state is _State.FAILED:
            raise HttpParseError("parser is in an error state")
        data = bytes(data)
        try:
            if not data:
                self._on_eof()
                return 0
            buf = self._pending + data
            start = len(self._pending)
            self._pending = b""
            pos, stopped = self._execute(buf)
        except HttpParseError:
            self._state = _State.FAILED
            raise
        if stopped:
            return max(pos - start, 0)
        self._pending = buf[pos:]
        return len(data)

    def _reset_message_state(self) -> None:
        self._request_method: Optional[str] = None
        self._is_request = False
        self._content_length: Optional[int] = None
        self._chunked = False
        self._connection_tokens: set[str] = set()
        self._has_upgrade_header = False
        self._upgrade_flag = False
        self._current_field = ""
        self._header_bytes = 0
        self._remaining = 0

    def _clear_parse(self) -> None:
        self._method = None
        self._is_upgrade = False
        self._is_websocket = False
        self._is_completed = False
        self._url = ""
        self._query = ""
        self._body = bytearray()
        self._status = ""
        self._headers = {}
        self._path = ""
        self._reset_message_state()

    def _execute(self, buf: bytes) -> tuple[int, bool]:
        self._stop = False
        pos = 0
        size = len(buf)
        while pos < size:
            state = self._state
            if state in _LINE_STATES:
                if state is _State.START:
                    while pos < size and buf[pos] in b"\r\n":
                        pos += 1
                    if pos >= size:
                        break
                end = buf.find(b"\n", pos)
                if end < 0:
                    if state in (_State.START, _State.HEADERS) and size - pos > MAX_HEADER_SIZE:
                        raise HttpParseError("header too large")
                    break
                line = buf[pos:end]
                if line.endswith(b"\r"):
                    line = line[:-1]
                pos = end + 1
                self._handle_line(line)
            elif state in (_State.BODY_LENGTH, _State.CHUNK_DATA):
                take = min(self._remaining, size - pos)
                self._emit_body(buf[pos:pos + take])
                pos += take
                self._remaining -= take
                if self._remaining == 0:
                    if state is _State.BODY_LENGTH:
                        self._message_complete()
                    else:
                        self._state = _State.CHUNK_DATA_END
            elif state is _State.BODY_EOF:
                self._emit_body(buf[pos:])
                pos = size
            if self._stop:
                return pos, True
        return pos, False

    def _handle_line(self, line: bytes) -> None:
        state = self._state
        if state is _State.START:
            self._clear_parse()
            self._header_bytes = len(line) + 2
            self._parse_first_line(line.decode("latin-1"))
            self._state = _State.HEADERS
        elif state is _State.HEADERS:
            self._header_bytes += len(line) + 2
            if self._header_bytes > MAX_HEADER_SIZE:
                raise HttpParseError("header too large")
            if line:
                self._parse_header(line.decode("latin-1"))
            else:
                self._headers_complete()
        elif state is _State.CHUNK_SIZE:
            digits = line.split(b";", 1)[0].strip()
            if not _CHUNK_RE.fullmatch(digits):
                raise HttpParseError("invalid chunk size")
            chunk_size = int(digits, 16)
            if chunk_size == 0:
                self._state = _State.CHUNK_TRAILER
            else:
                self._remaining = chunk_size
                self._state = _State.CHUNK_DATA
        elif state is _State.CHUNK_DATA_END:
            if line:
                raise HttpParseError("missing CRLF after chunk data")
            self._state = _State.CHUNK_SIZE
        elif state is _State.CHUNK_TRAILER:
            if not line:
                self._message_complete()

    def _parse_first_line(self, text: str) -> None:
        if self.parser_type is ParserType.RESPONSE:
            is_response = True
        elif self.parser_type is ParserType.REQUEST:
            is_response = False
        else:
            is_response = text.startswith("HTTP/")
        if is_response:
            match = _STATUS_RE.fullmatch(text)
            if match is None:
                raise HttpParseError(f"invalid status line: {text!r}")
            self._is_request = False
            self._status_code = int(match.group(1))
            self._status = match.group(2) or ""
            return
        parts = text.split(" ")
        if len(parts) != 3:
            raise HttpParseError(f"invalid request line: {text!r}")
        method, url, version = parts
        if method not in _METHODS:
            raise HttpParseError(f"invalid method: {method!r}")
        if not url or not _VERSION_RE.fullmatch(version):
            raise HttpParseError(f"invalid request line: {text!r}")
        self._is_request = True
        self._request_method = method
        self._url = url

    def _parse_header(self, text: str) -> None:
        if text[0] in " \t":
            if not self._current_field:
                raise HttpParseError("header continuation without a field")
            self._headers[self._current_field] += " " + text.strip(" \t")
            return
        name, sep, value = text.partition(":")
        if not sep or not name or any(c in name for c in " \t"):
            raise HttpParseError(f"invalid header line: {text!r}")
        value = value.strip(" \t")
        self._headers[name] = self._headers.get(name, "") + value
        self._current_field = name

        lowered = name.lower()
        if lowered == "content-length":
            if not value.isdigit():
                raise HttpParseError("invalid content length")
            if self._content_length is not None:
                raise HttpParseError("duplicate content length")
            self._content_length = int(value)
        elif lowered == "transfer-encoding":
            self._chunked = value.split(",")[-1].strip().lower() == "chunked"
        elif lowered == "connection":
            self._connection_tokens.update(t.strip().lower() for t in value.split(","))
        elif lowered == "upgrade":
            self._has_upgrade_header = True

    def _headers_complete(self) -> None:
        error = None
        if self._url:
            split = _split_url(self._url)
            if split is None:
                error = f"failed to parse PATH in URL {self._url}"
            else:
                self._path, self._query = split
        callback, self.header_callback = self.header_callback, None
        if callback is not None:
            callback()
        if error is not None:
            raise HttpParseError(error)
        if self._chunked and self._content_length is not None:
            raise HttpParseError("both chunked encoding and content length")

        if self._has_upgrade_header and "upgrade" in self._connection_tokens:
            self._upgrade_flag = self._is_request or self._status_code == 101
        else:
            self._upgrade_flag = self._request_method == "CONNECT"

        has_body = self._chunked or bool(self._content_length)
        if self._upgrade_flag and (self._request_method == "CONNECT" or not has_body):
            self._message_complete()
            return
        if not self._is_request and (
            100 <= self._status_code < 200 or self._status_code in (204, 304)
        ):
            self._message_complete()
            return
        if self._chunked:
            self._state = _State.CHUNK_SIZE
        elif self._content_length is not None:
            if self._content_length == 0:
                self._message_complete()
            else:
                self._remaining = self._content_length
                self._state = _State.BODY_LENGTH
        elif self._is_request:
            self._message_complete()
        else:
            self._state = _State.BODY_EOF

    def _emit_body(self, chunk: bytes) -> None:
        if not chunk:
            return
        if self.body_callback is not None:
            self.body_callback(chunk)
        else:
            self._body += chunk

    def _message_complete(self) -> None:
        self._is_completed = True
        self._is_upgrade = self._upgrade_flag
        self._is_websocket = self._is_upgrade and self.has_entry("Upgrade", "websocket")
        connection = self.get_value("Connection")
        self._is_keep_alive = connection in ("Keep-Alive", "keep-alive")
        self._method = self._request_method
        self._state = _State.START
        self._stop = self._is_upgrade

        callback, self.end_callback = self.end_callback, None
        if callback is not None:
            callback()
        self.body_callback = None

    def _on_eof(self) -> None:
        if self._state is _State.BODY_EOF:
            self._message_complete()
        elif self._state is _State.START and not self._pending.strip(b"\r\n"):
            self._pending = b""
        else:
            raise HttpParseError("unexpected end of input")