# brynet

Building blocks for TCP networking, written on the standard library alone:

- `brynet.packet`: `PacketWriter` and `PacketReader` write and read
  fixed-width integers in little- or big-endian order; `big_packet` returns
  a writer with a 32 KiB capacity.
- `brynet.websocket`: `handshake_response`, `build_frame`, `extract_frame`,
  the `Frame` record and the `FrameType` opcodes.
- `brynet.http_parser`: `HttpParser`, an incremental HTTP/1.x request and
  response parser, with `ParserType` and `HttpParseError`.
- `brynet.promise_receive`: `PromiseReceive` queues "read N bytes" and
  "read until delimiter" steps against incoming data; `memsearch` finds a
  byte string in a buffer.
- `brynet.poller`: `Poller`, a poll-style descriptor set with `CheckType`
  read, write and error checks.
- `brynet.listener`: `ListenThread` accepts TCP connections on a background
  thread and hands each socket to a callback.
- `brynet.ssl_helper`: `SSLHelper` holds a server TLS context loaded from a
  certificate and a private key file.
- `brynet.options`: the `ConnectionOption` and `ConnectOption` records.
- `brynet.errors`: `BrynetError` and its subclasses `ConnectError`,
  `CommonError` and `PacketError`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Packets

```python
from brynet.packet import PacketWriter, PacketReader

writer = PacketWriter(16, big_endian=True, auto_grow=True)
writer.write_uint16(0x1234).write_int32(-7).write_binary(b"hi")

reader = PacketReader(bytes(writer), big_endian=True)
assert reader.read_uint16() == 0x1234
assert reader.read_int32() == -7
assert reader.get_left() == 2
```

Writing past the capacity of a writer that does not grow, and reading or
seeking past the end of a reader, raise `PacketError`.

## WebSocket frames

```python
from brynet.websocket import FrameType, build_frame, extract_frame

frame = build_frame("hello")
decoded = extract_frame(frame)
assert decoded.payload == b"hello"
assert decoded.opcode is FrameType.TEXT_FRAME
assert decoded.frame_size == len(frame)
```

`extract_frame` returns `None` while the buffer holds only part of a frame.
`build_frame(..., masking=True)` masks the payload with a random key.

## HTTP parsing

```python
from brynet.http_parser import HttpParser, ParserType

parser = HttpParser(ParserType.REQUEST)
parser.feed(b"GET /index.html?x=1 HTTP/1.1\r\nHost: example.com\r\n\r\n")
assert parser.is_completed
assert parser.method == "GET"
assert parser.path == "/index.html"
assert parser.query == "x=1"
assert parser.get_value("Host") == "example.com"
```

Data may be fed in any number of pieces; `feed(b"")` marks the end of
input. Invalid input raises `HttpParseError`.

## Staged receiving

```python
from brynet.promise_receive import PromiseReceive

lines = []
receiver = PromiseReceive()
receiver.receive_until(b"\r\n", lambda line: lines.append(line) or False)
consumed = receiver.process(b"GET / HTTP/1.1\r\nHost")
assert consumed == 16
assert lines == [b"GET / HTTP/1.1"]
```

A handle that returns `True` keeps its step at the front of the queue. The
length given to `receive` may be a callable, read each time the step is
tried. `setup_promise_receive(session)` attaches a receiver to any object
with a `set_data_callback` method whose callback gets a `PacketReader`.

## Listening

```python
from brynet.listener import ListenThread

accepted = []
with ListenThread(False, "127.0.0.1", 0, accepted.append) as listener:
    print("listening on port", listener.port)
    ...
```

Process callbacks passed to `ListenThread` run on each accepted socket
before the accept callback receives it.

## What is not included

The package has no event loop, no connection objects that buffer and
dispatch socket data, no worker-thread TCP service, no asynchronous
connector and no ready-made servers or commands. `ListenThread` gives you
plain `socket.socket` objects; reading from them, feeding `PromiseReceive`
or `HttpParser`, and writing replies is left to your own code.