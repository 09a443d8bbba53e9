import pytest

from brynet.packet import PacketReader
from brynet.promise_receive import PromiseReceive, memsearch, setup_promise_receive


def test_memsearch_finds_first_occurrence():
    assert memsearch(b"abc\r\ndef\r\n", b"\r\n") == 3


def test_memsearch_missing_and_too_long():
    assert memsearch(b"abc", b"xyz") is None
    assert memsearch(b"ab", b"abc") is None


def test_memsearch_empty_needle():
    assert memsearch(b"abc", b"") == 0


def test_receive_until_rejects_empty_delimiter():
    with pytest.raises(ValueError):
        PromiseReceive().receive_until("", lambda chunk: False)


def test_receive_rejects_negative_length():
    with pytest.raises(ValueError):
        PromiseReceive().receive(-1, lambda chunk: False)


def test_chaining_returns_same_receiver():
    receiver = PromiseReceive()
    assert receiver.receive(1, lambda c: False).receive_until("x", lambda c: False) is receiver
    assert len(receiver) == 2


def test_receive_until_line():
    lines = []
    receiver = PromiseReceive().receive_until("\r\n", lambda c: lines.append(c) or False)
    line = b"GET / HTTP/1.1\r\n"
    assert receiver.process(line + b"rest") == len(line)
    assert lines == [b"GET / HTTP/1.1"]
    assert len(receiver) == 0


def test_incomplete_data_is_not_consumed():
    calls = []
    receiver = PromiseReceive().receive_until(b"\r\n", lambda c: calls.append(c) or False)
    assert receiver.process(b"abc") == 0
    assert calls == []
    assert len(receiver) == 1


def test_fixed_length_receive():
    chunks = []
    receiver = PromiseReceive().receive(4, lambda c: chunks.append(c) or False)
    assert receiver.process(b"abcdef") == len(b"abcd")
    assert chunks == [b"abcd"]


def test_fixed_length_waits_for_enough_data():
    chunks = []
    receiver = PromiseReceive().receive(10, lambda c: chunks.append(c) or False)
    assert receiver.process(b"short") == 0
    assert chunks == []
    assert len(receiver) == 1


def test_handle_returning_true_repeats_step():
    chunks = []

    def handle(chunk):
        chunks.append(chunk)
        return len(chunk) > 0

    receiver = PromiseReceive().receive_until("\r\n", handle)
    data = b"a\r\nb\r\n\r\n"
    assert receiver.process(data) == len(data)
    assert chunks == [b"a", b"b", b""]
    assert len(receiver) == 0


def test_zero_length_step_is_not_repeated():
    calls = []
    receiver = PromiseReceive().receive(0, lambda c: calls.append(c) or True)
    assert receiver.process(b"xyz") == 0
    assert calls == [b""]
    assert len(receiver) == 0


def test_length_decided_by_earlier_step():
    state = {"length": 0}
    bodies = []

    def header(chunk):
        if chunk:
            name, _, value = chunk.partition(b": ")
            if name == b"Content-Length":
                state["length"] = int(value)
            return True
        return False

    receiver = (
        PromiseReceive()
        .receive_until("\r\n", lambda c: False)
        .receive_until("\r\n", header)
        .receive(lambda: state["length"], lambda c: bodies.append(c) or False)
    )
    request = b"POST / HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"
    assert receiver.process(request) == len(request)
    assert bodies == [b"hello"]


class _FakeSession:
    def __init__(self):
        self.callback = None

    def set_data_callback(self, callback):
        self.callback = callback


def test_setup_promise_receive_advances_reader():
    session = _FakeSession()
    lines = []
    receiver = setup_promise_receive(session)
    receiver.receive_until("\n", lambda c: lines.append(c) or False)
    reader = PacketReader(b"hello\nworld")
    session.callback(reader)
    assert lines == [b"hello"]
    assert reader.pos == len(b"hello\n")
    assert reader.saved_pos == reader.pos