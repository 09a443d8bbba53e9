"""A thread that accepts incoming TCP connections on one address."""

from __future__ import annotations

import socket
import sys
import threading
from typing import Callable, Iterable, Optional

from brynet.errors import CommonError

AcceptCallback = Callable[[socket.socket], None]
SocketProcessCallback = Callable[[socket.socket], None]

LISTEN_BACKLOG = 512
_ACCEPT_POLL_SECONDS = 0.5
_WAKEUP_TIMEOUT_SECONDS = 2.0


def _open_listen_socket(is_ipv6: bool, ip: str, port: int, reuse_port: bool) -> socket.socket:
    family = socket.AF_INET6 if is_ipv6 else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        if sys.platform != "win32":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if reuse_port and hasattr(socket, "SO_REUSEPORT"):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        sock.bind((ip, port))
        sock.listen(LISTEN_BACKLOG)
    except BaseException:
        sock.close()
        raise
    sock.settimeout(_ACCEPT_POLL_SECONDS)
    return sock


def _accept_loop(sock: socket.socket, running: list, callback: AcceptCallback,
                 process_callbacks: list) -> None:
    try:
        while running[0]:
            try:
                client, _ = sock.accept()
            except socket.timeout:
                continue
            except InterruptedError as exc:
                print(f"accept EINTR exception:{exc}", file=sys.stderr)
                continue
            except OSError as exc:
                if not running[0]:
                    break
                print(f"accept exception:{exc}", file=sys.stderr)
                continue

            if not running[0]:
                client.close()
                break
            for process in process_callbacks:
                process(client)
            callback(client)
    finally:
        sock.close()


class ListenThread:
    """Listens on an address and hands every accepted socket to a callback.

    The process callbacks run on each accepted socket, in order, before the
    accept callback gets it.
    """

    def __init__(self, is_ipv6: bool, ip: str, port: int, callback: Optional[AcceptCallback],
                 process_callbacks: Iterable[SocketProcessCallback] = (),
                 reuse_port: bool = False):
        if callback is None:
            raise CommonError("accept callback is nullptr")
        self._is_ipv6 = is_ipv6
        self._ip = ip
        self._port = port
        self._callback = callback
        self._process_callbacks = list(process_callbacks)
        self._reuse_port = reuse_port

        self._guard = threading.Lock()
        self._running = [False]
        self._thread: Optional[threading.Thread] = None
        self._bound_port = port

    @property
    def ip(self) -> str:
        return self._ip

    @property
    def port(self) -> int:
        """The port being listened on; the chosen one when 0 was asked for."""
        return self._bound_port

    @property
    def is_listening(self) -> bool:
        return self._thread is not None

    def start_listen(self) -> None:
        with self._guard:
            if self._thread is not None:
                raise CommonError("listen thread already started")
            try:
                sock = _open_listen_socket(self._is_ipv6, self._ip, self._port, self._reuse_port)
            except OSError as exc:
                raise CommonError(f"listen error of:{exc.errno}") from exc

            self._bound_port = sock.getsockname()[1]
            running = [True]
            self._running = running
            self._thread = threading.Thread(
                target=_accept_loop,
                args=(sock, running, self._callback, list(self._process_callbacks)),
                daemon=True,
            )
            self._thread.start()

    def stop_listen(self) -> None:
        with self._guard:
            if self._thread is None:
                return
            self._running[0] = False

            host = self._ip
            if host == "0.0.0.0":
                host = "127.0.0.1"
            elif host == "::":
                host = "::1"
            # A connection wakes the accept call so the thread sees the flag at once.
            try:
                with socket.create_connection((host, self._bound_port),
                                              timeout=_WAKEUP_TIMEOUT_SECONDS):
                    pass
            except OSError:
                pass

            if self._thread is not threading.current_thread():
                self._thread.join()
            self._thread = None

    def __enter__(self) -> ListenThread:
        self.start_listen()
        return self

    def __exit__(self, *exc) -> None:
        self.stop_listen()