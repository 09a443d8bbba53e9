"""Option records for accepted connections and outgoing connects."""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class ConnectionOption:
    """How a socket is turned into a managed connection."""

    enter_callbacks: list[Callable[[Any], None]] = field(default_factory=list)
    enter_failed_callback: Optional[Callable[[], None]] = None
    ssl_helper: Any = None
    use_ssl: bool = False
    force_same_thread_loop: bool = False
    max_recv_buffer_size: int = 128


@dataclass
class ConnectOption:
    """Target and callbacks of one asynchronous connect; timeout is in seconds."""

    ip: str = ""
    port: int = 0
    timeout: float = 10.0
    completed_callback: Optional[Callable[[socket.socket], None]] = None
    failed_callback: Optional[Callable[[], None]] = None
    process_callbacks: list[Callable[[socket.socket], None]] = field(default_factory=list)