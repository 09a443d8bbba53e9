"""TCP networking building blocks: packets, WebSocket frames, HTTP parsing, polling and listening."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "http_parser",
    "listener",
    "options",
    "packet",
    "poller",
    "promise_receive",
    "ssl_helper",
    "websocket",
]