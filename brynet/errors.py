"""Exception hierarchy used throughout the package."""


class BrynetError(Exception):
    """Base class of every error raised by this package."""


class ConnectError(BrynetError):
    """Raised when an outgoing connection cannot be requested or made."""


class CommonError(BrynetError):
    """Raised on misuse of services, listeners and builders."""


class PacketError(BrynetError, IndexError):
    """Raised when a packet read, write or seek goes past the buffer bounds."""