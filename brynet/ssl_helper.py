"""Holds a server-side TLS context loaded from certificate and key files."""

from __future__ import annotations

import ssl
from typing import Optional


class SSLHelper:
    """Owns one TLS server context; it may be initialised once until destroyed."""

    def __init__(self) -> None:
        self._context: Optional[ssl.SSLContext] = None

    @property
    def context(self) -> Optional[ssl.SSLContext]:
        return self._context

    def init_ssl(self, certificate: str, private_key: str) -> bool:
        """Load the certificate chain and private key; return whether it worked."""
        if self._context is not None:
            return False
        if not certificate or not private_key:
            return False
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.verify_flags = ssl.VERIFY_DEFAULT
        try:
            context.load_cert_chain(certificate, private_key)
        except (OSError, ssl.SSLError):
            return False
        try:
            context.load_verify_locations(certificate)
        except (OSError, ssl.SSLError):
            pass
        self._context = context
        return True

    def destroy_ssl(self) -> None:
        self._context = None