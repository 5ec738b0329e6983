"""Error types raised by the didhelper SDK."""

from __future__ import annotations

from typing import Any


class DIDHelperError(Exception):
    """Base class for every error raised by didhelper."""


class KeyMaterialError(DIDHelperError, ValueError):
    """Hex key material could not be decoded or has the wrong length."""


class ProofRequiredError(DIDHelperError):
    """A document was submitted for commit without a valid proof."""

    def __init__(self, reason: str):
        super().__init__(f"Document proof is missing or invalid: {reason}")
        self.reason = reason


class TransportError(DIDHelperError):
    """The registry could not be reached or returned an unreadable response."""


class RegistryHTTPError(TransportError):
    def __init__(self, status: int, payload: Any, url: str):
        super().__init__(f"Registry request to {url} failed with HTTP {status}")
        self.status = status
        self.payload = payload
        self.url = url


class RegistryProtocolError(DIDHelperError):
    """The registry answered with an explicit ``status: fail``."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
