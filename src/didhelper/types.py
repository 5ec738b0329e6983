"""Shared datatypes for the didhelper SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class KeyPurpose(str, Enum):
    SIGN = "sign"
    AUTH = "auth"
    ASYM = "asym"


@dataclass(frozen=True)
class PublicKeyEntry:
    id: str
    type: str
    public_key_hex: str
    controller: str | None = None
    # Client-side only, never serialized.
    purpose: KeyPurpose | None = None
    # Registry JSON the entry was read from, written back unchanged.
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class AuthenticationEntry:
    public_key: str
    type: str
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ServiceEntry:
    id: str
    type: str
    service_endpoint: str
    description: str | None = None
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Proof:
    alg: str
    signature: str | None


@dataclass(frozen=True)
class ProofCheck:
    valid: bool
    reason: str | None = None
    key_id: str | None = None


@dataclass(frozen=True)
class SigningKeyPair:
    seed_hex: str
    secret_key_hex: str
    public_key_hex: str


@dataclass(frozen=True)
class WalletDID:
    chain: str
    address: str


class JsonDict(dict[str, Any]):
    """Typed alias for JSON dictionaries used in internal serialization."""
