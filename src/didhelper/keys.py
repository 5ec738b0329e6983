"""Hex key handling and verification key lookup."""

from __future__ import annotations

from typing import Union

from nacl.signing import SigningKey

from didhelper.document import DIDDocument
from didhelper.errors import KeyMaterialError
from didhelper.types import KeyPurpose, PublicKeyEntry, SigningKeyPair

Role = Union[KeyPurpose, str]

DEFAULT_ROLE = KeyPurpose.SIGN


def strip_hex_prefix(value: str) -> str:
    value = value.strip()
    if value[:2].lower() == "0x":
        return value[2:]
    return value


def decode_hex(value: str) -> bytes:
    """Decode hex key material, with or without a leading ``0x``."""
    if not isinstance(value, str):
        raise KeyMaterialError("Key material must be a hex string")
    try:
        return bytes.fromhex(strip_hex_prefix(value))
    except ValueError as error:
        raise KeyMaterialError(f"Invalid hex key material: {error}")


def role_token(role: Role) -> str:
    return role.value if isinstance(role, KeyPurpose) else str(role)


def get_key(document: DIDDocument, role: Role = DEFAULT_ROLE) -> PublicKeyEntry | None:
    """Find the key serving ``role``.

    A key whose ``purpose`` matches wins. Otherwise the first key whose id
    contains the role token is returned, so ``did:x#signature-auth`` answers
    to both ``sign`` and ``auth``.
    """
    token = role_token(role)
    for entry in document.public_key:
        if entry.purpose is not None and entry.purpose.value == token:
            return entry
    for entry in document.public_key:
        if token in entry.id:
            return entry
    return None


def get_key_bytes(document: DIDDocument, role: Role = DEFAULT_ROLE) -> bytes | None:
    entry = get_key(document, role)
    if entry is None:
        return None
    return decode_hex(entry.public_key_hex)


def generate_signing_key() -> SigningKeyPair:
    signing_key = SigningKey.generate()
    seed = bytes(signing_key)
    public_key = bytes(signing_key.verify_key)
    return SigningKeyPair(
        seed_hex="0x" + seed.hex(),
        secret_key_hex="0x" + (seed + public_key).hex(),
        public_key_hex="0x" + public_key.hex(),
    )
