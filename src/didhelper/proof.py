"""Detached document proofs: creation and verification."""

from __future__ import annotations

import base64
import binascii
import logging
import os

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from didhelper.canonical import canonicalize
from didhelper.document import DIDDocument
from didhelper.errors import KeyMaterialError
from didhelper.keys import DEFAULT_ROLE, Role, decode_hex, get_key, role_token
from didhelper.types import Proof, ProofCheck

logger = logging.getLogger(__name__)

DEFAULT_PROOF_ALG = "ES256K"
DEFAULT_SIGNATURE_SCHEME = "ed25519"


class Ed25519Scheme:
    """NaCl ``sign.detached`` over the canonical bytes."""

    name = "ed25519"
    signature_length = 64
    public_key_length = 32

    def signing_key(self, private_key: bytes) -> SigningKey:
        # 32-byte seed, or the 64-byte NaCl secret key (seed || public key).
        if len(private_key) == 32:
            return SigningKey(private_key)
        if len(private_key) == 64:
            signing_key = SigningKey(private_key[:32])
            if bytes(signing_key.verify_key) != private_key[32:]:
                raise KeyMaterialError("Secret key does not match its embedded public key")
            return signing_key
        raise KeyMaterialError(
            f"Invalid Ed25519 private key length: expected 32 or 64 bytes, got {len(private_key)}",
        )

    def sign(self, private_key: bytes, message: bytes) -> bytes:
        return self.signing_key(private_key).sign(message).signature

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> None:
        VerifyKey(public_key).verify(message, signature)


SIGNATURE_SCHEMES = {
    Ed25519Scheme.name: Ed25519Scheme,
}


def _resolve_alg(explicit: str | None) -> str:
    return explicit or os.environ.get("DIDHELPER_PROOF_ALG") or DEFAULT_PROOF_ALG


def _resolve_scheme(explicit: str | None):
    name = (explicit or os.environ.get("DIDHELPER_SIGNATURE_SCHEME") or DEFAULT_SIGNATURE_SCHEME).lower()
    scheme_cls = SIGNATURE_SCHEMES.get(name)
    if scheme_cls is None:
        raise ValueError(
            f"Unsupported signature scheme '{name}'. Supported: {', '.join(sorted(SIGNATURE_SCHEMES))}",
        )
    return scheme_cls()


def _decode_signature(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"), validate=True)


class ProofEngine:
    """Signs and verifies DID documents.

    ``alg`` is only the label written to ``proof.alg``; the primitive used is
    chosen by ``scheme``. The engine keeps no state between calls.
    """

    def __init__(self, *, alg: str | None = None, scheme: str | None = None):
        self.alg = _resolve_alg(alg)
        self.scheme = _resolve_scheme(scheme)

    def create_proof(self, document: DIDDocument, private_key_hex: str) -> DIDDocument:
        private_key = decode_hex(private_key_hex)
        message = canonicalize(document)
        signature = self.scheme.sign(private_key, message)

        document.proof = Proof(
            alg=self.alg,
            signature=base64.b64encode(signature).decode("ascii"),
        )
        return document

    def check_proof(self, document: DIDDocument, role: Role = DEFAULT_ROLE) -> ProofCheck:
        try:
            result = self._check(document, role)
        except Exception as error:  # noqa: BLE001
            result = ProofCheck(valid=False, reason=f"Proof verification error: {error}")
        if not result.valid:
            logger.debug("Proof check failed for %s: %s", getattr(document, "id", None), result.reason)
        return result

    def verify_proof(self, document: DIDDocument, role: Role = DEFAULT_ROLE) -> bool:
        return self.check_proof(document, role).valid

    def _check(self, document: DIDDocument, role: Role) -> ProofCheck:
        proof = document.proof
        if proof is None:
            return ProofCheck(valid=False, reason="Proof is missing")
        if not proof.signature:
            return ProofCheck(valid=False, reason="Proof signature is missing")

        try:
            signature = _decode_signature(proof.signature)
        except (binascii.Error, ValueError):
            return ProofCheck(valid=False, reason="Proof signature is not valid base64")
        if len(signature) != self.scheme.signature_length:
            return ProofCheck(valid=False, reason="Proof signature has an invalid length")

        entry = get_key(document, role)
        if entry is None:
            return ProofCheck(valid=False, reason=f"No '{role_token(role)}' verification key in document")
        try:
            public_key = decode_hex(entry.public_key_hex)
        except KeyMaterialError as error:
            return ProofCheck(valid=False, reason=str(error), key_id=entry.id)
        if len(public_key) != self.scheme.public_key_length:
            return ProofCheck(valid=False, reason="Verification key has an invalid length", key_id=entry.id)

        try:
            self.scheme.verify(public_key, canonicalize(document), signature)
        except BadSignatureError:
            return ProofCheck(valid=False, reason="Signature does not match document", key_id=entry.id)

        return ProofCheck(valid=True, key_id=entry.id)
