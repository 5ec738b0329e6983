from __future__ import annotations

import base64
import json
from typing import Any, Callable

import pytest
from nacl.signing import SigningKey

from didhelper import (
    AuthenticationEntry,
    DIDDocument,
    PublicKeyEntry,
    ServiceEntry,
    SigningKeyPair,
    decode_hex,
    generate_signing_key,
)

VID = "did:vid:0x2e922f72f4f1a27701dde0627dfd693376ab0d02"
ASYM_KEY_HEX = "0xa651b53d6688935c00d5b1035087eae1f44afcaafbd9805b023c392fa3dd3808"


@pytest.fixture
def signing_pair() -> SigningKeyPair:
    return generate_signing_key()


@pytest.fixture
def build_document() -> Callable[..., DIDDocument]:
    def build(sign_key_hex: str, did: str = VID) -> DIDDocument:
        document = DIDDocument(did)
        document.add_public_key(
            PublicKeyEntry(
                id=f"{did}#asymKey",
                type="Curve25519EncryptionPublicKey",
                public_key_hex=ASYM_KEY_HEX,
            )
        )
        document.add_public_key(
            PublicKeyEntry(
                id=f"{did}#sign",
                type="Secp256k1VerificationKey2018",
                public_key_hex=sign_key_hex,
            )
        )
        document.add_authentication(
            AuthenticationEntry(public_key=f"{did}#sign", type="Secp256k1SignatureAuthentication2018")
        )
        document.add_service(
            ServiceEntry(
                id=f"{did}#application",
                type="verida.App",
                service_endpoint="https://wallet.verida.io",
                description="Verida Wallet",
            )
        )
        return document

    return build


@pytest.fixture
def registry_payload(signing_pair) -> dict[str, Any]:
    """A document as another registry client stores it, signed over ``JSON.stringify`` output."""
    raw: dict[str, Any] = {
        "id": VID,
        "publicKey": [
            {
                "id": f"{VID}#asymKey",
                "type": "Curve25519EncryptionPublicKey",
                "controller": None,
                "publicKeyHex": ASYM_KEY_HEX,
            },
            {
                "id": f"{VID}#sign",
                "type": "Secp256k1VerificationKey2018",
                "publicKeyHex": signing_pair.public_key_hex,
                "created": "2020-04-01T00:00:00.000Z",
            },
            {"id": None, "type": None, "publicKeyHex": None},
        ],
        "authentication": [
            f"{VID}#sign",
            {"publicKey": f"{VID}#sign", "type": "Secp256k1SignatureAuthentication2018"},
        ],
        "service": [
            {
                "id": f"{VID}#application",
                "type": "verida.App",
                "serviceEndpoint": "https://wallet.verida.io",
                "description": None,
                "priority": 1,
            }
        ],
        "updated": "2020-04-01T00:00:00.000Z",
    }
    message = json.dumps(raw, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    signature = SigningKey(decode_hex(signing_pair.seed_hex)).sign(message).signature
    raw["proof"] = {"alg": "ES256K", "signature": base64.b64encode(signature).decode("ascii")}
    return raw
