"""didhelper: DID document proofs and a client for the DID registry."""

from didhelper.canonical import canonicalize
from didhelper.document import DIDDocument
from didhelper.errors import (
    DIDHelperError,
    KeyMaterialError,
    ProofRequiredError,
    RegistryHTTPError,
    RegistryProtocolError,
    TransportError,
)
from didhelper.keys import decode_hex, generate_signing_key, get_key, get_key_bytes, strip_hex_prefix
from didhelper.proof import ProofEngine
from didhelper.registry import RegistryClient
from didhelper.types import (
    AuthenticationEntry,
    KeyPurpose,
    Proof,
    ProofCheck,
    PublicKeyEntry,
    ServiceEntry,
    SigningKeyPair,
    WalletDID,
)
from didhelper.wallet import WalletSignatureVerifier, parse_wallet_did

__all__ = [
    "AuthenticationEntry",
    "DIDDocument",
    "DIDHelperError",
    "KeyMaterialError",
    "KeyPurpose",
    "Proof",
    "ProofCheck",
    "ProofEngine",
    "ProofRequiredError",
    "PublicKeyEntry",
    "RegistryClient",
    "RegistryHTTPError",
    "RegistryProtocolError",
    "ServiceEntry",
    "SigningKeyPair",
    "TransportError",
    "WalletDID",
    "WalletSignatureVerifier",
    "canonicalize",
    "decode_hex",
    "generate_signing_key",
    "get_key",
    "get_key_bytes",
    "parse_wallet_did",
    "strip_hex_prefix",
]

__version__ = "0.1.0"
