"""Mutable DID document model and its registry JSON form."""

from __future__ import annotations

import copy
import json
from typing import Any, Callable, Mapping, TypeVar

from didhelper.types import AuthenticationEntry, JsonDict, Proof, PublicKeyEntry, ServiceEntry

Entry = TypeVar("Entry", PublicKeyEntry, AuthenticationEntry, ServiceEntry)

_KNOWN_FIELDS = ("@context", "id", "publicKey", "authentication", "service", "proof")
_MISSING = object()


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _public_key_fields(entry: PublicKeyEntry) -> JsonDict:
    out = JsonDict({"id": entry.id, "type": entry.type})
    if entry.controller is not None:
        out["controller"] = entry.controller
    out["publicKeyHex"] = entry.public_key_hex
    return out


def _public_key_from_value(value: Any) -> PublicKeyEntry:
    if not isinstance(value, Mapping):
        return PublicKeyEntry(id="", type="", public_key_hex="", source=copy.deepcopy(value))
    return PublicKeyEntry(
        id=_text(value.get("id")),
        type=_text(value.get("type")),
        public_key_hex=_text(value.get("publicKeyHex")),
        controller=_optional_text(value.get("controller")),
        source=copy.deepcopy(value),
    )


def _authentication_fields(entry: AuthenticationEntry) -> JsonDict:
    return JsonDict({"publicKey": entry.public_key, "type": entry.type})


def _authentication_from_value(value: Any) -> AuthenticationEntry:
    # A bare string references a key by id.
    if isinstance(value, str):
        return AuthenticationEntry(public_key=value, type="", source=value)
    if not isinstance(value, Mapping):
        return AuthenticationEntry(public_key="", type="", source=copy.deepcopy(value))
    return AuthenticationEntry(
        public_key=_text(value.get("publicKey")),
        type=_text(value.get("type")),
        source=copy.deepcopy(value),
    )


def _service_fields(entry: ServiceEntry) -> JsonDict:
    out = JsonDict({
        "id": entry.id,
        "type": entry.type,
        "serviceEndpoint": entry.service_endpoint,
    })
    if entry.description is not None:
        out["description"] = entry.description
    return out


def _service_from_value(value: Any) -> ServiceEntry:
    if not isinstance(value, Mapping):
        return ServiceEntry(id="", type="", service_endpoint="", source=copy.deepcopy(value))
    return ServiceEntry(
        id=_text(value.get("id")),
        type=_text(value.get("type")),
        service_endpoint=_text(value.get("serviceEndpoint")),
        description=_optional_text(value.get("description")),
        source=copy.deepcopy(value),
    )


def _entry_to_json(
    entry: Entry,
    fields: Callable[[Entry], JsonDict],
    parse: Callable[[Any], Entry],
) -> Any:
    """Serialize an entry, writing back the JSON it was read from.

    Keys, order, nulls and unknown keys of ``entry.source`` are kept; only
    fields changed since the entry was read are rewritten.
    """
    modeled = fields(entry)
    source = entry.source
    if source is None:
        return modeled
    if not isinstance(source, Mapping):
        return copy.deepcopy(source) if entry == parse(source) else modeled

    original = fields(parse(source))
    out = JsonDict(copy.deepcopy(dict(source)))
    for key in original:
        if key not in modeled:
            out.pop(key, None)
    for key, value in modeled.items():
        if original.get(key, _MISSING) != value:
            out[key] = value
    return out


def _proof_from_dict(value: Any) -> Proof | None:
    if not isinstance(value, Mapping):
        return None
    signature = value.get("signature")
    return Proof(
        alg=_text(value.get("alg")),
        signature=signature if isinstance(signature, str) else None,
    )


def _entries(value: Any) -> list[Any]:
    if not isinstance(value, list):
        return []
    return list(value)


class DIDDocument:
    """A DID document as exchanged with the registry.

    Documents are mutated in place: keys, authentication entries and services
    are appended with the ``add_*`` methods and ``ProofEngine.create_proof``
    replaces ``proof``. A document instance must not be shared between
    concurrent signing and verification; callers own that synchronization.

    Serialization always emits ``@context`` (when set), ``id``, ``publicKey``,
    ``authentication``, ``service``, any other top-level fields read from the
    registry, and ``proof`` in that order, so signer and verifier agree on the
    canonical bytes. Entries read from registry JSON are written back as they
    were read, including nulls and fields this model does not know.
    """

    def __init__(
        self,
        id: str,
        *,
        public_key: list[PublicKeyEntry] | None = None,
        authentication: list[AuthenticationEntry] | None = None,
        service: list[ServiceEntry] | None = None,
        proof: Proof | None = None,
        context: Any = None,
        extra: Mapping[str, Any] | None = None,
    ):
        if not id:
            raise ValueError("Document id is required")
        self.id = id
        self.public_key: list[PublicKeyEntry] = []
        self.authentication: list[AuthenticationEntry] = list(authentication or [])
        self.service: list[ServiceEntry] = list(service or [])
        self.proof = proof
        self.context = context
        self.extra = JsonDict(extra or {})
        for entry in public_key or []:
            self.add_public_key(entry)

    def __repr__(self) -> str:
        return f"DIDDocument(id={self.id!r}, keys={len(self.public_key)}, proof={self.proof is not None})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DIDDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def add_public_key(self, entry: PublicKeyEntry) -> None:
        if entry.id and any(existing.id == entry.id for existing in self.public_key):
            raise ValueError(f"Public key {entry.id} already exists in document {self.id}")
        self.public_key.append(entry)

    def add_authentication(self, entry: AuthenticationEntry) -> None:
        self.authentication.append(entry)

    def add_service(self, entry: ServiceEntry) -> None:
        self.service.append(entry)

    def to_dict(self, include_proof: bool = True) -> JsonDict:
        out = JsonDict()
        if self.context is not None:
            out["@context"] = self.context
        out["id"] = self.id
        out["publicKey"] = [
            _entry_to_json(entry, _public_key_fields, _public_key_from_value) for entry in self.public_key
        ]
        out["authentication"] = [
            _entry_to_json(entry, _authentication_fields, _authentication_from_value)
            for entry in self.authentication
        ]
        out["service"] = [_entry_to_json(entry, _service_fields, _service_from_value) for entry in self.service]
        for key, value in self.extra.items():
            if key not in _KNOWN_FIELDS:
                out[key] = copy.deepcopy(value)
        if include_proof and self.proof is not None:
            proof = JsonDict({"alg": self.proof.alg})
            if self.proof.signature is not None:
                proof["signature"] = self.proof.signature
            out["proof"] = proof
        return out

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, value: Mapping[str, Any]) -> DIDDocument:
        if not isinstance(value, Mapping):
            raise ValueError("DID document must be a JSON object")
        document_id = value.get("id")
        if not isinstance(document_id, str) or not document_id:
            raise ValueError("DID document id is missing")

        return cls(
            document_id,
            public_key=[_public_key_from_value(entry) for entry in _entries(value.get("publicKey"))],
            authentication=[
                _authentication_from_value(entry) for entry in _entries(value.get("authentication"))
            ],
            service=[_service_from_value(entry) for entry in _entries(value.get("service"))],
            proof=_proof_from_dict(value.get("proof")),
            context=value.get("@context"),
            extra={key: copy.deepcopy(item) for key, item in value.items() if key not in _KNOWN_FIELDS},
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> DIDDocument:
        try:
            raw = json.loads(text)
        except ValueError as error:
            raise ValueError(f"Failed to parse DID document JSON: {error}")
        return cls.from_dict(raw)
