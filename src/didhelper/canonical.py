"""Canonical signing payload for DID documents."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Union

from didhelper.document import DIDDocument

DocumentInput = Union[DIDDocument, Mapping[str, Any]]

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _escape_surrogate(match: re.Match[str]) -> str:
    return "\\u%04x" % ord(match.group())


def canonicalize(document: DocumentInput) -> bytes:
    """Return the bytes a document proof is computed over.

    The proof is always left out and the remaining fields are written in the
    document's fixed field order as compact JSON, matching ``JSON.stringify``.
    Plain mappings are normalized through :class:`DIDDocument` first. Unpaired
    surrogates cannot be encoded as UTF-8 and are written as lowercase
    ``\\uXXXX`` escapes, as ``JSON.stringify`` does.
    """
    if not isinstance(document, DIDDocument):
        document = DIDDocument.from_dict(document)

    payload = document.to_dict(include_proof=False)
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return _LONE_SURROGATE.sub(_escape_surrogate, text).encode("utf-8")
