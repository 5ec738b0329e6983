"""HTTP client for the DID registry."""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlencode

from didhelper.document import DIDDocument
from didhelper.errors import (
    ProofRequiredError,
    RegistryHTTPError,
    RegistryProtocolError,
    TransportError,
)
from didhelper.proof import ProofEngine

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "http://localhost:5001/"
DEFAULT_TIMEOUT_SECONDS = 30.0

LOAD_KEYS = ("did", "vid")

Fetcher = Callable[[str, str, dict[str, str], Optional[bytes]], Any]


def _resolve_registry_url(explicit: str | None) -> str:
    return explicit or os.environ.get("DIDHELPER_REGISTRY_URL") or DEFAULT_REGISTRY_URL


def _resolve_timeout(explicit: float | None) -> float:
    if explicit is not None:
        return explicit
    raw = os.environ.get("DIDHELPER_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"DIDHELPER_HTTP_TIMEOUT must be a number of seconds, got {raw!r}")


def _resolve_url(host: str, path: str, query: Mapping[str, str] | None = None) -> str:
    url = f"{host.rstrip('/')}/{path.lstrip('/')}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def _parse_json(raw: bytes, url: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as error:
        raise TransportError(f"Registry response from {url} is not valid JSON: {error}")


def urllib_fetcher(timeout: float) -> Fetcher:
    """Build the default fetcher: JSON over ``urllib.request``."""

    def fetch(url: str, method: str, headers: dict[str, str], body: bytes | None) -> Any:
        request = urllib.request.Request(url, method=method, headers=headers, data=body)
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                return _parse_json(response.read(), url)
        except urllib.error.HTTPError as error:
            try:
                payload = _parse_json(error.read(), url)
            except TransportError:
                payload = None
            raise RegistryHTTPError(error.code, payload, url)
        except (urllib.error.URLError, OSError) as error:
            raise TransportError(f"Registry request to {url} failed: {error}")

    return fetch


def _fail_message(payload: Any) -> str | None:
    if isinstance(payload, Mapping) and payload.get("status") == "fail":
        return str(payload.get("message") or "Registry rejected the request")
    return None


def _data_field(payload: Any, field: str) -> Any:
    if not isinstance(payload, Mapping):
        raise ValueError("Registry response is not a JSON object")
    data = payload.get("data")
    if not isinstance(data, Mapping) or field not in data:
        raise ValueError(f"Registry response is missing data.{field}")
    return data[field]


class RegistryClient:
    """Load and commit DID documents against a registry host.

    Every call is an independent round trip. Nothing is retried; transport
    failures surface to the caller, except for the lookup methods, which
    return ``None`` instead.
    """

    def __init__(
        self,
        host: str | None = None,
        *,
        fetcher: Fetcher | None = None,
        timeout: float | None = None,
        proof_engine: ProofEngine | None = None,
    ):
        self.host = _resolve_registry_url(host)
        self.timeout = _resolve_timeout(timeout)
        self._fetcher = fetcher or urllib_fetcher(self.timeout)
        self._proof_engine = proof_engine or ProofEngine()

    def _get(self, path: str, query: Mapping[str, str], host: str | None) -> Any:
        url = _resolve_url(host or self.host, path, query)
        return self._fetcher(url, "GET", {"accept": "application/json"}, None)

    def _post(self, path: str, params: Mapping[str, Any], host: str | None) -> Any:
        url = _resolve_url(host or self.host, path)
        body = json.dumps({"params": params}).encode("utf-8")
        headers = {"accept": "application/json", "content-type": "application/json"}
        try:
            payload = self._fetcher(url, "POST", headers, body)
        except RegistryHTTPError as error:
            message = _fail_message(error.payload)
            if message is not None:
                raise RegistryProtocolError(message) from error
            raise

        message = _fail_message(payload)
        if message is not None:
            raise RegistryProtocolError(message)
        return payload

    def _lookup(self, path: str, query: Mapping[str, str], field: str, host: str | None) -> Any:
        try:
            payload = self._get(path, query, host)
            return _data_field(payload, field)
        except Exception as error:  # noqa: BLE001
            logger.warning("Registry lookup %s %s failed: %s", path, dict(query), error)
            return None

    def load(self, identifier: str, host: str | None = None, key: str = "did") -> DIDDocument | None:
        if key not in LOAD_KEYS:
            raise ValueError(f"Unsupported load key '{key}'. Use one of: {', '.join(LOAD_KEYS)}")
        return self._load_document("load", {key: identifier}, host)

    def load_for_app(self, did: str, app_name: str, host: str | None = None) -> DIDDocument | None:
        return self._load_document("loadForApp", {"did": did, "appName": app_name}, host)

    def _load_document(self, path: str, query: Mapping[str, str], host: str | None) -> DIDDocument | None:
        raw = self._lookup(path, query, "document", host)
        if raw is None:
            return None
        try:
            return DIDDocument.from_dict(raw)
        except ValueError as error:
            logger.warning("Registry returned an unusable document for %s: %s", dict(query), error)
            return None

    def commit(
        self,
        owner_did: str,
        document: DIDDocument,
        signature: str,
        host: str | None = None,
    ) -> bool:
        """Store ``document`` in the registry on behalf of ``owner_did``.

        ``signature`` is the owner's wallet signature, checked by the registry
        independently of the document proof. The document proof is checked
        here first and a missing or invalid proof raises
        :class:`~didhelper.errors.ProofRequiredError` without contacting the
        registry.
        """
        check = self._proof_engine.check_proof(document)
        if not check.valid:
            raise ProofRequiredError(check.reason or "Proof is invalid")

        self._post(
            "commit",
            {"document": document.to_dict(), "did": owner_did, "signature": signature},
            host,
        )
        logger.info("Committed DID document %s for %s", document.id, owner_did)
        return True

    def commit_username(self, username: str, did: str, signature: str, host: str | None = None) -> bool:
        self._post("username/commit", {"username": username, "did": did, "signature": signature}, host)
        logger.info("Committed username %s for %s", username, did)
        return True

    def get_did_from_username(self, username: str, host: str | None = None) -> str | None:
        did = self._lookup("username/getDid", {"username": username}, "did", host)
        return str(did) if did else None

    def get_did_from_vid(self, vid: str, host: str | None = None) -> str | None:
        did = self._lookup("getDidFromVid", {"vid": vid}, "did", host)
        return str(did) if did else None
