"""didhelper CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from didhelper.canonical import canonicalize
from didhelper.document import DIDDocument
from didhelper.keys import generate_signing_key
from didhelper.proof import ProofEngine
from didhelper.registry import RegistryClient


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="didhelper", description="DID document helper")
    parser.add_argument("--verbose", "-v", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen_parser = subparsers.add_parser("keygen", help="Generate an Ed25519 signing key")
    keygen_parser.add_argument("--json", action="store_true")

    canonical_parser = subparsers.add_parser("canonicalize", help="Print the signing payload of a document")
    canonical_parser.add_argument("file")

    sign_parser = subparsers.add_parser("sign", help="Attach a proof to a document")
    sign_parser.add_argument("file")
    sign_parser.add_argument("--private-key", required=True)
    sign_parser.add_argument("--alg", default=None)
    sign_parser.add_argument("--output", default=None)

    verify_parser = subparsers.add_parser("verify", help="Verify the proof of a document")
    verify_parser.add_argument("file")
    verify_parser.add_argument("--role", default="sign")
    verify_parser.add_argument("--json", action="store_true")

    load_parser = subparsers.add_parser("load", help="Load a document from the registry")
    load_parser.add_argument("identifier")
    load_parser.add_argument("--vid", action="store_true")
    load_parser.add_argument("--host", default=None)

    return parser


def _read_document(path: str) -> DIDDocument:
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    return DIDDocument.from_json(text)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "keygen":
        pair = generate_signing_key()
        if args.json:
            print(
                json.dumps(
                    {
                        "command": "keygen",
                        "seed": pair.seed_hex,
                        "secret_key": pair.secret_key_hex,
                        "public_key": pair.public_key_hex,
                    },
                    sort_keys=True,
                )
            )
            return 0
        print(f"seed: {pair.seed_hex}")
        print(f"secretKey: {pair.secret_key_hex}")
        print(f"publicKeyHex: {pair.public_key_hex}")
        return 0

    if args.command == "canonicalize":
        print(canonicalize(_read_document(args.file)).decode("utf-8"))
        return 0

    if args.command == "sign":
        document = ProofEngine(alg=args.alg).create_proof(_read_document(args.file), args.private_key)
        output = document.to_json(indent=2)
        if args.output:
            Path(args.output).write_text(output + "\n", encoding="utf-8")
        else:
            print(output)
        return 0

    if args.command == "verify":
        document = _read_document(args.file)
        check = ProofEngine().check_proof(document, args.role)
        if args.json:
            print(
                json.dumps(
                    {
                        "command": "verify",
                        "id": document.id,
                        "valid": check.valid,
                        "key_id": check.key_id,
                        "reason": check.reason,
                    },
                    sort_keys=True,
                )
            )
        else:
            print("valid" if check.valid else f"invalid: {check.reason}")
        return 0 if check.valid else 1

    if args.command == "load":
        client = RegistryClient(args.host)
        document = client.load(args.identifier, key="vid" if args.vid else "did")
        if document is None:
            print(f"Document not found: {args.identifier}", file=sys.stderr)
            return 1
        print(document.to_json(indent=2))
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
