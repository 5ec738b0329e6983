"""Wallet signatures for blockchain-linked DIDs (``did:<chain>:0x<address>``)."""

from __future__ import annotations

import logging
import re
from typing import Callable, Mapping

from eth_account import Account
from eth_account.messages import encode_defunct

from didhelper.types import WalletDID

logger = logging.getLogger(__name__)

AddressRecoverer = Callable[[str, str], str]

_WALLET_DID_PATTERN = re.compile(r"^did:([a-z0-9]+):(0x[0-9a-fA-F]{40})$")


def parse_wallet_did(did: str) -> WalletDID | None:
    match = _WALLET_DID_PATTERN.match(did.strip()) if isinstance(did, str) else None
    if not match:
        return None
    chain, address = match.groups()
    return WalletDID(chain=chain, address=address)


def recover_personal_sign_address(message: str, signature: str) -> str:
    """Recover the signer of an EIP-191 ``personal_sign`` message."""
    return Account.recover_message(encode_defunct(text=message), signature=signature)


DEFAULT_RECOVERERS: Mapping[str, AddressRecoverer] = {
    "ethr": recover_personal_sign_address,
}


class WalletSignatureVerifier:
    """Checks that a wallet message was signed by the address inside a DID.

    ``recoverers`` maps a chain name to a function returning the signing
    address for ``(message, signature)``. Chains without a recoverer never
    verify.
    """

    def __init__(self, recoverers: Mapping[str, AddressRecoverer] | None = None):
        self._recoverers = dict(DEFAULT_RECOVERERS if recoverers is None else recoverers)

    @property
    def chains(self) -> list[str]:
        return sorted(self._recoverers)

    def verify_signed_message(self, did: str, message: str, signature: str) -> bool:
        wallet = parse_wallet_did(did)
        if wallet is None:
            logger.debug("Not a wallet DID: %s", did)
            return False

        recover = self._recoverers.get(wallet.chain)
        if recover is None:
            logger.debug("No signature recovery registered for chain %s", wallet.chain)
            return False

        try:
            recovered = recover(message, signature)
        except Exception as error:  # noqa: BLE001
            logger.debug("Signature recovery failed for %s: %s", did, error)
            return False

        return isinstance(recovered, str) and recovered.lower() == wallet.address.lower()
