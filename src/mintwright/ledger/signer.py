"""
Signer - Apply every required signature to an unsigned message.

Required signers come from the compiled message itself: the leading
``num_required_signatures`` keys of its account table.  That covers the fee
payer, every account being created in the same transaction, and any other
account an instruction flags as a signer (e.g. a separate mint authority).

Signature verification uses the ``cryptography`` Ed25519 primitives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.message import to_bytes_versioned
from solders.transaction import VersionedTransaction

from ..errors import MissingSignerError, SignatureVerificationError
from .message import UnsignedMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedTransaction:
    message: UnsignedMessage
    transaction: VersionedTransaction

    @property
    def signature(self) -> Signature:
        """Fee payer's signature; doubles as the transaction id."""
        return self.transaction.signatures[0]

    @property
    def signatures(self) -> list[Signature]:
        return list(self.transaction.signatures)

    def to_bytes(self) -> bytes:
        return bytes(self.transaction)


def sign(message: UnsignedMessage, signers: Iterable[Keypair]) -> SignedTransaction:
    """
    Sign a message with every required key holder.

    Args:
        message: Assembled unsigned message
        signers: Keypairs available for signing; extras are ignored

    Returns:
        SignedTransaction with one signature per required signer, each in
        the slot of its signer

    Raises:
        MissingSignerError: If any required signer has no keypair
    """
    by_address = {kp.pubkey(): kp for kp in signers}
    required = message.required_signers

    missing = [address for address in required if address not in by_address]
    if missing:
        raise MissingSignerError(missing)

    unused = set(by_address) - set(required)
    if unused:
        logger.debug("Ignoring %d signer(s) not required by the message", len(unused))

    payload = message.serialize()
    signatures = [by_address[address].sign_message(payload) for address in required]
    transaction = VersionedTransaction.populate(message.compiled, signatures)
    return SignedTransaction(message=message, transaction=transaction)


def verify_signature(address: Pubkey, signature: Signature, payload: bytes) -> bool:
    public_key = ed25519.Ed25519PublicKey.from_public_bytes(bytes(address))
    try:
        public_key.verify(bytes(signature), payload)
    except InvalidSignature:
        return False
    return True


def signer_addresses(raw: bytes) -> list[Pubkey]:
    """
    Decode a wire transaction and return the addresses that signed it.

    Each signature is checked against the account in its slot.

    Raises:
        SignatureVerificationError: If a signature is missing or invalid
    """
    transaction = VersionedTransaction.from_bytes(raw)
    compiled = transaction.message
    count = compiled.header.num_required_signatures
    addresses = list(compiled.account_keys[:count])
    signatures = list(transaction.signatures)

    if len(signatures) != count:
        raise SignatureVerificationError(
            f"Expected {count} signature(s), found {len(signatures)}"
        )

    payload = to_bytes_versioned(compiled)
    for address, signature in zip(addresses, signatures):
        if not verify_signature(address, signature, payload):
            raise SignatureVerificationError(f"Invalid signature for {address}")

    return addresses
