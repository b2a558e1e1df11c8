"""Size Validator - reject oversized transactions before they hit the network."""

from __future__ import annotations

from ..errors import TransactionTooLargeError
from .signer import SignedTransaction

# IPv6 MTU (1280) minus 40-byte IP header and 8-byte fragment header.
PACKET_DATA_SIZE = 1232


def encoded_size(signed: SignedTransaction) -> int:
    return len(signed.to_bytes())


def validate_size(signed: SignedTransaction, limit: int = PACKET_DATA_SIZE) -> int:
    """Return the encoded size, or raise TransactionTooLargeError above ``limit``."""
    size = encoded_size(signed)
    if size > limit:
        raise TransactionTooLargeError(size, limit)
    return size
