"""Faucet - airdrop lamports on test and development networks."""

from __future__ import annotations

import logging
from typing import Optional

from solders.pubkey import Pubkey

from .rpc import RpcClient, normalize_commitment
from .submit import DEFAULT_POLL_INTERVAL, ConfirmationReceipt, confirm

logger = logging.getLogger(__name__)

DEFAULT_AIRDROP_TIMEOUT = 60.0


async def airdrop(
    client: RpcClient,
    address: Pubkey,
    lamports: int,
    commitment: Optional[str] = None,
    *,
    timeout: float = DEFAULT_AIRDROP_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> ConfirmationReceipt:
    """
    Request an airdrop and wait for it to reach ``commitment``.

    Args:
        client: Shared RPC client
        address: Recipient
        lamports: Amount to request
        commitment: Requested level (default: the client's commitment)
        timeout: Deadline for the confirmation wait in seconds

    Returns:
        ConfirmationReceipt of the faucet transaction
    """
    if lamports <= 0:
        raise ValueError(f"Airdrop amount must be positive, got {lamports}")

    commitment = normalize_commitment(commitment or client.commitment)
    signature = await client.request_airdrop(address, lamports, commitment)
    logger.info("Requested airdrop of %d lamports to %s (%s)", lamports, address, signature)
    return await confirm(
        client,
        signature,
        commitment,
        timeout=timeout,
        poll_interval=poll_interval,
    )
