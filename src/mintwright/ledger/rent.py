"""Rent Calculator - minimum balance that keeps an account rent-exempt."""

from __future__ import annotations

import logging

from .rpc import RpcClient

logger = logging.getLogger(__name__)


async def minimum_balance(client: RpcClient, size_bytes: int) -> int:
    """
    Ask the network for the rent-exempt balance of an account.

    Args:
        client: Shared RPC client
        size_bytes: Data length of the account; must match the owning
            program's layout exactly or its initialize instruction fails
            on-chain

    Returns:
        Balance in lamports
    """
    if isinstance(size_bytes, bool) or not isinstance(size_bytes, int):
        raise ValueError(f"Account size must be an integer, got {size_bytes!r}")
    if size_bytes < 0:
        raise ValueError(f"Account size must be non-negative, got {size_bytes}")

    lamports = await client.get_minimum_balance_for_rent_exemption(size_bytes)
    logger.debug("Rent exemption for %d bytes: %d lamports", size_bytes, lamports)
    return lamports
