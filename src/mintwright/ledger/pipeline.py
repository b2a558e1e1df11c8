"""
Pipeline - build, sign, validate, submit and confirm one transaction.

Convenience layer combining the stages.  Every call fetches its own lifetime
anchor, so two transactions never share one.  Nothing reaches the network
unless sequencing, assembly, signing and the size check all succeed.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .message import LifetimeAnchor, TransactionDraft, Version
from .programs import Classifier
from .rpc import RpcClient
from .sequencer import sequence
from .signer import SignedTransaction, sign
from .size import PACKET_DATA_SIZE, validate_size
from .submit import DEFAULT_POLL_INTERVAL, ConfirmationReceipt, submit

logger = logging.getLogger(__name__)


def build_signed(
    fee_payer: Keypair,
    anchor: LifetimeAnchor,
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair] = (),
    *,
    version: Version = 0,
    classifiers: Optional[Mapping[Pubkey, Classifier]] = None,
    size_limit: int = PACKET_DATA_SIZE,
) -> SignedTransaction:
    """Run the local stages: sequence, assemble, sign, validate size."""
    ordered = sequence(instructions, classifiers)
    message = (
        TransactionDraft()
        .with_version(version)
        .with_fee_payer(fee_payer.pubkey())
        .with_lifetime(anchor)
        .append_instructions(ordered)
        .compile()
    )
    signed = sign(message, [fee_payer, *signers])
    size = validate_size(signed, size_limit)
    logger.debug("Signed transaction %s (%d bytes)", signed.signature, size)
    return signed


async def build_transaction(
    client: RpcClient,
    fee_payer: Keypair,
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair] = (),
    *,
    version: Version = 0,
    classifiers: Optional[Mapping[Pubkey, Classifier]] = None,
) -> SignedTransaction:
    """Fetch a fresh anchor and run the local stages."""
    anchor = await client.get_latest_blockhash()
    return build_signed(
        fee_payer,
        anchor,
        instructions,
        signers,
        version=version,
        classifiers=classifiers,
    )


async def send_and_confirm(
    client: RpcClient,
    fee_payer: Keypair,
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair] = (),
    *,
    commitment: Optional[str] = None,
    timeout: Optional[float] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    version: Version = 0,
) -> ConfirmationReceipt:
    """
    Build, sign, validate, submit and confirm one transaction.

    Args:
        client: Shared RPC client
        fee_payer: Pays the fee; always signs
        instructions: Instructions in execution order
        signers: Additional key holders (e.g. accounts being created)
        commitment: Requested confirmation level
        timeout: Caller deadline for the confirmation wait
        poll_interval: Seconds between status polls
        version: Message version (0 or "legacy")

    Returns:
        ConfirmationReceipt
    """
    signed = await build_transaction(
        client, fee_payer, instructions, signers, version=version
    )
    return await submit(
        client,
        signed,
        commitment,
        timeout=timeout,
        poll_interval=poll_interval,
    )
