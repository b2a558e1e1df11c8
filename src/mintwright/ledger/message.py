"""
Transaction Assembler - Compile fee payer, lifetime anchor and instructions
into one unsigned message.

Assembly is pure: identical inputs produce byte-identical messages.  The wire
layout (header, account table, instructions) is produced by solders.

``TransactionDraft`` is the step-by-step form of ``assemble``: every
``with_*`` call returns a new draft and never touches the old one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Union

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message, MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey

from ..errors import EmptyTransactionError

logger = logging.getLogger(__name__)

LEGACY = "legacy"

Version = Union[int, str]
CompiledMessage = Union[Message, MessageV0]


@dataclass(frozen=True)
class LifetimeAnchor:
    """A recent blockhash plus the last block height at which it is valid."""

    blockhash: Hash
    last_valid_block_height: int

    @classmethod
    def from_strings(cls, blockhash: str, last_valid_block_height: int) -> "LifetimeAnchor":
        return cls(Hash.from_string(blockhash), int(last_valid_block_height))


@dataclass(frozen=True)
class UnsignedMessage:
    version: Version
    fee_payer: Pubkey
    anchor: LifetimeAnchor
    instructions: tuple[Instruction, ...]
    compiled: CompiledMessage = field(repr=False, compare=False)

    @property
    def required_signers(self) -> list[Pubkey]:
        """Addresses that must sign, in signature-slot order."""
        count = self.compiled.header.num_required_signatures
        return list(self.compiled.account_keys[:count])

    def serialize(self) -> bytes:
        """Exact bytes that every signature commits to."""
        return to_bytes_versioned(self.compiled)


def assemble(
    fee_payer: Pubkey,
    anchor: LifetimeAnchor,
    instructions: Sequence[Instruction],
    version: Version = 0,
) -> UnsignedMessage:
    """
    Compile an ordered instruction list into an unsigned message.

    Args:
        fee_payer: Account paying the fee; always the first signer
        anchor: Fresh lifetime anchor for this attempt
        instructions: Instructions in execution order (kept exactly as given)
        version: ``0`` for a versioned message (default) or ``"legacy"``

    Returns:
        UnsignedMessage

    Raises:
        EmptyTransactionError: If ``instructions`` is empty
        ValueError: If ``version`` is not supported
    """
    ordered = tuple(instructions)
    if not ordered:
        raise EmptyTransactionError("Cannot assemble a transaction with no instructions")

    if version == 0:
        compiled: CompiledMessage = MessageV0.try_compile(
            fee_payer, list(ordered), [], anchor.blockhash
        )
    elif version == LEGACY:
        compiled = Message.new_with_blockhash(list(ordered), fee_payer, anchor.blockhash)
    else:
        raise ValueError(f"Unsupported message version: {version!r}")

    logger.debug(
        "Assembled %s message: %d instruction(s), %d account(s), payer %s",
        version,
        len(ordered),
        len(compiled.account_keys),
        fee_payer,
    )
    return UnsignedMessage(
        version=version,
        fee_payer=fee_payer,
        anchor=anchor,
        instructions=ordered,
        compiled=compiled,
    )


@dataclass(frozen=True)
class TransactionDraft:
    fee_payer: Optional[Pubkey] = None
    anchor: Optional[LifetimeAnchor] = None
    instructions: tuple[Instruction, ...] = ()
    version: Version = 0

    def with_fee_payer(self, fee_payer: Pubkey) -> "TransactionDraft":
        return replace(self, fee_payer=fee_payer)

    def with_lifetime(self, anchor: LifetimeAnchor) -> "TransactionDraft":
        return replace(self, anchor=anchor)

    def with_version(self, version: Version) -> "TransactionDraft":
        return replace(self, version=version)

    def append_instructions(self, instructions: Sequence[Instruction]) -> "TransactionDraft":
        return replace(self, instructions=self.instructions + tuple(instructions))

    def compile(self) -> UnsignedMessage:
        if self.fee_payer is None:
            raise ValueError("Draft has no fee payer")
        if self.anchor is None:
            raise ValueError("Draft has no lifetime anchor")
        return assemble(self.fee_payer, self.anchor, self.instructions, self.version)
