"""
Instruction producers for the System, SPL Token and Associated Token Account
programs.

Each producer returns a plain ``solders.instruction.Instruction``.  Each
program also gets a role classifier that tells the sequencer which account an
instruction creates and which accounts it needs to already exist.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Callable, Optional

from solders import system_program
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, TransferParams

SYSTEM_PROGRAM_ID = system_program.ID
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

# Account layouts of the token program (base, no extensions)
MINT_SIZE = 82
TOKEN_ACCOUNT_SIZE = 165

U64_MAX = 2**64 - 1

# System program instruction tags (u32 little-endian)
_SYS_CREATE_ACCOUNT = 0

# Token program instruction tags (u8)
_TOKEN_INITIALIZE_MINT = 0
_TOKEN_INITIALIZE_ACCOUNT = 1
_TOKEN_MINT_TO = 7
_TOKEN_INITIALIZE_ACCOUNT2 = 16
_TOKEN_INITIALIZE_ACCOUNT3 = 18
_TOKEN_INITIALIZE_MINT2 = 20

# Associated token account instruction tags (empty data means Create)
_ATA_CREATE = 0
_ATA_CREATE_IDEMPOTENT = 1


def check_u64(name: str, value: int) -> int:
    """Raise ValueError unless ``value`` fits an on-chain u64 field."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U64_MAX:
        raise ValueError(f"{name} must be an integer in [0, {U64_MAX}], got {value!r}")
    return value


def get_mint_size() -> int:
    return MINT_SIZE


def get_token_account_size() -> int:
    return TOKEN_ACCOUNT_SIZE


# ---------------------------------------------------------------------------
# System program
# ---------------------------------------------------------------------------

def create_account(
    payer: Pubkey,
    new_account: Pubkey,
    lamports: int,
    space: int,
    owner: Pubkey,
) -> Instruction:
    """Allocate ``space`` bytes for ``new_account``, fund it and assign ``owner``.

    Both ``payer`` and ``new_account`` must sign.
    """
    check_u64("lamports", lamports)
    check_u64("space", space)
    return system_program.create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=new_account,
            lamports=lamports,
            space=space,
            owner=owner,
        )
    )


def transfer(source: Pubkey, destination: Pubkey, lamports: int) -> Instruction:
    check_u64("lamports", lamports)
    return system_program.transfer(
        TransferParams(from_pubkey=source, to_pubkey=destination, lamports=lamports)
    )


# ---------------------------------------------------------------------------
# Token program
# ---------------------------------------------------------------------------

def _pack_optional_pubkey(value: Optional[Pubkey]) -> bytes:
    if value is None:
        return bytes([0])
    return bytes([1]) + bytes(value)


def initialize_mint(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Optional[Pubkey] = None,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """InitializeMint (reads the rent sysvar account)."""
    data = (
        bytes([_TOKEN_INITIALIZE_MINT, decimals])
        + bytes(mint_authority)
        + _pack_optional_pubkey(freeze_authority)
    )
    return Instruction(
        program_id=program_id,
        data=data,
        accounts=[
            AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
            AccountMeta(pubkey=RENT_SYSVAR_ID, is_signer=False, is_writable=False),
        ],
    )


def initialize_mint2(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Optional[Pubkey] = None,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """InitializeMint2 (no rent sysvar account)."""
    data = (
        bytes([_TOKEN_INITIALIZE_MINT2, decimals])
        + bytes(mint_authority)
        + _pack_optional_pubkey(freeze_authority)
    )
    return Instruction(
        program_id=program_id,
        data=data,
        accounts=[AccountMeta(pubkey=mint, is_signer=False, is_writable=True)],
    )


def initialize_account(
    account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    return Instruction(
        program_id=program_id,
        data=bytes([_TOKEN_INITIALIZE_ACCOUNT]),
        accounts=[
            AccountMeta(pubkey=account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
            AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
            AccountMeta(pubkey=RENT_SYSVAR_ID, is_signer=False, is_writable=False),
        ],
    )


def initialize_account2(
    account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """InitializeAccount2: owner travels in the data instead of the accounts."""
    return Instruction(
        program_id=program_id,
        data=bytes([_TOKEN_INITIALIZE_ACCOUNT2]) + bytes(owner),
        accounts=[
            AccountMeta(pubkey=account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
            AccountMeta(pubkey=RENT_SYSVAR_ID, is_signer=False, is_writable=False),
        ],
    )


def initialize_account3(
    account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    return Instruction(
        program_id=program_id,
        data=bytes([_TOKEN_INITIALIZE_ACCOUNT3]) + bytes(owner),
        accounts=[
            AccountMeta(pubkey=account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        ],
    )


def mint_to(
    mint: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    amount: int,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    check_u64("amount", amount)
    return Instruction(
        program_id=program_id,
        data=bytes([_TOKEN_MINT_TO]) + struct.pack("<Q", amount),
        accounts=[
            AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
            AccountMeta(pubkey=destination, is_signer=False, is_writable=True),
            AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
        ],
    )


# ---------------------------------------------------------------------------
# Associated token account program
# ---------------------------------------------------------------------------

def get_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program_id), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def create_associated_token_account(
    payer: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
    idempotent: bool = True,
) -> Instruction:
    ata = get_associated_token_address(owner, mint, token_program_id)
    tag = _ATA_CREATE_IDEMPOTENT if idempotent else _ATA_CREATE
    return Instruction(
        program_id=ASSOCIATED_TOKEN_PROGRAM_ID,
        data=bytes([tag]),
        accounts=[
            AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=ata, is_signer=False, is_writable=True),
            AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=token_program_id, is_signer=False, is_writable=False),
        ],
    )


# ---------------------------------------------------------------------------
# Role classifiers (used by the sequencer)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InstructionRole:
    """Accounts an instruction brings into existence / needs to exist."""

    creates: frozenset[Pubkey] = field(default_factory=frozenset)
    requires: frozenset[Pubkey] = field(default_factory=frozenset)


NO_ROLE = InstructionRole()

Classifier = Callable[[Instruction], InstructionRole]


def _account(ix: Instruction, index: int) -> Optional[Pubkey]:
    if index < len(ix.accounts):
        return ix.accounts[index].pubkey
    return None


def _keys(*values: Optional[Pubkey]) -> frozenset[Pubkey]:
    return frozenset(v for v in values if v is not None)


def classify_system(ix: Instruction) -> InstructionRole:
    data = bytes(ix.data)
    if len(data) >= 4 and struct.unpack_from("<I", data)[0] == _SYS_CREATE_ACCOUNT:
        return InstructionRole(creates=_keys(_account(ix, 1)))
    return NO_ROLE


def classify_token(ix: Instruction) -> InstructionRole:
    data = bytes(ix.data)
    if not data:
        return NO_ROLE
    tag = data[0]
    if tag in (_TOKEN_INITIALIZE_MINT, _TOKEN_INITIALIZE_MINT2):
        return InstructionRole(requires=_keys(_account(ix, 0)))
    if tag in (
        _TOKEN_INITIALIZE_ACCOUNT,
        _TOKEN_INITIALIZE_ACCOUNT2,
        _TOKEN_INITIALIZE_ACCOUNT3,
        _TOKEN_MINT_TO,
    ):
        return InstructionRole(requires=_keys(_account(ix, 0), _account(ix, 1)))
    return NO_ROLE


def classify_associated_token(ix: Instruction) -> InstructionRole:
    data = bytes(ix.data)
    if data and data[0] not in (_ATA_CREATE, _ATA_CREATE_IDEMPOTENT):
        return NO_ROLE
    return InstructionRole(
        creates=_keys(_account(ix, 1)),
        requires=_keys(_account(ix, 3)),
    )


DEFAULT_CLASSIFIERS: dict[Pubkey, Classifier] = {
    SYSTEM_PROGRAM_ID: classify_system,
    TOKEN_PROGRAM_ID: classify_token,
    TOKEN_2022_PROGRAM_ID: classify_token,
    ASSOCIATED_TOKEN_PROGRAM_ID: classify_associated_token,
}
