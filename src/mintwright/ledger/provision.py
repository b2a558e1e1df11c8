"""
Provisioning flows - mints, token accounts, minting and funding.

Each flow is one call to ``send_and_confirm`` and therefore one transaction
with its own fresh lifetime anchor.  Flows that create accounts compute the
rent-exempt balance first and co-sign with the new account's keypair.
"""

from __future__ import annotations

from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from . import programs
from .pipeline import send_and_confirm
from .rent import minimum_balance
from .rpc import RpcClient
from .submit import ConfirmationReceipt


async def create_mint(
    client: RpcClient,
    payer: Keypair,
    decimals: int = 9,
    mint_authority: Optional[Pubkey] = None,
    freeze_authority: Optional[Pubkey] = None,
    mint: Optional[Keypair] = None,
    *,
    program_id: Pubkey = programs.TOKEN_PROGRAM_ID,
    commitment: Optional[str] = None,
    timeout: Optional[float] = None,
) -> tuple[Keypair, ConfirmationReceipt]:
    """
    Create and initialize a mint account in one transaction.

    Args:
        client: Shared RPC client
        payer: Fee payer; funds the rent-exempt balance
        decimals: Token decimals
        mint_authority: Defaults to the payer
        freeze_authority: Optional freeze authority
        mint: Keypair for the new mint (generated if omitted)

    Returns:
        Tuple of (mint_keypair, receipt)
    """
    if not 0 <= decimals <= 255:
        raise ValueError(f"decimals must fit in a u8, got {decimals}")

    mint = mint or Keypair()
    space = programs.get_mint_size()
    lamports = await minimum_balance(client, space)

    instructions = [
        programs.create_account(
            payer=payer.pubkey(),
            new_account=mint.pubkey(),
            lamports=lamports,
            space=space,
            owner=program_id,
        ),
        programs.initialize_mint(
            mint=mint.pubkey(),
            decimals=decimals,
            mint_authority=mint_authority or payer.pubkey(),
            freeze_authority=freeze_authority,
            program_id=program_id,
        ),
    ]
    receipt = await send_and_confirm(
        client, payer, instructions, [mint], commitment=commitment, timeout=timeout
    )
    return mint, receipt


async def create_token_account(
    client: RpcClient,
    payer: Keypair,
    mint: Pubkey,
    owner: Optional[Pubkey] = None,
    account: Optional[Keypair] = None,
    *,
    program_id: Pubkey = programs.TOKEN_PROGRAM_ID,
    commitment: Optional[str] = None,
    timeout: Optional[float] = None,
) -> tuple[Keypair, ConfirmationReceipt]:
    """Create a keypair-addressed token account for ``mint``.

    Returns (account_keypair, receipt).
    """
    account = account or Keypair()
    space = programs.get_token_account_size()
    lamports = await minimum_balance(client, space)

    instructions = [
        programs.create_account(
            payer=payer.pubkey(),
            new_account=account.pubkey(),
            lamports=lamports,
            space=space,
            owner=program_id,
        ),
        programs.initialize_account2(
            account=account.pubkey(),
            mint=mint,
            owner=owner or payer.pubkey(),
            program_id=program_id,
        ),
    ]
    receipt = await send_and_confirm(
        client, payer, instructions, [account], commitment=commitment, timeout=timeout
    )
    return account, receipt


async def create_associated_token_account(
    client: RpcClient,
    payer: Keypair,
    mint: Pubkey,
    owner: Optional[Pubkey] = None,
    *,
    program_id: Pubkey = programs.TOKEN_PROGRAM_ID,
    commitment: Optional[str] = None,
    timeout: Optional[float] = None,
) -> tuple[Pubkey, ConfirmationReceipt]:
    """Create (idempotently) the associated token account of ``owner``.

    Returns (ata_address, receipt).
    """
    owner = owner or payer.pubkey()
    instruction = programs.create_associated_token_account(
        payer=payer.pubkey(),
        owner=owner,
        mint=mint,
        token_program_id=program_id,
    )
    receipt = await send_and_confirm(
        client, payer, [instruction], commitment=commitment, timeout=timeout
    )
    return programs.get_associated_token_address(owner, mint, program_id), receipt


async def mint_tokens(
    client: RpcClient,
    payer: Keypair,
    mint: Pubkey,
    destination: Pubkey,
    amount: int,
    authority: Optional[Keypair] = None,
    *,
    program_id: Pubkey = programs.TOKEN_PROGRAM_ID,
    commitment: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ConfirmationReceipt:
    """Mint ``amount`` base units to ``destination`` (authority defaults to payer)."""
    if amount <= 0:
        raise ValueError(f"Mint amount must be positive, got {amount}")

    authority = authority or payer
    instruction = programs.mint_to(
        mint=mint,
        destination=destination,
        authority=authority.pubkey(),
        amount=amount,
        program_id=program_id,
    )
    return await send_and_confirm(
        client, payer, [instruction], [authority], commitment=commitment, timeout=timeout
    )


async def fund_account(
    client: RpcClient,
    payer: Keypair,
    recipient: Pubkey,
    lamports: int,
    *,
    commitment: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ConfirmationReceipt:
    """Transfer lamports from ``payer`` to ``recipient``."""
    if lamports <= 0:
        raise ValueError(f"Transfer amount must be positive, got {lamports}")

    instruction = programs.transfer(payer.pubkey(), recipient, lamports)
    return await send_and_confirm(
        client, payer, [instruction], commitment=commitment, timeout=timeout
    )
