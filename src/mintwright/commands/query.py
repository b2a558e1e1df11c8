"""
Query - Read-only lookups against the ledger.

Commands:
- rent:    Rent-exempt minimum balance for an account size or layout
- balance: Lamport balance of an address
- status:  Signature status, to check before resubmitting after a timeout
"""

from __future__ import annotations

import sys
from typing import Optional

import click
from solders.pubkey import Pubkey
from solders.signature import Signature

from ..ledger import programs
from ..ledger.rent import minimum_balance
from ..ledger.rpc import RpcClient
from ..ledger.submit import transaction_status
from ..utils import lamports_to_sol
from ._runtime import field, run_with_client

_LAYOUTS = {
    "mint": programs.get_mint_size,
    "token-account": programs.get_token_account_size,
}


@click.command()
@click.option("--size", type=click.IntRange(min=0), default=None, help="Account size in bytes")
@click.option(
    "--layout",
    type=click.Choice(sorted(_LAYOUTS)),
    default=None,
    help="Use the size of a token program account layout",
)
@click.pass_context
def rent(ctx: click.Context, size: Optional[int], layout: Optional[str]) -> None:
    """Show the rent-exempt minimum balance for an account."""
    if (size is None) == (layout is None):
        raise click.UsageError("Pass exactly one of --size or --layout")

    if layout is not None:
        size = _LAYOUTS[layout]()

    async def _body(client: RpcClient) -> None:
        lamports = await minimum_balance(client, size)
        field("Size:", f"{size} bytes")
        field("Rent:", f"{lamports} lamports ({lamports_to_sol(lamports)} SOL)")

    run_with_client(ctx, _body)


@click.command()
@click.argument("address")
@click.pass_context
def balance(ctx: click.Context, address: str) -> None:
    """Show the balance of ADDRESS."""
    try:
        pubkey = Pubkey.from_string(address)
    except ValueError as exc:
        raise click.BadParameter(f"Not a valid address: {address}") from exc

    async def _body(client: RpcClient) -> None:
        lamports = await client.get_balance(pubkey)
        field("Address:", pubkey)
        field("Balance:", f"{lamports} lamports ({lamports_to_sol(lamports)} SOL)")

    run_with_client(ctx, _body)


@click.command()
@click.argument("signature")
@click.pass_context
def status(ctx: click.Context, signature: str) -> None:
    """Show the confirmation status of SIGNATURE.

    Use this after a confirmation timeout: the transaction may still have
    landed, and resubmitting a rebuilt one could apply it twice.
    """
    try:
        sig = Signature.from_string(signature)
    except ValueError as exc:
        raise click.BadParameter(f"Not a valid signature: {signature}") from exc

    async def _body(client: RpcClient) -> Optional[dict]:
        return await transaction_status(client, sig)

    result = run_with_client(ctx, _body)

    if result is None:
        click.secho("  Not found (never landed, or too old for this node).", fg="yellow")
        sys.exit(3)

    field("Slot:", result.get("slot"))
    field("Level:", result.get("confirmationStatus") or "finalized")
    if result.get("err") is not None:
        click.secho(f"        Failed: {result['err']}", fg="red")
        sys.exit(2)
    click.secho("        Succeeded", fg="green")
