"""Airdrop - Request faucet lamports (test and development networks only)."""

from __future__ import annotations

from typing import Optional

import click
from solders.pubkey import Pubkey

from ..ledger.faucet import airdrop as request_airdrop
from ..ledger.rpc import RpcClient
from ..utils import lamports_to_sol
from ._runtime import field, get_settings, run_with_client


def _parse_address(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as exc:
        raise click.BadParameter(f"Not a valid address: {value}") from exc


@click.command()
@click.argument("address")
@click.option(
    "--lamports",
    type=click.IntRange(min=1),
    default=None,
    help="Amount to request (default: MINTWRIGHT_AIRDROP_LAMPORTS)",
)
@click.pass_context
def airdrop(ctx: click.Context, address: str, lamports: Optional[int]) -> None:
    """Airdrop lamports to ADDRESS and wait for confirmation."""
    settings = get_settings(ctx)
    recipient = _parse_address(address)
    lamports = lamports or settings.airdrop_lamports
    if lamports <= 0:
        raise click.UsageError("Airdrop amount must be positive (set --lamports)")

    async def _body(client: RpcClient) -> None:
        receipt = await request_airdrop(
            client,
            recipient,
            lamports,
            timeout=settings.confirm_timeout,
            poll_interval=settings.poll_interval,
        )
        balance = await client.get_balance(recipient)
        click.secho("  Airdrop confirmed!", fg="green", bold=True)
        field("Amount:", f"{lamports_to_sol(lamports)} SOL")
        field("Level:", receipt.commitment)
        field("TX:", receipt.signature)
        field("Balance:", f"{lamports_to_sol(balance)} SOL")

    run_with_client(ctx, _body)
