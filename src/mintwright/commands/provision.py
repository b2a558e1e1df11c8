"""
Provision - Stand up a token from scratch.

Flow:
1. Load the fee payer from a keypair file, or generate a fresh one
2. Fund it through the faucet (skipped with --airdrop 0)
3. Create and initialize the mint (payer is mint authority)
4. Optionally create a token account (keypair or associated)
5. Optionally mint an initial supply into that account

Every step is its own transaction with its own lifetime anchor.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ..keys import generate_keypair, get_address, load_keypair
from ..ledger import provision as flows
from ..ledger.faucet import airdrop
from ..ledger.programs import U64_MAX
from ..ledger.rpc import RpcClient
from ..utils import lamports_to_sol, to_base_units
from ._runtime import field, get_settings, run_with_client

_TOKEN_ACCOUNT_KINDS = ("none", "keypair", "associated")


@click.command()
@click.option(
    "--keypair",
    "keypair_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Fee payer keypair file (default: MINTWRIGHT_KEYPAIR or a fresh keypair)",
)
@click.option(
    "--airdrop",
    "airdrop_lamports",
    type=int,
    default=None,
    help="Lamports to airdrop to the fee payer first (0 to skip)",
)
@click.option("--decimals", default=9, show_default=True, type=click.IntRange(0, 255))
@click.option(
    "--token-account",
    "token_account_kind",
    type=click.Choice(_TOKEN_ACCOUNT_KINDS),
    default="none",
    show_default=True,
    help="Also create a token account for the fee payer",
)
@click.option(
    "--mint-amount",
    type=float,
    default=None,
    help="Tokens (human units) to mint into the new token account",
)
@click.pass_context
def provision(
    ctx: click.Context,
    keypair_path: Optional[Path],
    airdrop_lamports: Optional[int],
    decimals: int,
    token_account_kind: str,
    mint_amount: Optional[float],
) -> None:
    """Create a fee payer, fund it, and create a mint (plus token account)."""
    settings = get_settings(ctx)

    if mint_amount is not None and token_account_kind == "none":
        raise click.UsageError("--mint-amount needs --token-account keypair|associated")

    raw_amount = None
    if mint_amount is not None:
        raw_amount = to_base_units(mint_amount, decimals)
        if raw_amount <= 0:
            raise click.UsageError("--mint-amount must be positive")
        if raw_amount > U64_MAX:
            raise click.UsageError(
                f"--mint-amount is {raw_amount} base units at {decimals} decimals, "
                f"above the token program limit of {U64_MAX}"
            )

    if airdrop_lamports is None:
        airdrop_lamports = settings.airdrop_lamports
    keypair_path = keypair_path or settings.keypair_path

    try:
        payer = load_keypair(keypair_path) if keypair_path else generate_keypair()
    except (ValueError, FileNotFoundError) as exc:
        click.secho(f"  ERROR: {exc}", fg="red")
        sys.exit(1)

    total_steps = 3 + (token_account_kind != "none") + (raw_amount is not None)
    timeout = settings.confirm_timeout

    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("Provision", fg="bright_white", bold=True)
        + click.style(" ─── Create a token", fg="cyan")
    )
    click.echo()

    async def _body(client: RpcClient) -> None:
        step = 1

        # --- Fee payer ---
        click.secho(f"  [{step}/{total_steps}] Preparing fee payer...", fg="bright_white")
        field("Address:", get_address(payer))
        field("Source:", keypair_path or "generated")
        click.echo()
        step += 1

        # --- Funding ---
        click.secho(f"  [{step}/{total_steps}] Funding fee payer...", fg="bright_white")
        if airdrop_lamports > 0:
            receipt = await airdrop(
                client,
                payer.pubkey(),
                airdrop_lamports,
                poll_interval=settings.poll_interval,
                timeout=timeout,
            )
            field("Airdrop:", f"{lamports_to_sol(airdrop_lamports)} SOL")
            field("TX:", receipt.signature)
        else:
            click.secho("        Skipping airdrop (--airdrop 0).", dim=True)
        balance = await client.get_balance(payer.pubkey())
        field("Balance:", f"{lamports_to_sol(balance)} SOL")
        click.echo()
        step += 1

        # --- Mint ---
        click.secho(f"  [{step}/{total_steps}] Creating mint...", fg="bright_white")
        mint, receipt = await flows.create_mint(
            client, payer, decimals=decimals, timeout=timeout
        )
        click.secho("        Mint created!", fg="green", bold=True)
        field("Mint:", mint.pubkey())
        field("Decimals:", decimals)
        field("TX:", receipt.signature)
        click.echo()
        step += 1

        # --- Token account ---
        destination = None
        if token_account_kind == "keypair":
            click.secho(f"  [{step}/{total_steps}] Creating token account...", fg="bright_white")
            account, receipt = await flows.create_token_account(
                client, payer, mint.pubkey(), timeout=timeout
            )
            destination = account.pubkey()
        elif token_account_kind == "associated":
            click.secho(
                f"  [{step}/{total_steps}] Creating associated token account...",
                fg="bright_white",
            )
            destination, receipt = await flows.create_associated_token_account(
                client, payer, mint.pubkey(), timeout=timeout
            )
        if destination is not None:
            click.secho("        Token account created!", fg="green", bold=True)
            field("Account:", destination)
            field("TX:", receipt.signature)
            click.echo()
            step += 1

        # --- Initial supply ---
        if raw_amount is not None and destination is not None:
            click.secho(f"  [{step}/{total_steps}] Minting initial supply...", fg="bright_white")
            receipt = await flows.mint_tokens(
                client, payer, mint.pubkey(), destination, raw_amount, timeout=timeout
            )
            click.secho("        Tokens minted!", fg="green", bold=True)
            field("Amount:", f"{mint_amount} ({raw_amount} base units)")
            field("TX:", receipt.signature)
            click.echo()

        click.echo(
            click.style("  ◆ ", fg="green")
            + click.style("Provision Complete", fg="green", bold=True)
        )
        click.echo()
        click.secho("  Summary:", fg="cyan")
        click.echo(f"    Fee payer:     {get_address(payer)}")
        click.echo(f"    Mint:          {mint.pubkey()}")
        if destination is not None:
            click.echo(f"    Token account: {destination}")
        click.echo()

    run_with_client(ctx, _body)
