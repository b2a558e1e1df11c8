"""
mintwright CLI

Command-line interface for provisioning SPL tokens on a Solana-compatible
ledger.

Every on-chain step is one atomic transaction: rent lookup, instruction
ordering, message assembly with a fresh blockhash, signing, a size check,
then submission and confirmation.

Commands:
  provision - Fee payer, airdrop, mint, token account, initial supply
  airdrop   - Request faucet lamports for an address
  rent      - Rent-exempt minimum balance for a size or layout
  balance   - Lamport balance of an address
  status    - Signature status (check before resubmitting)
  info      - Show effective configuration
"""

from __future__ import annotations

import sys
from dataclasses import replace
from typing import Optional

import click

from .config import MINTWRIGHT_ENV, Settings, load_env
from .utils import configure_logging


# ============ Constants ============

VERSION = "0.3.0"


# ============ Banner ============


def _print_banner() -> None:
    """Print the mintwright CLI banner."""
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("      M I N T W R I G H T", fg="bright_white", bold=True)
        + click.style(f"      v{VERSION}", dim=True)
    )
    click.secho("        ─── SPL token provisioning ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="mintwright")
@click.option(
    "--rpc-url",
    envvar="MINTWRIGHT_RPC_URL",
    default=None,
    help="Ledger JSON-RPC URL (default: http://localhost:8899)",
)
@click.option(
    "--commitment",
    envvar="MINTWRIGHT_COMMITMENT",
    type=click.Choice(["processed", "confirmed", "finalized"]),
    default=None,
    help="Confirmation level to wait for (default: confirmed)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline details to stderr")
@click.pass_context
def cli(ctx: click.Context, rpc_url: Optional[str], commitment: Optional[str], verbose: bool) -> None:
    """mintwright — SPL token provisioning."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    load_env()

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    overrides = {}
    if rpc_url:
        overrides["rpc_url"] = rpc_url
    if commitment:
        overrides["commitment"] = commitment
    if overrides:
        settings = replace(settings, **overrides)
    ctx.obj["settings"] = settings

    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.provision import provision
from .commands.airdrop import airdrop
from .commands.query import balance, rent, status

cli.add_command(provision)
cli.add_command(airdrop)
cli.add_command(rent)
cli.add_command(balance)
cli.add_command(status)


# ============ Info ============


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show effective configuration."""
    settings: Settings = ctx.obj["settings"]
    _print_banner()

    click.secho("  Configuration ──────────────────────────", fg="cyan")
    click.echo()

    rows = [
        ("RPC URL:    ", settings.rpc_url),
        ("Commitment: ", settings.commitment),
        ("Airdrop:    ", f"{settings.airdrop_lamports} lamports"),
        ("Timeout:    ", f"{settings.confirm_timeout:g}s"),
        ("Poll every: ", f"{settings.poll_interval:g}s"),
        ("Keypair:    ", str(settings.keypair_path) if settings.keypair_path else "generated per run"),
        ("Config file:", str(MINTWRIGHT_ENV)),
    ]
    for label, value in rows:
        click.echo(click.style(f"  {label} ", dim=True) + click.style(value, fg="bright_white"))

    click.echo()


# ============ Entry Points ============


def main() -> None:
    """mintwright CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
