"""Shared plumbing for commands: settings, client construction, error exits."""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Awaitable, Callable, TypeVar

import click

from ..config import Settings
from ..errors import ProvisionError
from ..ledger.rpc import RpcClient

T = TypeVar("T")


def get_settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def open_client(ctx: click.Context) -> RpcClient:
    """Build the process-wide RPC client from the group options."""
    settings = get_settings(ctx)
    return RpcClient(settings.rpc_url, commitment=settings.commitment)


def run_with_client(ctx: click.Context, body: Callable[[RpcClient], Awaitable[T]]) -> T:
    """Run ``body`` with a fresh client, mapping pipeline errors to exit codes."""

    async def _main() -> T:
        async with open_client(ctx) as client:
            return await body(client)

    try:
        return asyncio.run(_main())
    except ProvisionError as exc:
        click.secho(f"  {type(exc).__name__}: {exc}", fg="red")
        sys.exit(exc.exit_code)


def field(label: str, value: Any) -> None:
    click.echo(click.style(f"        {label:<10}", dim=True) + click.style(str(value), fg="bright_white"))
