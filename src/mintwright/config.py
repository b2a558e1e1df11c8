"""
Runtime configuration.

Values come from the process environment, optionally seeded from
``~/.mintwright/.env``.  Real environment variables win over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .ledger.rpc import DEFAULT_RPC_URL, normalize_commitment

MINTWRIGHT_DIR = Path.home() / ".mintwright"
MINTWRIGHT_ENV = MINTWRIGHT_DIR / ".env"

_DEFAULTS: dict[str, str] = {
    "MINTWRIGHT_RPC_URL": DEFAULT_RPC_URL,
    "MINTWRIGHT_COMMITMENT": "confirmed",
    "MINTWRIGHT_AIRDROP_LAMPORTS": "1000000000",
    "MINTWRIGHT_CONFIRM_TIMEOUT": "60",
    "MINTWRIGHT_POLL_INTERVAL": "0.5",
}


def load_env(env_path: Optional[Path] = None) -> None:
    """Load ~/.mintwright/.env into the environment if it exists."""
    env_path = env_path or MINTWRIGHT_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)


def _get(name: str) -> str:
    return os.environ.get(name) or _DEFAULTS[name]


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    commitment: str
    airdrop_lamports: int
    confirm_timeout: float
    poll_interval: float
    keypair_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the environment.

        Raises:
            ValueError: If a numeric or commitment value is malformed
        """
        try:
            airdrop_lamports = int(_get("MINTWRIGHT_AIRDROP_LAMPORTS"))
            confirm_timeout = float(_get("MINTWRIGHT_CONFIRM_TIMEOUT"))
            poll_interval = float(_get("MINTWRIGHT_POLL_INTERVAL"))
        except ValueError as exc:
            raise ValueError(f"Invalid mintwright setting: {exc}") from exc

        if airdrop_lamports < 0:
            raise ValueError("MINTWRIGHT_AIRDROP_LAMPORTS must be non-negative")
        if confirm_timeout <= 0 or poll_interval <= 0:
            raise ValueError("Timeouts and poll intervals must be positive")

        keypair = os.environ.get("MINTWRIGHT_KEYPAIR")
        return cls(
            rpc_url=_get("MINTWRIGHT_RPC_URL"),
            commitment=normalize_commitment(_get("MINTWRIGHT_COMMITMENT")),
            airdrop_lamports=airdrop_lamports,
            confirm_timeout=confirm_timeout,
            poll_interval=poll_interval,
            keypair_path=Path(keypair).expanduser() if keypair else None,
        )
