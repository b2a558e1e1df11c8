"""
Ed25519 Key Management for mintwright.

Keypairs are generated in memory for each run.  An existing fee payer can be
loaded from a Solana CLI keypair file (a JSON array of 64 byte values, e.g.
``~/.config/solana/id.json``).  Nothing is ever written back to disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from solders.keypair import Keypair

DEFAULT_KEYPAIR_PATH = Path.home() / ".config" / "solana" / "id.json"


def generate_keypair() -> Keypair:
    return Keypair()


def load_keypair(path: Optional[Path] = None) -> Keypair:
    """
    Load a keypair from a Solana CLI JSON keypair file.

    Args:
        path: Keypair file (default: ~/.config/solana/id.json)

    Returns:
        Keypair

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a 64-byte JSON array
    """
    path = Path(path or DEFAULT_KEYPAIR_PATH).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Keypair file not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Keypair file is not valid JSON: {path}") from exc

    if not isinstance(raw, list) or len(raw) != 64:
        raise ValueError(f"Keypair file must hold a JSON array of 64 bytes: {path}")
    if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in raw):
        raise ValueError(f"Keypair file must hold integers in [0, 255]: {path}")

    return Keypair.from_bytes(bytes(raw))


def get_address(keypair: Keypair) -> str:
    """Base58 address of a keypair."""
    return str(keypair.pubkey())
