from __future__ import annotations

import logging

LAMPORTS_PER_SOL = 1_000_000_000


def lamports_to_sol(lamports: int) -> str:
    return f"{lamports / LAMPORTS_PER_SOL:.9f}".rstrip("0").rstrip(".")


def to_base_units(amount: float, decimals: int) -> int:
    return int(round(amount * (10 ** decimals)))


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
