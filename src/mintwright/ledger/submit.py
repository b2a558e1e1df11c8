"""
Submitter/Confirmer - send a signed transaction and wait for a commitment
level.

Two failure surfaces:
- the node rejects the transaction immediately (preflight), classified as
  stale anchor / insufficient funds / rejected;
- the node accepts it but confirmation never arrives, either because the
  blockhash expired (``StaleLifetimeAnchorError``) or because the caller's
  deadline passed first (``ConfirmationTimeoutError``, outcome unknown).

There is no retry in here.  Resending the same signed bytes is safe; reusing
an expired anchor is not.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from solders.signature import Signature

from ..errors import (
    ConfirmationTimeoutError,
    InsufficientFundsError,
    ProvisionError,
    RpcError,
    StaleLifetimeAnchorError,
    SubmissionRejectedError,
)
from .message import LifetimeAnchor
from .rpc import RpcClient, commitment_reached, normalize_commitment
from .signer import SignedTransaction

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5

_STALE_ERRORS = {"BlockhashNotFound"}
_INSUFFICIENT_ERRORS = {
    "InsufficientFundsForFee",
    "InsufficientFundsForRent",
    "AccountNotFound",
}
# System program ResultWithNegativeLamports and token program InsufficientFunds
# share custom error code 1.
_INSUFFICIENT_INSTRUCTION_ERRORS = ({"Custom": 1}, "InsufficientFunds")


@dataclass(frozen=True)
class ConfirmationReceipt:
    signature: Signature
    commitment: str
    slot: Optional[int] = None


def _error_name(err: Any) -> Optional[str]:
    if isinstance(err, str):
        return err
    if isinstance(err, dict) and err:
        return next(iter(err))
    return None


def classify_failure(
    err: Any,
    message: str = "",
    logs: Iterable[str] = (),
) -> ProvisionError:
    """Map a ledger transaction error to the error taxonomy."""
    name = _error_name(err)
    text = " ".join([message, *logs]).lower()

    if name in _STALE_ERRORS or "blockhash not found" in text:
        return StaleLifetimeAnchorError(message or "Blockhash not found")

    if name in _INSUFFICIENT_ERRORS:
        return InsufficientFundsError(message or f"Insufficient funds: {name}")

    if name == "InstructionError":
        index, detail = err["InstructionError"]
        if detail in _INSUFFICIENT_INSTRUCTION_ERRORS or "insufficient lamports" in text:
            return InsufficientFundsError(
                message or f"Instruction {index} failed: insufficient funds"
            )

    return SubmissionRejectedError(message or f"Transaction failed: {err}", detail=err)


def _classify_rpc_error(exc: RpcError) -> ProvisionError:
    data = exc.data if isinstance(exc.data, dict) else {}
    logs = data.get("logs") or []
    return classify_failure(data.get("err"), exc.message, logs)


def _achieved_level(status: dict[str, Any]) -> Optional[str]:
    level = status.get("confirmationStatus")
    if level is not None:
        return level
    # Older nodes report only a confirmation count; null means rooted.
    return "finalized" if status.get("confirmations") is None else "processed"


async def _fetch_status(client: RpcClient, signature: Signature) -> Optional[dict[str, Any]]:
    statuses = await client.get_signature_statuses([signature])
    return statuses[0] if statuses else None


async def ensure_anchor_valid(client: RpcClient, anchor: LifetimeAnchor) -> None:
    """Raise StaleLifetimeAnchorError if the chain is already past the anchor."""
    height = await client.get_block_height()
    if height > anchor.last_valid_block_height:
        raise StaleLifetimeAnchorError(
            f"Blockhash {anchor.blockhash} expired at block height "
            f"{anchor.last_valid_block_height} (current {height})"
        )


async def confirm(
    client: RpcClient,
    signature: Signature,
    commitment: str,
    anchor: Optional[LifetimeAnchor] = None,
    *,
    timeout: Optional[float] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> ConfirmationReceipt:
    """
    Poll a signature until it reaches ``commitment``.

    Args:
        client: Shared RPC client
        signature: Transaction signature to watch
        commitment: Requested level ("processed", "confirmed", "finalized")
        anchor: Lifetime anchor of the transaction; once the block height
            passes it and the signature is still unknown, the wait ends
            with StaleLifetimeAnchorError
        timeout: Caller deadline in seconds (None: bounded by the anchor only)
        poll_interval: Seconds between polls

    Returns:
        ConfirmationReceipt
    """
    if anchor is None and timeout is None:
        raise ValueError("confirm() needs a lifetime anchor or a timeout")

    commitment = normalize_commitment(commitment)
    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else loop.time() + timeout

    while True:
        status = await _fetch_status(client, signature)

        if status is None and anchor is not None:
            try:
                await ensure_anchor_valid(client, anchor)
            except StaleLifetimeAnchorError:
                # It may have landed between the status read and the height read
                status = await _fetch_status(client, signature)
                if status is None:
                    raise

        if status is not None:
            if status.get("err") is not None:
                raise classify_failure(status["err"])
            achieved = _achieved_level(status)
            if commitment_reached(achieved, commitment):
                logger.info("Transaction %s reached %s", signature, achieved)
                return ConfirmationReceipt(
                    signature=signature,
                    commitment=achieved,
                    slot=status.get("slot"),
                )

        if deadline is not None and loop.time() >= deadline:
            raise ConfirmationTimeoutError(str(signature), timeout)

        await asyncio.sleep(poll_interval)


async def submit(
    client: RpcClient,
    signed: SignedTransaction,
    commitment: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    skip_preflight: bool = False,
) -> ConfirmationReceipt:
    """
    Send a signed transaction and wait until it reaches ``commitment``.

    Args:
        client: Shared RPC client
        signed: Signed, size-validated transaction
        commitment: Level to wait for (default: the client's commitment).
            Preflight runs at the client's commitment, the level the
            anchor was fetched at.
        timeout: Caller deadline in seconds for the confirmation wait
        poll_interval: Seconds between status polls
        skip_preflight: Skip the node's simulation step

    Returns:
        ConfirmationReceipt

    Raises:
        StaleLifetimeAnchorError: Anchor expired before submission or confirmation
        InsufficientFundsError: Fee payer or a new account is underfunded
        SubmissionRejectedError: Any other rejection or on-chain failure
        ConfirmationTimeoutError: Deadline passed; outcome unknown
        NetworkUnavailableError: Endpoint unreachable
    """
    commitment = normalize_commitment(commitment or client.commitment)
    anchor = signed.message.anchor

    await ensure_anchor_valid(client, anchor)

    try:
        sent = await client.send_transaction(
            signed.to_bytes(),
            skip_preflight=skip_preflight,
            preflight_commitment=client.commitment,
        )
    except RpcError as exc:
        raise _classify_rpc_error(exc) from exc

    signature = signed.signature
    if sent != signature:
        logger.warning("Node returned signature %s, expected %s", sent, signature)
    logger.info("Sent transaction %s", signature)

    return await confirm(
        client,
        signature,
        commitment,
        anchor,
        timeout=timeout,
        poll_interval=poll_interval,
    )


async def transaction_status(
    client: RpcClient, signature: Signature
) -> Optional[dict[str, Any]]:
    """Look up a signature, including history, before deciding to resubmit."""
    statuses = await client.get_signature_statuses(
        [signature], search_transaction_history=True
    )
    return statuses[0] if statuses else None
