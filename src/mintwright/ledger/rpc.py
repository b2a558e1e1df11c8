"""
JSON-RPC client for a Solana-compatible ledger.

Lightweight alternative to solana-py: uses httpx for HTTP and solders for
the wire types.  Covers only what the provisioning pipeline needs: rent
lookups, blockhashes, block height, balances, sending, signature statuses
and faucet airdrops.

One ``RpcClient`` is constructed per process and passed to every pipeline
call.  It wraps a single ``httpx.AsyncClient`` connection pool, so concurrent
pipelines may share it.
"""

from __future__ import annotations

import base64
import itertools
import logging
from typing import Any, Optional, Sequence

import httpx
from solders.pubkey import Pubkey
from solders.signature import Signature

from ..errors import NetworkUnavailableError, RpcError
from .message import LifetimeAnchor

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "http://localhost:8899"

# Ordered weakest to strongest.
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


def normalize_commitment(value: str) -> str:
    """Validate a commitment level name and return it lower-cased."""
    level = value.strip().lower()
    if level not in COMMITMENT_LEVELS:
        raise ValueError(
            f"Unknown commitment {value!r}; expected one of {', '.join(COMMITMENT_LEVELS)}"
        )
    return level


def commitment_reached(achieved: Optional[str], requested: str) -> bool:
    """Return True when ``achieved`` is at least as strong as ``requested``."""
    if achieved is None:
        return False
    return COMMITMENT_LEVELS.index(achieved) >= COMMITMENT_LEVELS.index(requested)


class RpcClient:
    """Async JSON-RPC client bound to one endpoint.

    Args:
        url: HTTP endpoint of the ledger node
        commitment: Default commitment for reads and preflight
        timeout: Per-request HTTP timeout in seconds
        transport: Optional httpx transport (tests inject ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        commitment: str = "confirmed",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or DEFAULT_RPC_URL
        self.commitment = normalize_commitment(commitment)
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def call(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "getLatestBlockhash")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            NetworkUnavailableError: Transport failure, HTTP 429 or 5xx
            RpcError: The node answered with a JSON-RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            response = await self._http.post(self.url, json=payload)
        except httpx.TransportError as exc:
            raise NetworkUnavailableError(f"{method} failed: {exc}") from exc

        if response.status_code == 429 or response.status_code >= 500:
            raise NetworkUnavailableError(
                f"{method} failed: HTTP {response.status_code}"
            )
        if response.is_error:
            raise RpcError(None, f"HTTP {response.status_code} from {self.url}")

        data = response.json()
        if "error" in data:
            error = data["error"] or {}
            raise RpcError(error.get("code"), error.get("message", ""), error.get("data"))

        return data.get("result")

    def _config(self, commitment: Optional[str], **extra: Any) -> dict[str, Any]:
        config: dict[str, Any] = {"commitment": normalize_commitment(commitment or self.commitment)}
        config.update(extra)
        return config

    async def get_minimum_balance_for_rent_exemption(
        self, size: int, commitment: Optional[str] = None
    ) -> int:
        result = await self.call(
            "getMinimumBalanceForRentExemption", [size, self._config(commitment)]
        )
        return int(result)

    async def get_latest_blockhash(self, commitment: Optional[str] = None) -> LifetimeAnchor:
        result = await self.call("getLatestBlockhash", [self._config(commitment)])
        value = result["value"]
        anchor = LifetimeAnchor.from_strings(value["blockhash"], value["lastValidBlockHeight"])
        logger.debug(
            "Fetched blockhash %s (valid through block height %d)",
            anchor.blockhash,
            anchor.last_valid_block_height,
        )
        return anchor

    async def get_block_height(self, commitment: Optional[str] = None) -> int:
        return int(await self.call("getBlockHeight", [self._config(commitment)]))

    async def get_balance(self, address: Pubkey, commitment: Optional[str] = None) -> int:
        result = await self.call("getBalance", [str(address), self._config(commitment)])
        return int(result["value"])

    async def send_transaction(
        self,
        raw: bytes,
        *,
        skip_preflight: bool = False,
        preflight_commitment: Optional[str] = None,
    ) -> Signature:
        """
        Send a signed wire transaction.

        Args:
            raw: Serialized signed transaction
            skip_preflight: Skip the node's simulation step
            preflight_commitment: Commitment used for simulation

        Returns:
            Transaction signature reported by the node
        """
        encoded = base64.b64encode(raw).decode("ascii")
        options = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": normalize_commitment(preflight_commitment or self.commitment),
        }
        result = await self.call("sendTransaction", [encoded, options])
        return Signature.from_string(result)

    async def get_signature_statuses(
        self,
        signatures: Sequence[Signature],
        search_transaction_history: bool = False,
    ) -> list[Optional[dict[str, Any]]]:
        result = await self.call(
            "getSignatureStatuses",
            [
                [str(sig) for sig in signatures],
                {"searchTransactionHistory": search_transaction_history},
            ],
        )
        return list(result["value"])

    async def request_airdrop(
        self, address: Pubkey, lamports: int, commitment: Optional[str] = None
    ) -> Signature:
        result = await self.call(
            "requestAirdrop", [str(address), lamports, self._config(commitment)]
        )
        return Signature.from_string(result)
