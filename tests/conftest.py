"""
In-process fake ledger for offline tests.

``FakeLedger`` answers the JSON-RPC methods the pipeline uses through an
``httpx.MockTransport``: it tracks balances, issues blockhashes with a
validity window, checks signatures, charges fees, applies System program
debits and records signature statuses.  Tests drive block height by hand.
"""

from __future__ import annotations

import asyncio
import base64
import json
import os
import struct
from typing import Any, Awaitable, Callable, Optional

import httpx
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.transaction import VersionedTransaction

from mintwright.errors import SignatureVerificationError
from mintwright.ledger.programs import SYSTEM_PROGRAM_ID
from mintwright.ledger.rpc import RpcClient
from mintwright.ledger.signer import signer_addresses

FEE_PER_SIGNATURE = 5000
VALIDITY_WINDOW = 150


def rent_for(size: int) -> int:
    # (account overhead + data) * lamports per byte-year * two years
    return (128 + size) * 3480 * 2


class FakeLedger:
    def __init__(self) -> None:
        self.block_height = 1_000
        self.slot = 5_000
        self.balances: dict[str, int] = {}
        self.blockhashes: dict[str, int] = {}
        self.statuses: dict[str, dict[str, Any]] = {}
        self.sent: list[VersionedTransaction] = []
        self.methods: list[str] = []
        # Behaviour switches
        self.landing_level: str = "confirmed"
        self.drop_transactions = False
        self.on_chain_error: Any = None
        self.height_step = 0
        self.offline = False
        self.http_status = 200
        self.on_block_height: Optional[Callable[[], None]] = None
        self.send_options: list[dict[str, Any]] = []

    # ---- test helpers ----

    def fund(self, address: Any, lamports: int) -> None:
        key = str(address)
        self.balances[key] = self.balances.get(key, 0) + lamports

    def balance(self, address: Any) -> int:
        return self.balances.get(str(address), 0)

    def advance(self, blocks: int) -> None:
        self.block_height += blocks
        self.slot += blocks

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # ---- JSON-RPC ----

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if self.http_status != 200:
            return httpx.Response(self.http_status, text="unavailable")

        payload = json.loads(request.content)
        method = payload["method"]
        params = payload.get("params", [])
        self.methods.append(method)

        handler = getattr(self, f"_rpc_{method}", None)
        try:
            if handler is None:
                raise _RpcFailure(-32601, "Method not found")
            result = handler(*params)
        except _RpcFailure as failure:
            body = {"jsonrpc": "2.0", "id": payload["id"], "error": failure.error}
        else:
            body = {"jsonrpc": "2.0", "id": payload["id"], "result": result}
        return httpx.Response(200, json=body)

    def _context(self, value: Any) -> dict[str, Any]:
        return {"context": {"slot": self.slot}, "value": value}

    def _rpc_getMinimumBalanceForRentExemption(self, size: int, config: Optional[dict] = None) -> int:
        return rent_for(size)

    def _rpc_getLatestBlockhash(self, config: Optional[dict] = None) -> dict[str, Any]:
        blockhash = str(Hash(os.urandom(32)))
        last_valid = self.block_height + VALIDITY_WINDOW
        self.blockhashes[blockhash] = last_valid
        return self._context({"blockhash": blockhash, "lastValidBlockHeight": last_valid})

    def _rpc_getBlockHeight(self, config: Optional[dict] = None) -> int:
        if self.on_block_height is not None:
            self.on_block_height()
        height = self.block_height
        self.advance(self.height_step)
        return height

    def _rpc_getBalance(self, address: str, config: Optional[dict] = None) -> dict[str, Any]:
        return self._context(self.balances.get(address, 0))

    def _rpc_getSignatureStatuses(self, signatures: list[str], config: Optional[dict] = None) -> dict[str, Any]:
        return self._context([self.statuses.get(sig) for sig in signatures])

    def _rpc_requestAirdrop(self, address: str, lamports: int, config: Optional[dict] = None) -> str:
        signature = str(Keypair().sign_message(os.urandom(16)))
        self.fund(address, lamports)
        self._land(signature, None)
        return signature

    def _rpc_sendTransaction(self, encoded: str, options: Optional[dict] = None) -> str:
        self.send_options.append(options or {})
        tx = VersionedTransaction.from_bytes(base64.b64decode(encoded))
        message = tx.message
        keys = [str(key) for key in message.account_keys]

        last_valid = self.blockhashes.get(str(message.recent_blockhash))
        if last_valid is None or self.block_height > last_valid:
            raise _RpcFailure(
                -32002,
                "Transaction simulation failed: Blockhash not found",
                {"err": "BlockhashNotFound", "logs": []},
            )

        try:
            signer_addresses(bytes(tx))
        except SignatureVerificationError:
            raise _RpcFailure(-32003, "Transaction signature verification failure")

        payer = keys[0]
        fee = FEE_PER_SIGNATURE * len(tx.signatures)
        if payer not in self.balances:
            raise _RpcFailure(
                -32002,
                "Transaction simulation failed: Attempt to debit an account but found no record of a prior credit.",
                {"err": "AccountNotFound", "logs": []},
            )
        if self.balances[payer] < fee:
            raise _RpcFailure(
                -32002,
                "Transaction simulation failed: Insufficient funds for fee",
                {"err": "InsufficientFundsForFee", "logs": []},
            )

        balances = dict(self.balances)
        balances[payer] -= fee
        for index, ix in enumerate(message.instructions):
            if keys[ix.program_id_index] != str(SYSTEM_PROGRAM_ID):
                continue
            data = bytes(ix.data)
            tag = struct.unpack_from("<I", data)[0]
            if tag not in (0, 2):
                continue
            lamports = struct.unpack_from("<Q", data, 4)[0]
            source = keys[ix.accounts[0]]
            destination = keys[ix.accounts[1]]
            if balances.get(source, 0) < lamports:
                raise _RpcFailure(
                    -32002,
                    f"Transaction simulation failed: Error processing Instruction {index}: custom program error: 0x1",
                    {
                        "err": {"InstructionError": [index, {"Custom": 1}]},
                        "logs": [f"Transfer: insufficient lamports {balances.get(source, 0)}, need {lamports}"],
                    },
                )
            balances[source] -= lamports
            balances[destination] = balances.get(destination, 0) + lamports

        signature = str(tx.signatures[0])
        self.sent.append(tx)
        if self.drop_transactions:
            return signature

        if self.on_chain_error is None:
            self.balances = balances
        self._land(signature, self.on_chain_error)
        return signature

    def _land(self, signature: str, err: Any) -> None:
        self.slot += 1
        self.statuses[signature] = {
            "slot": self.slot,
            "confirmations": 0,
            "err": err,
            "confirmationStatus": self.landing_level,
        }


class _RpcFailure(Exception):
    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.error = {"code": code, "message": message}
        if data is not None:
            self.error["data"] = data
        super().__init__(message)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch) -> None:
    """Keep the developer's own environment and ~/.mintwright/.env out of tests."""
    for name in list(os.environ):
        if name.startswith("MINTWRIGHT_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr("mintwright.config.MINTWRIGHT_ENV", tmp_path / "absent.env")


@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def run(ledger: FakeLedger) -> Callable[[Callable[[RpcClient], Awaitable[Any]]], Any]:
    """Run an async body against a client wired to the fake ledger."""

    def _run(body: Callable[[RpcClient], Awaitable[Any]]) -> Any:
        async def _main() -> Any:
            async with RpcClient("http://fake-ledger", transport=ledger.transport()) as client:
                return await body(client)

        return asyncio.run(_main())

    return _run
