"""
Error taxonomy for the transaction pipeline.

Local stages (assembly, signing, size validation) raise synchronously before
any network call.  Network-touching stages surface these kinds without
internal retry; retry policy belongs to the caller.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class ProvisionError(RuntimeError):
    exit_code: int = 1


class NetworkUnavailableError(ProvisionError):
    """Transport failure or an overloaded endpoint.

    Transient: retry the whole pipeline from a fresh lifetime anchor.
    """

    exit_code = 10


class InsufficientFundsError(ProvisionError):
    """Fee payer or new account is underfunded (fund it, e.g. by airdrop)."""

    exit_code = 11


class MissingSignerError(ProvisionError):
    exit_code = 12

    def __init__(self, missing: Iterable[Any]) -> None:
        self.missing = [str(address) for address in missing]
        super().__init__(f"Missing signature for: {', '.join(self.missing)}")


class TransactionTooLargeError(ProvisionError):
    exit_code = 13

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Transaction is {size} bytes, limit is {limit} bytes. "
            f"Split the instructions across multiple transactions."
        )


class StaleLifetimeAnchorError(ProvisionError):
    """The blockhash expired before submission or before confirmation.

    Rebuild the message with a fresh anchor and re-sign.
    """

    exit_code = 14


class SubmissionRejectedError(ProvisionError):
    exit_code = 15

    def __init__(self, message: str, detail: Any = None) -> None:
        self.detail = detail
        super().__init__(message)


class ConfirmationTimeoutError(ProvisionError):
    """Deadline passed without confirmation.

    The outcome is unknown: the transaction may still land.  Query its
    status before resubmitting.
    """

    exit_code = 16

    def __init__(self, signature: str, timeout: float) -> None:
        self.signature = signature
        self.timeout = timeout
        super().__init__(
            f"Transaction {signature} not confirmed within {timeout}s (outcome unknown)"
        )


class EmptyTransactionError(ProvisionError):
    exit_code = 17


class InstructionOrderError(ProvisionError):
    exit_code = 18


class RpcError(ProvisionError):
    exit_code = 19

    def __init__(self, code: Optional[int], message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC error {code}: {message}")


class SignatureVerificationError(ValueError):
    pass
