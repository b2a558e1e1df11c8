__all__ = [
    # Errors
    "ProvisionError",
    "NetworkUnavailableError",
    "InsufficientFundsError",
    "MissingSignerError",
    "TransactionTooLargeError",
    "StaleLifetimeAnchorError",
    "SubmissionRejectedError",
    "ConfirmationTimeoutError",
    "EmptyTransactionError",
    "InstructionOrderError",
    "RpcError",
    "SignatureVerificationError",
    # Network
    "RpcClient",
    # Pipeline stages
    "minimum_balance",
    "sequence",
    "LifetimeAnchor",
    "UnsignedMessage",
    "TransactionDraft",
    "assemble",
    "SignedTransaction",
    "sign",
    "signer_addresses",
    "PACKET_DATA_SIZE",
    "validate_size",
    "ConfirmationReceipt",
    "submit",
    "transaction_status",
    "build_signed",
    "build_transaction",
    "send_and_confirm",
    "airdrop",
    # Provisioning flows
    "create_mint",
    "create_token_account",
    "create_associated_token_account",
    "mint_tokens",
    "fund_account",
    # Keys
    "generate_keypair",
    "load_keypair",
]

from .errors import (
    ConfirmationTimeoutError,
    EmptyTransactionError,
    InstructionOrderError,
    InsufficientFundsError,
    MissingSignerError,
    NetworkUnavailableError,
    ProvisionError,
    RpcError,
    SignatureVerificationError,
    StaleLifetimeAnchorError,
    SubmissionRejectedError,
    TransactionTooLargeError,
)
from .keys import generate_keypair, load_keypair
from .ledger.faucet import airdrop
from .ledger.message import LifetimeAnchor, TransactionDraft, UnsignedMessage, assemble
from .ledger.pipeline import build_signed, build_transaction, send_and_confirm
from .ledger.provision import (
    create_associated_token_account,
    create_mint,
    create_token_account,
    fund_account,
    mint_tokens,
)
from .ledger.rent import minimum_balance
from .ledger.rpc import RpcClient
from .ledger.sequencer import sequence
from .ledger.signer import SignedTransaction, sign, signer_addresses
from .ledger.size import PACKET_DATA_SIZE, validate_size
from .ledger.submit import ConfirmationReceipt, submit, transaction_status
