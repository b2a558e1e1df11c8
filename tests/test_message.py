"""Unit tests for message assembly and the immutable transaction draft."""

from __future__ import annotations

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message, MessageV0

from mintwright.errors import EmptyTransactionError
from mintwright.ledger import programs
from mintwright.ledger.message import LEGACY, LifetimeAnchor, TransactionDraft, assemble

PAYER = Keypair.from_seed(bytes([1] * 32))
MINT = Keypair.from_seed(bytes([2] * 32))
ANCHOR = LifetimeAnchor(Hash(bytes([7] * 32)), 1_150)


def _mint_instructions() -> list:
    return [
        programs.create_account(
            payer=PAYER.pubkey(),
            new_account=MINT.pubkey(),
            lamports=1_461_600,
            space=programs.MINT_SIZE,
            owner=programs.TOKEN_PROGRAM_ID,
        ),
        programs.initialize_mint(
            mint=MINT.pubkey(), decimals=9, mint_authority=PAYER.pubkey()
        ),
    ]


class TestAssemble:
    def test_deterministic(self) -> None:
        first = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions())
        second = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions())
        assert first.serialize() == second.serialize()

    def test_order_changes_bytes(self) -> None:
        a, b = _mint_instructions()
        forward = assemble(PAYER.pubkey(), ANCHOR, [a, b])
        reverse = assemble(PAYER.pubkey(), ANCHOR, [b, a])
        assert forward.serialize() != reverse.serialize()

    def test_preserves_instruction_order(self) -> None:
        instructions = _mint_instructions()
        message = assemble(PAYER.pubkey(), ANCHOR, instructions)
        assert list(message.instructions) == instructions

    def test_rejects_empty_instruction_list(self) -> None:
        with pytest.raises(EmptyTransactionError):
            assemble(PAYER.pubkey(), ANCHOR, [])

    def test_default_is_versioned(self) -> None:
        message = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions())
        assert isinstance(message.compiled, MessageV0)
        # Versioned messages carry a 0x80 prefix byte
        assert message.serialize()[0] == 0x80

    def test_legacy_version(self) -> None:
        message = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions(), version=LEGACY)
        assert isinstance(message.compiled, Message)
        assert message.serialize()[0] != 0x80

    def test_unknown_version(self) -> None:
        with pytest.raises(ValueError):
            assemble(PAYER.pubkey(), ANCHOR, _mint_instructions(), version=1)

    def test_fee_payer_is_first_required_signer(self) -> None:
        message = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions())
        assert message.required_signers == [PAYER.pubkey(), MINT.pubkey()]

    def test_anchor_change_changes_bytes(self) -> None:
        other = LifetimeAnchor(Hash(bytes([8] * 32)), 1_150)
        first = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions())
        second = assemble(PAYER.pubkey(), other, _mint_instructions())
        assert first.serialize() != second.serialize()


class TestLifetimeAnchor:
    def test_from_strings(self) -> None:
        blockhash = Hash(bytes([9] * 32))
        anchor = LifetimeAnchor.from_strings(str(blockhash), "42")
        assert anchor.blockhash == blockhash
        assert anchor.last_valid_block_height == 42


class TestTransactionDraft:
    def test_steps_return_new_values(self) -> None:
        empty = TransactionDraft()
        with_payer = empty.with_fee_payer(PAYER.pubkey())
        with_anchor = with_payer.with_lifetime(ANCHOR)
        with_ixs = with_anchor.append_instructions(_mint_instructions())

        assert empty.fee_payer is None
        assert with_payer.anchor is None
        assert with_anchor.instructions == ()
        assert len(with_ixs.instructions) == 2

    def test_compile_matches_assemble(self) -> None:
        draft = (
            TransactionDraft()
            .with_fee_payer(PAYER.pubkey())
            .with_lifetime(ANCHOR)
            .append_instructions(_mint_instructions())
        )
        direct = assemble(PAYER.pubkey(), ANCHOR, _mint_instructions())
        assert draft.compile().serialize() == direct.serialize()

    def test_append_keeps_order(self) -> None:
        a, b = _mint_instructions()
        draft = TransactionDraft().append_instructions([a]).append_instructions([b])
        assert draft.instructions == (a, b)

    def test_compile_requires_fee_payer(self) -> None:
        draft = TransactionDraft().with_lifetime(ANCHOR).append_instructions(_mint_instructions())
        with pytest.raises(ValueError, match="fee payer"):
            draft.compile()

    def test_compile_requires_anchor(self) -> None:
        draft = TransactionDraft().with_fee_payer(PAYER.pubkey()).append_instructions(_mint_instructions())
        with pytest.raises(ValueError, match="anchor"):
            draft.compile()

    def test_draft_is_frozen(self) -> None:
        draft = TransactionDraft()
        with pytest.raises(AttributeError):
            draft.fee_payer = PAYER.pubkey()  # type: ignore[misc]
