"""Unit tests for signing, signer detection and signature round trips."""

from __future__ import annotations

import pytest
from solders.hash import Hash
from solders.keypair import Keypair

from mintwright.errors import MissingSignerError, SignatureVerificationError
from mintwright.ledger import programs
from mintwright.ledger.message import LifetimeAnchor, assemble
from mintwright.ledger.signer import sign, signer_addresses

PAYER = Keypair.from_seed(bytes([1] * 32))
MINT = Keypair.from_seed(bytes([2] * 32))
AUTHORITY = Keypair.from_seed(bytes([3] * 32))
ANCHOR = LifetimeAnchor(Hash(bytes([7] * 32)), 1_150)


def _mint_message():
    return assemble(
        PAYER.pubkey(),
        ANCHOR,
        [
            programs.create_account(
                payer=PAYER.pubkey(),
                new_account=MINT.pubkey(),
                lamports=1_461_600,
                space=programs.MINT_SIZE,
                owner=programs.TOKEN_PROGRAM_ID,
            ),
            programs.initialize_mint(mint=MINT.pubkey(), decimals=9, mint_authority=PAYER.pubkey()),
        ],
    )


class TestSign:
    def test_one_signature_per_required_signer(self) -> None:
        signed = sign(_mint_message(), [PAYER, MINT])
        assert len(signed.signatures) == 2

    def test_missing_new_account_signer(self) -> None:
        with pytest.raises(MissingSignerError) as excinfo:
            sign(_mint_message(), [PAYER])
        assert excinfo.value.missing == [str(MINT.pubkey())]

    def test_missing_fee_payer(self) -> None:
        with pytest.raises(MissingSignerError) as excinfo:
            sign(_mint_message(), [MINT])
        assert str(PAYER.pubkey()) in excinfo.value.missing

    def test_signer_order_does_not_matter(self) -> None:
        forward = sign(_mint_message(), [PAYER, MINT])
        reverse = sign(_mint_message(), [MINT, PAYER])
        assert forward.to_bytes() == reverse.to_bytes()

    def test_deterministic(self) -> None:
        first = sign(_mint_message(), [PAYER, MINT])
        second = sign(_mint_message(), [PAYER, MINT])
        assert first.signatures == second.signatures
        assert first.to_bytes() == second.to_bytes()

    def test_signature_is_fee_payer_slot(self) -> None:
        message = _mint_message()
        signed = sign(message, [MINT, PAYER])
        assert signed.signature == PAYER.sign_message(message.serialize())
        assert signed.signatures[1] == MINT.sign_message(message.serialize())

    def test_extra_signers_are_ignored(self) -> None:
        signed = sign(_mint_message(), [PAYER, MINT, AUTHORITY])
        assert len(signed.signatures) == 2

    def test_separate_authority_is_required(self) -> None:
        # mint_to flags its authority as a signer, distinct from the payer
        message = assemble(
            PAYER.pubkey(),
            ANCHOR,
            [
                programs.mint_to(
                    mint=MINT.pubkey(),
                    destination=Keypair.from_seed(bytes([4] * 32)).pubkey(),
                    authority=AUTHORITY.pubkey(),
                    amount=10,
                )
            ],
        )
        assert AUTHORITY.pubkey() in message.required_signers
        with pytest.raises(MissingSignerError):
            sign(message, [PAYER])
        assert len(sign(message, [PAYER, AUTHORITY]).signatures) == 2


class TestSignerAddresses:
    def test_round_trip(self) -> None:
        signed = sign(_mint_message(), [PAYER, MINT])
        assert signer_addresses(signed.to_bytes()) == [PAYER.pubkey(), MINT.pubkey()]

    def test_legacy_round_trip(self) -> None:
        message = assemble(
            PAYER.pubkey(),
            ANCHOR,
            [programs.transfer(PAYER.pubkey(), MINT.pubkey(), 10)],
            version="legacy",
        )
        signed = sign(message, [PAYER])
        assert signer_addresses(signed.to_bytes()) == [PAYER.pubkey()]

    def test_tampered_message_fails(self) -> None:
        raw = bytearray(sign(_mint_message(), [PAYER, MINT]).to_bytes())
        # Flip a byte inside the lamports field of the create-account data
        index = raw.find((1_461_600).to_bytes(8, "little"))
        assert index > 0
        raw[index] ^= 0xFF
        with pytest.raises(SignatureVerificationError):
            signer_addresses(bytes(raw))

    def test_signatures_from_other_message_fail(self) -> None:
        signed = sign(_mint_message(), [PAYER, MINT])
        other_anchor = LifetimeAnchor(Hash(bytes([8] * 32)), 1_150)
        rebuilt = assemble(PAYER.pubkey(), other_anchor, list(signed.message.instructions))
        # Reusing old signatures over the rebuilt message must not verify
        from solders.transaction import VersionedTransaction

        stale = VersionedTransaction.populate(rebuilt.compiled, signed.signatures)
        with pytest.raises(SignatureVerificationError):
            signer_addresses(bytes(stale))
