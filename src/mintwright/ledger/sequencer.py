"""
Instruction Sequencer - the ordering contract for one atomic transaction.

Instructions execute strictly in order, so an account must be created (space
allocated, rent-exempt balance funded, owner assigned) before any instruction
that initializes it, mutates it, or references it as a mint.  The sequencer
never reorders; it only rejects lists that break this rule.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from ..errors import InstructionOrderError
from .programs import DEFAULT_CLASSIFIERS, NO_ROLE, Classifier, InstructionRole


def _role(ix: Instruction, classifiers: Mapping[Pubkey, Classifier]) -> InstructionRole:
    classifier = classifiers.get(ix.program_id)
    if classifier is None:
        return NO_ROLE
    return classifier(ix)


def sequence(
    instructions: Sequence[Instruction],
    classifiers: Optional[Mapping[Pubkey, Classifier]] = None,
) -> tuple[Instruction, ...]:
    """
    Check the create-before-use rule and return the instructions unchanged.

    Accounts that are not created anywhere in this transaction are assumed
    to exist already (created by an earlier transaction).

    Raises:
        InstructionOrderError: If an instruction needs an account that a
            later instruction of the same transaction creates
    """
    ordered = tuple(instructions)
    classifiers = DEFAULT_CLASSIFIERS if classifiers is None else classifiers
    roles = [_role(ix, classifiers) for ix in ordered]

    created_at: dict[Pubkey, int] = {}
    for index, role in enumerate(roles):
        for address in role.creates:
            created_at.setdefault(address, index)

    for index, role in enumerate(roles):
        for address in role.requires:
            creator = created_at.get(address)
            if creator is not None and creator > index:
                raise InstructionOrderError(
                    f"Instruction {index} uses account {address} before "
                    f"instruction {creator} creates it"
                )

    return ordered
