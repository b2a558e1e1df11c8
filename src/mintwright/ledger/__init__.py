"""
Ledger - Transaction pipeline for Solana-compatible networks.

Rent lookups, instruction sequencing, message assembly, signing, size
validation, submission and confirmation, plus the provisioning flows built
on top of them.

Uses httpx + solders + cryptography instead of the heavyweight solana-py.
"""
