"""
Commands - CLI command implementations for mintwright.

Each module corresponds to a top-level CLI command:
- provision: Fee payer, airdrop, mint, token account and initial supply
- airdrop:   Request faucet lamports for an address
- query:     Rent, balance and signature status lookups
"""
