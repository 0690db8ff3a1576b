"""
Identity Prism: on-chain identity scoring for Solana wallets.

Reads a wallet's balance, signature history, token accounts and indexed
assets, classifies what it holds, reduces that into traits and scores the
result into one of ten planet tiers. The mint step consumes the finished
snapshot through the contracts in identity_prism.mint.
"""

__version__ = "0.1.0"
