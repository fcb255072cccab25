"""
tokenvest asset contracts.

Local fungible token used as the asset behind a vesting ledger.
"""

from .fungible_token import FungibleToken, TokenEvent

__all__ = [
    "FungibleToken",
    "TokenEvent",
]
