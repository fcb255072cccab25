"""
Fungible Token.

In-memory fungible token used as the asset behind a vesting ledger:
- Balances and total supply in integer base units
- Owner-only minting up to an optional supply cap
- Transfers with zero-account and balance checks
- Transfer event log

The vesting engine never touches balances directly; it asks a transfer
service to move funds and waits for the outcome.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from ..vesting_exceptions import TokenTransferError

logger = logging.getLogger(__name__)

ZERO_ACCOUNT = "0x" + "0" * 40


@dataclass
class TokenEvent:
    """Represents a token transfer event."""

    from_account: str
    to_account: str
    value: int
    memo: str = ""
    timestamp: float = field(default_factory=time.time)


@dataclass
class FungibleToken:
    """
    Fungible token with owner-controlled minting.

    Account identifiers are compared case-insensitively. All amounts are
    non-negative integers.
    """

    name: str
    symbol: str
    total_supply: int = 0

    # Contract address
    address: str = ""

    # Owner (for minting permissions)
    owner: str = ""

    # State
    balances: dict[str, int] = field(default_factory=dict)
    events: list[TokenEvent] = field(default_factory=list)

    # Supply cap (0 = unlimited)
    max_supply: int = 0

    def __post_init__(self) -> None:
        if not self.address:
            addr_hash = hashlib.sha3_256(f"{self.name}{self.symbol}".encode()).digest()
            self.address = f"0x{addr_hash[-20:].hex()}"
        self.owner = self._normalize(self.owner)

    # ==================== View Functions ====================

    def balance_of(self, account: str) -> int:
        return self.balances.get(self._normalize(account), 0)

    # ==================== State-Changing Functions ====================

    def transfer(self, sender: str, receiver: str, amount: int, memo: str = "") -> bool:
        """
        Move ``amount`` from sender to receiver.

        Args:
            sender: Account sending tokens
            receiver: Account receiving tokens
            amount: Amount to transfer
            memo: Free-form note stored on the event

        Returns:
            True if successful

        Raises:
            TokenTransferError: If the transfer is rejected
        """
        sender_norm = self._normalize(sender)
        receiver_norm = self._normalize(receiver)

        self._validate_account(receiver_norm, "receiver")
        self._validate_amount(amount)
        if amount == 0:
            raise TokenTransferError("Token: transfer amount must be positive")
        if sender_norm == receiver_norm:
            raise TokenTransferError("Token: sender and receiver are the same account")

        sender_balance = self.balances.get(sender_norm, 0)
        if sender_balance < amount:
            raise TokenTransferError(
                f"Token: transfer amount exceeds balance ({amount} > {sender_balance})",
                details={"sender": sender_norm, "amount": amount, "balance": sender_balance},
            )

        self.balances[sender_norm] = sender_balance - amount
        self.balances[receiver_norm] = self.balances.get(receiver_norm, 0) + amount
        self.events.append(TokenEvent(sender_norm, receiver_norm, amount, memo))

        logger.debug(
            "Token transfer",
            extra={
                "event": "token.transfer",
                "token": self.symbol,
                "from": sender_norm,
                "to": receiver_norm,
                "amount": amount,
            },
        )
        return True

    def mint(self, minter: str, to: str, amount: int) -> bool:
        """
        Mint new tokens (owner only).

        Raises:
            TokenTransferError: If minting fails
        """
        if self._normalize(minter) != self.owner:
            raise TokenTransferError("Token: caller is not owner", details={"caller": minter})

        to_norm = self._normalize(to)
        self._validate_account(to_norm, "recipient")
        self._validate_amount(amount)

        if self.max_supply > 0 and self.total_supply + amount > self.max_supply:
            raise TokenTransferError(
                f"Token: mint would exceed max supply "
                f"({self.total_supply + amount} > {self.max_supply})"
            )

        self.total_supply += amount
        self.balances[to_norm] = self.balances.get(to_norm, 0) + amount
        self.events.append(TokenEvent(ZERO_ACCOUNT, to_norm, amount, "mint"))

        logger.info(
            "Token mint",
            extra={
                "event": "token.mint",
                "token": self.symbol,
                "to": to_norm,
                "amount": amount,
                "new_supply": self.total_supply,
            },
        )
        return True

    # ==================== Helpers ====================

    def _normalize(self, account: str) -> str:
        return account.lower()

    def _validate_account(self, account: str, field_name: str) -> None:
        if not account or account == ZERO_ACCOUNT:
            raise TokenTransferError(f"Token: {field_name} is zero account")

    def _validate_amount(self, amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TokenTransferError("Token: amount must be an integer")
        if amount < 0:
            raise TokenTransferError("Token: amount cannot be negative")

    # ==================== Serialization ====================

    def to_dict(self) -> dict[str, Any]:
        """Serialize token state to dictionary."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "total_supply": self.total_supply,
            "address": self.address,
            "owner": self.owner,
            "balances": dict(self.balances),
            "max_supply": self.max_supply,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FungibleToken":
        """Deserialize token state from dictionary."""
        token = cls(
            name=data["name"],
            symbol=data["symbol"],
            total_supply=data.get("total_supply", 0),
            address=data.get("address", ""),
            owner=data.get("owner", ""),
            max_supply=data.get("max_supply", 0),
        )
        token.balances = dict(data.get("balances", {}))
        return token
