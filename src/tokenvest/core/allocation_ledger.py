"""
Allocation Ledger.

Holds one vesting allocation per beneficiary account and owns every
invariant about total supply, schedule validity and claimed totals:

- Allocations are created once, at initialization, with nothing claimed
- Cumulative allocated percent never exceeds 100.00% of total supply
- Claimable amounts follow a deterministic integer formula
- Claimed totals only grow, through commit_claim

Percentages are fixed-point integers (10000 == 100.00%), times are integer
nanoseconds. All conversions truncate toward zero.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Mapping

from .constants import DEFAULT_DEPLOYER_ACCOUNT, PERCENT_BASIS
from .units import tokens_from_percent, tokens_to_percent
from .vesting_exceptions import (
    AlreadyInitializedError,
    ClaimError,
    IncompleteAllocationError,
    InvalidAllocationError,
    NotInitializedError,
    OverdrawError,
    SupplyExceededError,
    UnauthorizedError,
    UnknownAccountError,
)

logger = logging.getLogger(__name__)

_ALLOCATION_FIELDS = (
    "allocated_percent",
    "initial_release",
    "vesting_start_time",
    "vesting_end_time",
    "vesting_interval",
)


@dataclass(frozen=True)
class AllocationInput:
    """Schedule supplied for one account at initialization."""

    allocated_percent: int
    initial_release: int
    vesting_start_time: int
    vesting_end_time: int
    vesting_interval: int


@dataclass
class Allocation:
    """Vesting record for one account."""

    allocated_percent: int
    initial_release: int
    vesting_start_time: int
    vesting_end_time: int
    vesting_interval: int
    claimed: int = 0

    @classmethod
    def from_input(cls, data: AllocationInput) -> "Allocation":
        return cls(
            allocated_percent=data.allocated_percent,
            initial_release=data.initial_release,
            vesting_start_time=data.vesting_start_time,
            vesting_end_time=data.vesting_end_time,
            vesting_interval=data.vesting_interval,
            claimed=0,
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Allocation":
        try:
            return cls(
                **{name: data[name] for name in _ALLOCATION_FIELDS},
                claimed=data.get("claimed", 0),
            )
        except KeyError as exc:
            raise InvalidAllocationError(
                f"Allocation record is missing field {exc.args[0]}",
                details={"field": exc.args[0]},
            ) from exc


def validate_allocation(alloc: Allocation, account: str | None = None) -> None:
    """
    Check a stored allocation against the schedule invariants.

    Called at initialization and again before any financial output is
    produced from the record. The 100.00% supply bound covers the whole
    set and is checked by the ledger on the running sum.

    Args:
        alloc: Allocation to check
        account: Owning account, for error context

    Raises:
        InvalidAllocationError: If any invariant is violated
    """
    details = {"account": account} if account else {}

    for name, value in asdict(alloc).items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidAllocationError(f"{name} must be an integer", details=details)
        if value < 0:
            raise InvalidAllocationError(f"{name} cannot be negative", details=details)

    # Initial release is part of the allocation; claimed never passes it.
    if alloc.initial_release > alloc.allocated_percent:
        raise InvalidAllocationError(
            "Allocation is smaller than the total claimable", details=details
        )
    if alloc.claimed > alloc.allocated_percent:
        raise InvalidAllocationError(
            "Claimed is greater than the allocation", details=details
        )
    if alloc.vesting_end_time <= 0:
        raise InvalidAllocationError("Not a valid allocation", details=details)
    if alloc.vesting_end_time <= alloc.vesting_start_time:
        raise InvalidAllocationError(
            "vesting_end_time is smaller than vesting_start_time", details=details
        )
    if alloc.vesting_interval <= 0:
        raise InvalidAllocationError("Vesting interval must be positive", details=details)
    if alloc.vesting_interval > alloc.vesting_end_time - alloc.vesting_start_time:
        raise InvalidAllocationError(
            "Vesting interval is larger than vesting time", details=details
        )


def vested_percent(alloc: Allocation, at_time: int) -> int:
    """Percent units released by the schedule at ``at_time``, excluding the initial release."""
    if at_time < alloc.vesting_start_time:
        return 0
    schedulable = alloc.allocated_percent - alloc.initial_release
    if at_time >= alloc.vesting_end_time:
        return schedulable

    elapsed_intervals = (at_time - alloc.vesting_start_time) // alloc.vesting_interval
    total_intervals = (alloc.vesting_end_time - alloc.vesting_start_time) // alloc.vesting_interval
    return schedulable * elapsed_intervals // total_intervals


class AllocationLedger:
    """
    Ordered mapping from account to vesting allocation.

    A ledger is constructed empty and becomes usable after exactly one call
    to initialize() by the designated deployer. Afterwards only
    commit_claim() mutates it.
    """

    def __init__(
        self,
        deployer: str = DEFAULT_DEPLOYER_ACCOUNT,
        require_full_allocation: bool = False,
    ) -> None:
        """
        Args:
            deployer: Only identity allowed to initialize the ledger
            require_full_allocation: Reject allocation sets that do not sum
                to exactly 100.00%
        """
        self.deployer = deployer
        self.require_full_allocation = require_full_allocation
        self.asset_contract_identifier: str | None = None
        self.total_supply: int = 0
        self.allocations: dict[str, Allocation] = {}
        self.initialized = False

    # ==================== Initialization ====================

    def initialize(
        self,
        caller: str,
        asset_contract_identifier: str,
        total_supply: int,
        allocations: Mapping[str, AllocationInput],
    ) -> "AllocationLedger":
        """
        Populate the ledger with every allocation, nothing claimed.

        Either the whole allocation set is accepted or the ledger is left
        untouched.

        Args:
            caller: Identity invoking initialization
            asset_contract_identifier: Address of the external token contract
            total_supply: Token units backing the 100.00% basis
            allocations: Account to schedule, in enumeration order

        Returns:
            The ledger itself

        Raises:
            AlreadyInitializedError: If called twice
            UnauthorizedError: If caller is not the deployer
            InvalidAllocationError: If an allocation breaks a schedule invariant
            SupplyExceededError: If cumulative percent passes 100.00%
            IncompleteAllocationError: If full allocation is required and missing
        """
        if self.initialized:
            raise AlreadyInitializedError("The ledger is already initialized")
        if caller != self.deployer:
            raise UnauthorizedError(
                "Only the deployer is allowed to initialize the ledger",
                details={"caller": caller},
            )
        if not asset_contract_identifier:
            raise InvalidAllocationError("Asset contract identifier cannot be empty")
        if not isinstance(total_supply, int) or isinstance(total_supply, bool) or total_supply <= 0:
            raise InvalidAllocationError("Total supply must be a positive integer")

        staged: dict[str, Allocation] = {}
        running_percent = 0
        for account, data in allocations.items():
            if not account:
                raise InvalidAllocationError("Account identifier cannot be empty")
            alloc = Allocation.from_input(data)
            validate_allocation(alloc, account)

            running_percent += alloc.allocated_percent
            if running_percent > PERCENT_BASIS:
                raise SupplyExceededError(
                    "Total allocation is greater than the total supply",
                    details={"account": account, "allocated_percent": running_percent},
                )
            staged[account] = alloc

        if self.require_full_allocation and running_percent != PERCENT_BASIS:
            raise IncompleteAllocationError(
                "Allocations must cover the whole supply",
                details={"allocated_percent": running_percent},
            )

        self.asset_contract_identifier = asset_contract_identifier
        self.total_supply = total_supply
        self.allocations = staged
        self.initialized = True

        logger.info(
            "Vesting ledger initialized",
            extra={
                "event": "vesting.ledger_initialized",
                "asset_contract": asset_contract_identifier,
                "total_supply": total_supply,
                "accounts": len(staged),
                "allocated_percent": running_percent,
            },
        )
        return self

    # ==================== View Functions ====================

    @property
    def total_allocated_percent(self) -> int:
        return sum(alloc.allocated_percent for alloc in self.allocations.values())

    @property
    def is_fully_allocated(self) -> bool:
        return self.total_allocated_percent == PERCENT_BASIS

    def has_account(self, account: str) -> bool:
        return account in self.allocations

    def get_allocation(self, account: str) -> Allocation:
        """Return a copy of the validated allocation for ``account``."""
        return replace(self._checked_allocation(account))

    def tokens_from_percent(self, percent: int) -> int:
        return tokens_from_percent(percent, self.total_supply)

    def tokens_to_percent(self, tokens: int) -> int:
        return tokens_to_percent(tokens, self.total_supply)

    def compute_claimable(self, account: str, at_time: int) -> int:
        """
        Token units ``account`` may claim at ``at_time``.

        The vested share is computed in percent units, then converted to
        tokens together with the initial release; the claimed percent is
        converted separately and subtracted.

        Raises:
            UnknownAccountError: If no allocation exists
            InvalidAllocationError: If the stored record is corrupted
        """
        alloc = self._checked_allocation(account)
        # The initial release unlocks at vesting start, not before.
        if at_time < alloc.vesting_start_time:
            return 0
        claimable = (
            self.tokens_from_percent(vested_percent(alloc, at_time))
            + self.tokens_from_percent(alloc.initial_release)
            - self.tokens_from_percent(alloc.claimed)
        )
        # Truncation can leave the recorded claim one unit ahead of the
        # vested share; that reads as nothing claimable, never negative.
        return max(claimable, 0)

    def list_allocations(self) -> list[tuple[str, Allocation]]:
        """Allocations in insertion order, as copies."""
        return [(account, replace(alloc)) for account, alloc in self.allocations.items()]

    # ==================== State-Changing Functions ====================

    def commit_claim(self, account: str, token_amount: int) -> None:
        """
        Record a confirmed transfer of ``token_amount`` to ``account``.

        Raises:
            UnknownAccountError: If no allocation exists
            InvalidAllocationError: If the stored record is corrupted
            OverdrawError: If claimed would pass the allocation
        """
        alloc = self._checked_allocation(account)
        if not isinstance(token_amount, int) or isinstance(token_amount, bool) or token_amount < 0:
            raise ClaimError(
                "Claim amount must be a non-negative integer",
                details={"account": account, "amount": token_amount},
            )

        percent_amount = self.tokens_to_percent(token_amount)
        if alloc.claimed + percent_amount > alloc.allocated_percent:
            raise OverdrawError(
                "Total claimed is greater than allocated_percent",
                details={
                    "account": account,
                    "amount": token_amount,
                    "claimed": alloc.claimed,
                    "percent_amount": percent_amount,
                    "allocated_percent": alloc.allocated_percent,
                },
            )

        alloc.claimed += percent_amount
        logger.debug(
            "Claim committed",
            extra={
                "event": "vesting.claim_committed",
                "account": account,
                "amount": token_amount,
                "percent_amount": percent_amount,
                "claimed": alloc.claimed,
            },
        )

    # ==================== Helpers ====================

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise NotInitializedError("The ledger is not initialized")

    def _checked_allocation(self, account: str) -> Allocation:
        self._require_initialized()
        alloc = self.allocations.get(account)
        if alloc is None:
            raise UnknownAccountError(f"No allocation for account {account}", account=account)
        validate_allocation(alloc, account)
        return alloc

    # ==================== Serialization ====================

    def to_dict(self) -> dict[str, Any]:
        """Serialize ledger state to dictionary."""
        return {
            "deployer": self.deployer,
            "require_full_allocation": self.require_full_allocation,
            "asset_contract_identifier": self.asset_contract_identifier,
            "total_supply": self.total_supply,
            "initialized": self.initialized,
            "allocations": [
                {"account": account, **alloc.to_dict()}
                for account, alloc in self.allocations.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AllocationLedger":
        """
        Deserialize ledger state, re-checking every invariant.

        Raises:
            InvalidAllocationError: If a record is corrupted
            SupplyExceededError: If the stored allocations pass 100.00%
        """
        ledger = cls(
            deployer=data.get("deployer", DEFAULT_DEPLOYER_ACCOUNT),
            require_full_allocation=data.get("require_full_allocation", False),
        )
        if not data.get("initialized", False):
            return ledger

        total_supply = data.get("total_supply")
        if not isinstance(total_supply, int) or isinstance(total_supply, bool) or total_supply <= 0:
            raise InvalidAllocationError("Total supply must be a positive integer")

        allocations: dict[str, Allocation] = {}
        running_percent = 0
        for entry in data.get("allocations", []):
            account = entry.get("account")
            if not account or account in allocations:
                raise InvalidAllocationError(
                    "Allocation record has a missing or duplicate account",
                    details={"account": account},
                )
            alloc = Allocation.from_dict(entry)
            validate_allocation(alloc, account)
            running_percent += alloc.allocated_percent
            if running_percent > PERCENT_BASIS:
                raise SupplyExceededError(
                    "Total allocation is greater than the total supply",
                    details={"account": account, "allocated_percent": running_percent},
                )
            allocations[account] = alloc

        ledger.asset_contract_identifier = data.get("asset_contract_identifier")
        ledger.total_supply = total_supply
        ledger.allocations = allocations
        ledger.initialized = True
        return ledger
