"""
Vesting Contract.

Binds an AllocationLedger, its ClaimCoordinator and a time source into the
surface callers use: read-only account queries, allocation listing and the
claim entry point. Timestamps always come from the time source, never from
the caller.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Mapping, Sequence

from .allocation_ledger import AllocationInput, AllocationLedger
from .claim_coordinator import ClaimCoordinator, PendingClaim
from .constants import DEFAULT_DEPLOYER_ACCOUNT
from .transfer_service import TransferResult, TransferService
from .vesting_metrics import VestingMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountView:
    """Snapshot of one account's vesting position."""

    account: str
    allocated_percent: int
    initial_release: int
    vesting_start_time: int
    vesting_end_time: int
    vesting_interval: int
    claimed: int
    claimable_amount: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def empty(cls, account: str) -> "AccountView":
        return cls(account, 0, 0, 0, 0, 0, 0, 0)


class VestingContract:
    """Query and claim surface over a single vesting ledger."""

    def __init__(
        self,
        ledger: AllocationLedger,
        transfer_service: TransferService,
        time_source: Callable[[], int] | None = None,
        metrics: VestingMetrics | None = None,
    ) -> None:
        self.ledger = ledger
        self.coordinator = ClaimCoordinator(ledger, transfer_service, metrics)
        self._time_source = time_source or time.time_ns

    @classmethod
    def deploy(
        cls,
        caller: str,
        asset_contract_identifier: str,
        total_supply: int,
        allocations: Mapping[str, AllocationInput],
        transfer_service: TransferService,
        deployer: str = DEFAULT_DEPLOYER_ACCOUNT,
        require_full_allocation: bool = False,
        time_source: Callable[[], int] | None = None,
        metrics: VestingMetrics | None = None,
    ) -> "VestingContract":
        """Create and initialize a ledger, then wrap it in a contract."""
        ledger = AllocationLedger(deployer=deployer, require_full_allocation=require_full_allocation)
        ledger.initialize(caller, asset_contract_identifier, total_supply, allocations)
        return cls(ledger, transfer_service, time_source=time_source, metrics=metrics)

    def _now(self) -> int:
        timestamp = self._time_source()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_source must return an integer timestamp") from exc

    # ==================== Queries ====================

    def check_account(self, account: str) -> AccountView:
        """
        Vesting position of ``account`` at the current time.

        An account without an allocation has zero entitlement and yields an
        all-zero view.
        """
        if not self.ledger.has_account(account):
            return AccountView.empty(account)
        return self._view(account, self._now())

    def get_allocation_list(self) -> list[AccountView]:
        """Vesting positions of every account, in allocation order."""
        now = self._now()
        return [self._view(account, now) for account, _ in self.ledger.list_allocations()]

    def _view(self, account: str, now: int) -> AccountView:
        alloc = self.ledger.get_allocation(account)
        return AccountView(
            account=account,
            allocated_percent=alloc.allocated_percent,
            initial_release=alloc.initial_release,
            vesting_start_time=alloc.vesting_start_time,
            vesting_end_time=alloc.vesting_end_time,
            vesting_interval=alloc.vesting_interval,
            claimed=alloc.claimed,
            claimable_amount=self.ledger.compute_claimable(account, now),
        )

    # ==================== Claims ====================

    def claim(self, caller: str) -> PendingClaim:
        """Claim everything ``caller`` can release now."""
        return self.coordinator.claim(caller, self._now())

    def on_claim_finished(
        self,
        account: str,
        amount: int,
        results: Sequence[TransferResult],
    ) -> bool:
        return self.coordinator.on_claim_finished(account, amount, results)
