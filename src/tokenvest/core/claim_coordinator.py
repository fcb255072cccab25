"""
Claim Coordinator.

Runs the two-phase claim against the external transfer service:

    REQUESTED -> TRANSFER_PENDING -> CONFIRMED | REJECTED

The ledger is never debited before the transfer outcome is known. A
confirmed transfer is committed exactly once; a rejected one leaves the
ledger untouched so the same amount can be claimed again.

Execution is assumed sequential per ledger. The coordinator keeps one
pending record per account and refuses any callback that does not match it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from .allocation_ledger import AllocationLedger
from .transfer_service import TransferRequest, TransferResult, TransferService
from .vesting_exceptions import (
    ClaimInProgressError,
    MalformedCallbackError,
    NothingToClaimError,
    OverdrawError,
    UnexpectedCallbackError,
    get_error_context,
)
from .vesting_metrics import VestingMetrics, get_vesting_metrics

logger = logging.getLogger(__name__)


class ClaimState(Enum):
    """Lifecycle of a claim request."""
    REQUESTED = "requested"
    TRANSFER_PENDING = "transfer_pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


@dataclass
class PendingClaim:
    """Claim waiting for, or resolved by, a transfer outcome."""

    account: str
    amount: int
    requested_at: int
    request_id: str = ""
    state: ClaimState = ClaimState.REQUESTED
    reason: str = ""
    committed: bool = False


class ClaimCoordinator:
    """
    Coordinates claims between an AllocationLedger and a TransferService.
    """

    def __init__(
        self,
        ledger: AllocationLedger,
        transfer_service: TransferService,
        metrics: VestingMetrics | None = None,
    ) -> None:
        self.ledger = ledger
        self.transfer_service = transfer_service
        self.metrics = metrics or get_vesting_metrics()
        self._pending: dict[str, PendingClaim] = {}
        self.history: list[PendingClaim] = []
        self.inconsistencies: list[PendingClaim] = []

    # ==================== View Functions ====================

    def get_pending(self, account: str) -> PendingClaim | None:
        record = self._pending.get(account)
        return replace(record) if record else None

    def pending_claims(self) -> list[PendingClaim]:
        """Outstanding claims, oldest first."""
        return [replace(record) for record in self._pending.values()]

    # ==================== Claim Protocol ====================

    def claim(self, caller_account: str, now: int) -> PendingClaim:
        """
        Start a claim for everything ``caller_account`` can release at ``now``.

        Returns:
            Copy of the pending claim record, in TRANSFER_PENDING state

        Raises:
            ClaimInProgressError: If a transfer for the account is outstanding
            UnknownAccountError: If the account has no allocation
            NothingToClaimError: If nothing is claimable
        """
        if caller_account in self._pending:
            self.metrics.record_claim("in_progress")
            logger.warning(
                "Claim refused: transfer still outstanding",
                extra={
                    "event": "vesting.claim_refused",
                    "account": caller_account,
                    "request_id": self._pending[caller_account].request_id,
                },
            )
            raise ClaimInProgressError(
                "A claim for this account is waiting for its transfer",
                details={"account": caller_account},
            )

        amount = self.ledger.compute_claimable(caller_account, now)
        logger.info(
            "amount to claim = %d",
            amount,
            extra={"event": "vesting.claim_requested", "account": caller_account, "amount": amount},
        )
        if amount == 0:
            self.metrics.record_claim("nothing_to_claim")
            logger.warning(
                "Claim refused: nothing to claim",
                extra={"event": "vesting.claim_refused", "account": caller_account, "at_time": now},
            )
            raise NothingToClaimError(
                "There is nothing to claim at the moment",
                details={"account": caller_account},
            )

        request = TransferRequest(
            receiver=caller_account,
            amount=amount,
            asset_contract=self.ledger.asset_contract_identifier,
        )
        record = PendingClaim(
            account=caller_account,
            amount=amount,
            requested_at=now,
            request_id=request.request_id,
        )
        record.state = ClaimState.TRANSFER_PENDING
        self._pending[caller_account] = record
        self.metrics.set_pending(len(self._pending))

        try:
            self.transfer_service.request_transfer(request, self.on_claim_finished)
        except Exception:
            # The request never left; nothing can confirm it.
            if self._pending.get(caller_account) is record:
                del self._pending[caller_account]
                self.metrics.set_pending(len(self._pending))
            raise

        return replace(record)

    def on_claim_finished(
        self,
        account: str,
        amount: int,
        results: Sequence[TransferResult],
    ) -> bool:
        """
        Resolve the outstanding claim of ``account`` with the transfer outcome.

        Returns:
            True if the claim was committed, False if the transfer was rejected

        Raises:
            MalformedCallbackError: If ``results`` does not hold exactly one result
            UnexpectedCallbackError: If no matching transfer is outstanding
            OverdrawError: Fatal; the transfer succeeded but cannot be recorded
        """
        if len(results) != 1:
            raise MalformedCallbackError(
                "Function called not as a callback",
                details={"account": account, "results": len(results)},
            )

        record = self._pending.get(account)
        result = results[0]
        if (
            record is None
            or record.amount != amount
            or (result.request_id and result.request_id != record.request_id)
        ):
            raise UnexpectedCallbackError(
                "No outstanding transfer matches this callback",
                details={"account": account, "amount": amount, "request_id": result.request_id},
            )

        del self._pending[account]
        self.metrics.set_pending(len(self._pending))
        self.history.append(record)

        if not result.succeeded:
            record.state = ClaimState.REJECTED
            record.reason = result.reason
            self.metrics.record_claim("rejected")
            logger.warning(
                "Claim transfer rejected: %s",
                result.reason or "no reason given",
                extra={
                    "event": "vesting.claim_rejected",
                    "account": account,
                    "amount": amount,
                    "request_id": record.request_id,
                },
            )
            return False

        record.state = ClaimState.CONFIRMED
        try:
            self.ledger.commit_claim(account, amount)
        except OverdrawError as exc:
            self.inconsistencies.append(record)
            self.metrics.record_inconsistency()
            logger.critical(
                "Transfer confirmed but claim cannot be recorded",
                extra={
                    "event": "vesting.ledger_inconsistency",
                    "account": account,
                    "amount": amount,
                    "request_id": record.request_id,
                    **get_error_context(exc),
                },
            )
            raise OverdrawError(
                "Transfer confirmed but the claim cannot be recorded",
                details={**exc.details, "transfer_confirmed": True, "request_id": record.request_id},
            ) from exc

        record.committed = True
        self.metrics.record_confirmed(amount)
        logger.info(
            "Claim confirmed",
            extra={
                "event": "vesting.claim_confirmed",
                "account": account,
                "amount": amount,
                "request_id": record.request_id,
            },
        )
        return True
