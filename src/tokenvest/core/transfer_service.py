"""
Asset transfer collaborator.

The claim coordinator hands every payout to a TransferService and learns the
outcome later, through a callback carrying the transfer results. The
QueuedTransferService implementation keeps requests in a FIFO queue and
settles them against a local FungibleToken when asked, so the callback always
arrives after request_transfer() has returned.
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Protocol, Sequence

from .contracts.fungible_token import FungibleToken
from .vesting_exceptions import TokenTransferError

logger = logging.getLogger(__name__)


class TransferStatus(Enum):
    """Outcome of a single transfer."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class TransferRequest:
    """Payout of ``amount`` units of ``asset_contract`` to ``receiver``."""

    receiver: str
    amount: int
    asset_contract: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class TransferResult:
    """Result reported back for one transfer request."""

    status: TransferStatus
    request_id: str = ""
    reason: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is TransferStatus.SUCCESS


# Invoked with (receiver, amount, results) once the transfer resolves
TransferCallback = Callable[[str, int, Sequence[TransferResult]], object]


class TransferService(Protocol):
    """External collaborator that moves funds."""

    def request_transfer(self, request: TransferRequest, on_complete: TransferCallback) -> None:
        ...


class QueuedTransferService:
    """
    Transfer service that defers execution until settle() is called.

    Each queued request is executed against the token from the ``sender``
    account; a rejected token transfer becomes a FAILED result instead of an
    exception, and the callback receives exactly one result.
    """

    def __init__(self, token: FungibleToken, sender: str) -> None:
        """
        Args:
            token: Token the payouts are drawn from
            sender: Account holding the vesting supply
        """
        self.token = token
        self.sender = sender
        self._queue: deque[tuple[TransferRequest, TransferCallback]] = deque()
        self._forced_failures: dict[str, str] = {}

    @property
    def pending(self) -> list[TransferRequest]:
        return [request for request, _ in self._queue]

    def request_transfer(self, request: TransferRequest, on_complete: TransferCallback) -> None:
        self._queue.append((request, on_complete))
        logger.debug(
            "Transfer queued",
            extra={
                "event": "transfer.queued",
                "request_id": request.request_id,
                "receiver": request.receiver,
                "amount": request.amount,
            },
        )

    def fail(self, request_id: str, reason: str = "rejected by transfer service") -> None:
        """Force a queued request to resolve as FAILED without touching balances."""
        if request_id not in {request.request_id for request in self.pending}:
            raise KeyError(request_id)
        self._forced_failures[request_id] = reason

    def settle(self, limit: int | None = None) -> list[TransferResult]:
        """
        Execute queued transfers in order and deliver their results.

        Args:
            limit: Maximum number of requests to settle (all when None)

        Returns:
            Results in settlement order
        """
        results: list[TransferResult] = []
        while self._queue and (limit is None or len(results) < limit):
            request, on_complete = self._queue.popleft()
            result = self._execute(request)
            results.append(result)
            on_complete(request.receiver, request.amount, [result])
        return results

    def _execute(self, request: TransferRequest) -> TransferResult:
        forced = self._forced_failures.pop(request.request_id, None)
        if forced is not None:
            return TransferResult(TransferStatus.FAILED, request.request_id, forced)

        if request.asset_contract.lower() != self.token.address.lower():
            return TransferResult(
                TransferStatus.FAILED,
                request.request_id,
                f"unknown asset contract {request.asset_contract}",
            )

        try:
            self.token.transfer(self.sender, request.receiver, request.amount, memo=request.request_id)
        except TokenTransferError as exc:
            logger.warning(
                "Transfer failed: %s",
                exc.message,
                extra={"event": "transfer.failed", "request_id": request.request_id},
            )
            return TransferResult(TransferStatus.FAILED, request.request_id, exc.message)

        return TransferResult(TransferStatus.SUCCESS, request.request_id)
