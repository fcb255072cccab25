"""
tokenvest Core Module

Core functionality for the vesting ledger including:
- Allocation ledger and fixed-point unit helpers
- Two-phase claim coordination
- Local fungible token and queued transfer service
- Snapshot persistence, configuration, logging and metrics
"""

from .allocation_ledger import Allocation, AllocationInput, AllocationLedger, validate_allocation
from .claim_coordinator import ClaimCoordinator, ClaimState, PendingClaim
from .transfer_service import QueuedTransferService, TransferRequest, TransferResult, TransferStatus
from .vesting_contract import AccountView, VestingContract

__all__ = [
    "Allocation",
    "AllocationInput",
    "AllocationLedger",
    "validate_allocation",
    "ClaimCoordinator",
    "ClaimState",
    "PendingClaim",
    "QueuedTransferService",
    "TransferRequest",
    "TransferResult",
    "TransferStatus",
    "AccountView",
    "VestingContract",
]
