"""
Vesting-specific exception hierarchy for tokenvest.

Every rejected operation raises one of these typed exceptions so callers can
tell a normal rejection (nothing to claim yet) apart from corrupted state or
a fatal ledger inconsistency.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VestingError(Exception):
    """Base exception for all vesting ledger errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the caller may retry the operation later
    """

    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if recoverable is not None:
            self.recoverable = recoverable


# ==================== Allocation & Setup Errors ====================


class LedgerSetupError(VestingError):
    """Raised when a ledger cannot be initialized."""
    pass


class InvalidAllocationError(LedgerSetupError):
    """Raised when an allocation violates a schedule invariant.

    Fatal during initialization; at read time it means the stored record is
    corrupted and no financial output may be produced from it.
    """
    pass


class SupplyExceededError(LedgerSetupError):
    """Raised when cumulative allocated percent would pass 100.00%."""
    pass


class IncompleteAllocationError(LedgerSetupError):
    """Raised when full allocation is required but the percentages do not sum to 100.00%."""
    pass


class AlreadyInitializedError(LedgerSetupError):
    """Raised when initialize is called on an initialized ledger."""
    pass


class NotInitializedError(VestingError):
    """Raised when a ledger is used before it has been initialized."""
    pass


class UnauthorizedError(VestingError):
    """Raised when the caller is not the designated deployer."""
    pass


class UnknownAccountError(VestingError):
    """Raised when no allocation exists for an account."""

    def __init__(self, message: str, account: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.account = account


# ==================== Claim Errors ====================


class ClaimError(VestingError):
    """Raised when a claim is rejected."""
    pass


class NothingToClaimError(ClaimError):
    """Raised when the claimable amount is zero."""
    recoverable = True


class ClaimInProgressError(ClaimError):
    """Raised when a transfer for the account is still outstanding."""
    recoverable = True


class OverdrawError(ClaimError):
    """Raised when a commit would push claimed past the allocation.

    During confirmation this is fatal: funds already moved but the ledger
    cannot record them. Requires operator intervention.
    """
    recoverable = False


# ==================== Callback Errors ====================


class CallbackError(VestingError):
    """Raised when a transfer confirmation callback is rejected."""
    pass


class MalformedCallbackError(CallbackError):
    """Raised when a callback does not carry exactly one transfer result."""
    pass


class UnexpectedCallbackError(CallbackError):
    """Raised when a callback matches no outstanding transfer."""
    pass


# ==================== Token Errors ====================


class TokenTransferError(VestingError):
    """Raised when the local fungible token rejects an operation."""
    recoverable = True


# ==================== Storage & Configuration Errors ====================


class StorageError(VestingError):
    """Raised when snapshot storage operations fail."""
    pass


class CorruptedSnapshotError(StorageError):
    """Raised when a stored snapshot fails its checksum or cannot be parsed."""
    recoverable = False


class ConfigurationError(VestingError):
    """Raised when configuration or an allocation file is invalid."""
    recoverable = False


# ==================== Utility Functions ====================


def is_fatal_inconsistency(exc: Exception) -> bool:
    """Return True for errors meaning funds moved without a ledger record."""
    return isinstance(exc, OverdrawError) and bool(exc.details.get("transfer_confirmed"))


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, VestingError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    if isinstance(exc, UnknownAccountError) and exc.account:
        context["account"] = exc.account

    return context
