"""
Vesting ledger constants.

Percentages are fixed-point integers with two implied decimal digits, so
10000 stands for 100.00%. Timestamps and durations are integer nanoseconds.

NOTE: Changing PERCENT_BASIS changes every claimable amount the ledger
produces. Existing snapshots become unreadable with a different basis.
"""

from typing import Final

# =============================================================================
# FIXED-POINT PERCENT
# =============================================================================

PERCENT_DECIMALS: Final[int] = 2
PERCENT_BASIS: Final[int] = 10_000  # 100.00%

# =============================================================================
# TIME (nanoseconds)
# =============================================================================

NANOS_PER_SECOND: Final[int] = 1_000_000_000
NANOS_PER_DAY: Final[int] = 86_400 * NANOS_PER_SECOND

# =============================================================================
# DEPLOYMENT
# =============================================================================

# Identity allowed to initialize a ledger when none is configured
DEFAULT_DEPLOYER_ACCOUNT: Final[str] = "token-factory.tokenhub.testnet"

# Snapshot format written by LedgerStorage
SNAPSHOT_VERSION: Final[str] = "1.0"
