"""
tokenvest - Time-Based Token Vesting Ledger

Tracks per-account vesting allocations of a fungible asset, computes the
amount each beneficiary may release at a point in time, and records claims
only after the matching asset transfer is confirmed.

Main Components:
- Allocation Ledger: allocations, supply invariants and claimed totals
- Claim Coordinator: two-phase claim against an external transfer service
- Vesting Contract: query surface and time source bound to one ledger
"""

__version__ = "0.1.0"
__author__ = "tokenvest Development Team"

__all__ = []
