"""
tokenvest - Ledger Snapshot Storage

Persists AllocationLedger state with:
- Atomic writes (temp file + rename)
- SHA-256 checksum verification on load
- Invariant re-validation of every loaded allocation
"""

import hashlib
import json
import logging
import os
import time
from typing import Optional

from .allocation_ledger import AllocationLedger
from .config import VestingSettings
from .constants import SNAPSHOT_VERSION
from .vesting_exceptions import CorruptedSnapshotError, StorageError

logger = logging.getLogger(__name__)


class LedgerStorage:
    """
    Snapshot storage for a single ledger.

    The snapshot file holds ``{"metadata": {...}, "ledger": {...}}`` where the
    metadata carries a checksum of the canonical ledger JSON.
    """

    def __init__(self, data_dir: str, filename: str = "ledger.json"):
        """
        Args:
            data_dir: Directory holding the snapshot
            filename: Snapshot file name
        """
        self.data_dir = data_dir
        self.snapshot_file = os.path.join(data_dir, filename)
        os.makedirs(self.data_dir, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: VestingSettings) -> "LedgerStorage":
        """Storage rooted at the configured state directory."""
        return cls(settings.state_dir)

    def _calculate_checksum(self, data: str) -> str:
        return hashlib.sha256(data.encode("utf-8")).hexdigest()

    def _canonical(self, ledger_data: dict) -> str:
        return json.dumps(ledger_data, indent=2, sort_keys=True)

    def exists(self) -> bool:
        return os.path.exists(self.snapshot_file)

    def save(self, ledger: AllocationLedger) -> str:
        """
        Write a snapshot of ``ledger`` atomically.

        Returns:
            Checksum of the stored ledger data

        Raises:
            StorageError: If the snapshot cannot be written
        """
        ledger_data = ledger.to_dict()
        checksum = self._calculate_checksum(self._canonical(ledger_data))
        package = {
            "metadata": {
                "timestamp": time.time(),
                "accounts": len(ledger_data["allocations"]),
                "checksum": checksum,
                "version": SNAPSHOT_VERSION,
            },
            "ledger": ledger_data,
        }

        temp_file = self.snapshot_file + ".tmp"
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                f.write(json.dumps(package, indent=2, sort_keys=True))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_file, self.snapshot_file)
        except OSError as e:
            logger.error(
                "Failed to save ledger snapshot",
                extra={"event": "storage.save_failed", "error": str(e)},
            )
            raise StorageError(f"Failed to save ledger snapshot: {e}") from e

        logger.info(
            "Ledger snapshot saved",
            extra={"event": "storage.saved", "checksum": checksum[:8]},
        )
        return checksum

    def load(self) -> Optional[AllocationLedger]:
        """
        Load the stored ledger, or None when no snapshot exists.

        Raises:
            CorruptedSnapshotError: If the file is unreadable or fails its checksum
            InvalidAllocationError: If a stored allocation breaks an invariant
            SupplyExceededError: If stored allocations pass 100.00%
        """
        if not self.exists():
            return None

        try:
            with open(self.snapshot_file, "r", encoding="utf-8") as f:
                package = json.load(f)
        except json.JSONDecodeError as e:
            raise CorruptedSnapshotError(f"Ledger snapshot is not valid JSON: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read ledger snapshot: {e}") from e

        if not isinstance(package, dict) or "ledger" not in package:
            raise CorruptedSnapshotError("Ledger snapshot has no ledger section")

        metadata = package.get("metadata", {})
        ledger_data = package["ledger"]
        if metadata.get("version") != SNAPSHOT_VERSION:
            raise CorruptedSnapshotError(
                f"Unsupported snapshot version {metadata.get('version')!r}"
            )
        expected = metadata.get("checksum")
        if expected != self._calculate_checksum(self._canonical(ledger_data)):
            raise CorruptedSnapshotError("Ledger snapshot checksum mismatch")

        return AllocationLedger.from_dict(ledger_data)
