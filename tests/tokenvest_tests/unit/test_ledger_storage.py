"""
Unit tests for LedgerStorage snapshots.
"""

import hashlib
import json

import pytest

from tokenvest.core.config import NetworkType, VestingSettings
from tokenvest.core.ledger_storage import LedgerStorage
from tokenvest.core.vesting_exceptions import (
    CorruptedSnapshotError,
    InvalidAllocationError,
)


@pytest.fixture
def storage(tmp_path):
    return LedgerStorage(str(tmp_path / "vesting"))


def test_load_without_snapshot(storage):
    assert storage.exists() is False
    assert storage.load() is None


def test_save_and_load_preserves_state(storage, ledger):
    ledger.commit_claim("alice", 100_000)
    checksum = storage.save(ledger)

    restored = storage.load()
    assert len(checksum) == 64
    assert restored.initialized is True
    assert restored.list_allocations() == ledger.list_allocations()
    assert restored.compute_claimable("alice", 500) == ledger.compute_claimable("alice", 500)


def test_tampered_snapshot_fails_checksum(storage, ledger):
    storage.save(ledger)
    with open(storage.snapshot_file) as f:
        package = json.load(f)
    package["ledger"]["allocations"][0]["claimed"] = 0
    package["ledger"]["total_supply"] = 2_000_000
    with open(storage.snapshot_file, "w") as f:
        json.dump(package, f)

    with pytest.raises(CorruptedSnapshotError):
        storage.load()


def test_unparseable_snapshot(storage):
    with open(storage.snapshot_file, "w") as f:
        f.write("{not json")
    with pytest.raises(CorruptedSnapshotError):
        storage.load()


def test_invariants_rechecked_on_load(storage, ledger):
    storage.save(ledger)
    with open(storage.snapshot_file) as f:
        package = json.load(f)
    package["ledger"]["allocations"][0]["claimed"] = 9000
    canonical = json.dumps(package["ledger"], indent=2, sort_keys=True)
    package["metadata"]["checksum"] = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    with open(storage.snapshot_file, "w") as f:
        json.dump(package, f)

    with pytest.raises(InvalidAllocationError):
        storage.load()


def test_storage_from_settings_uses_state_dir(tmp_path, ledger):
    settings = VestingSettings(
        network=NetworkType.TESTNET,
        deployer_account="token-factory.tokenhub.testnet",
        require_full_allocation=False,
        log_level="INFO",
        log_file="",
        state_dir=str(tmp_path / "state"),
    )
    storage = LedgerStorage.from_settings(settings)
    storage.save(ledger)

    assert (tmp_path / "state" / "ledger.json").exists()
    assert storage.load().list_allocations() == ledger.list_allocations()
