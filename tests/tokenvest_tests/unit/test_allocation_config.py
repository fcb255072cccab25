"""
Unit tests for allocation file loading.
"""

import json

import pytest

from tokenvest.core.allocation_config import load_allocation_file, parse_time
from tokenvest.core.allocation_ledger import AllocationInput
from tokenvest.core.constants import NANOS_PER_DAY, NANOS_PER_SECOND
from tokenvest.core.vesting_exceptions import ConfigurationError

YAML_TABLE = """
asset_contract: "0xabc"
total_supply: 1000000
allocations:
  alice.testnet:
    allocated_percent: "50.00"
    initial_release: 1000
    vesting_start_time: 100s
    vesting_end_time: 1100s
    vesting_interval: 100s
  bob.testnet:
    allocated_percent: 12.5
    vesting_start_time: 0
    vesting_end_time: 1000
    vesting_interval: 10
"""


def test_load_yaml_table(tmp_path):
    path = tmp_path / "allocations.yaml"
    path.write_text(YAML_TABLE)

    table = load_allocation_file(path)
    assert table.asset_contract == "0xabc"
    assert table.total_supply == 1_000_000
    assert list(table.allocations) == ["alice.testnet", "bob.testnet"]
    assert table.allocations["alice.testnet"] == AllocationInput(
        allocated_percent=5000,
        initial_release=1000,
        vesting_start_time=100 * NANOS_PER_SECOND,
        vesting_end_time=1100 * NANOS_PER_SECOND,
        vesting_interval=100 * NANOS_PER_SECOND,
    )
    assert table.allocations["bob.testnet"].allocated_percent == 1250
    assert table.allocations["bob.testnet"].initial_release == 0


def test_load_json_table(tmp_path):
    path = tmp_path / "allocations.json"
    path.write_text(json.dumps({
        "asset_contract": "0xabc",
        "total_supply": "500",
        "allocations": {
            "carol": {
                "allocated_percent": 10000,
                "vesting_start_time": 1,
                "vesting_end_time": 2,
                "vesting_interval": 1,
            }
        },
    }))
    table = load_allocation_file(path)
    assert table.total_supply == 500
    assert table.allocations["carol"].allocated_percent == 10_000


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "asset_contract: x\ntotal_supply: 0\nallocations: {a: {}}\n",
        "asset_contract: x\ntotal_supply: 10\nallocations: {}\n",
        "asset_contract: x\ntotal_supply: 10\nallocations: {a: {allocated_percent: 1}}\n",
        "asset_contract: x\ntotal_supply: 10\nallocations:\n  a: {allocated_percent: '200', vesting_start_time: 0, vesting_end_time: 1, vesting_interval: 1}\n",
        "allocations: [unclosed\n",
    ],
)
def test_invalid_tables_rejected(tmp_path, content):
    path = tmp_path / "allocations.yml"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_allocation_file(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_allocation_file(tmp_path / "nope.yaml")


def test_parse_time():
    assert parse_time(5, "t") == 5
    assert parse_time("7s", "t") == 7 * NANOS_PER_SECOND
    assert parse_time("30d", "t") == 30 * NANOS_PER_DAY
    assert parse_time("42", "t") == 42
    with pytest.raises(ConfigurationError):
        parse_time("soon", "t")
    with pytest.raises(ConfigurationError):
        parse_time(1.5, "t")
