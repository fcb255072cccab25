"""
Allocation table loading.

Reads the allocation set handed to AllocationLedger.initialize() from a YAML
or JSON file:

    asset_contract: "0xabc..."
    total_supply: 1000000
    allocations:
      alice.testnet:
        allocated_percent: "50.00"
        initial_release: 1000
        vesting_start_time: 1700000000s
        vesting_end_time: 1731536000s
        vesting_interval: 30d

Percentages given as integers are fixed-point units (1000 == 10.00%);
strings are human percentages. Times are integer nanoseconds, seconds when
written with an ``s`` suffix, or days with a ``d`` suffix.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .allocation_ledger import AllocationInput
from .constants import NANOS_PER_DAY, NANOS_PER_SECOND
from .units import parse_percent
from .vesting_exceptions import ConfigurationError


@dataclass(frozen=True)
class AllocationTable:
    """Everything needed to initialize a ledger."""

    asset_contract: str
    total_supply: int
    allocations: dict[str, AllocationInput]


def parse_time(value: Any, field_name: str) -> int:
    """Convert a nanosecond integer, or an ``<seconds>s`` or ``<days>d`` string, to nanoseconds."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} cannot be a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.endswith("s"):
                return int(text[:-1]) * NANOS_PER_SECOND
            if text.endswith("d"):
                return int(text[:-1]) * NANOS_PER_DAY
            return int(text)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid {field_name}: {value!r}") from exc
    raise ConfigurationError(f"Invalid {field_name}: {value!r}")


def parse_allocation(entry: Mapping[str, Any], account: str) -> AllocationInput:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Allocation for {account} must be a mapping")
    try:
        return AllocationInput(
            allocated_percent=parse_percent(entry["allocated_percent"]),
            initial_release=parse_percent(entry.get("initial_release", 0)),
            vesting_start_time=parse_time(entry["vesting_start_time"], "vesting_start_time"),
            vesting_end_time=parse_time(entry["vesting_end_time"], "vesting_end_time"),
            vesting_interval=parse_time(entry["vesting_interval"], "vesting_interval"),
        )
    except KeyError as exc:
        raise ConfigurationError(f"Allocation for {account} is missing {exc.args[0]}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Allocation for {account}: {exc}") from exc


def parse_allocation_table(data: Any) -> AllocationTable:
    """Validate the shape of a decoded allocation document."""
    if not isinstance(data, Mapping):
        raise ConfigurationError("Allocation file must contain a mapping")

    asset_contract = data.get("asset_contract")
    if not asset_contract or not isinstance(asset_contract, str):
        raise ConfigurationError("asset_contract is required")

    total_supply = data.get("total_supply")
    if isinstance(total_supply, str) and total_supply.strip().isdigit():
        total_supply = int(total_supply.strip())
    if not isinstance(total_supply, int) or isinstance(total_supply, bool) or total_supply <= 0:
        raise ConfigurationError("total_supply must be a positive integer")

    raw_allocations = data.get("allocations")
    if not isinstance(raw_allocations, Mapping) or not raw_allocations:
        raise ConfigurationError("allocations must be a non-empty mapping")

    allocations = {
        str(account): parse_allocation(entry, str(account))
        for account, entry in raw_allocations.items()
    }
    return AllocationTable(asset_contract, total_supply, allocations)


def load_allocation_file(path: str | Path) -> AllocationTable:
    """
    Load an allocation table from a ``.yaml``/``.yml`` or ``.json`` file.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read allocation file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot parse allocation file {path}: {exc}") from exc

    return parse_allocation_table(data)
