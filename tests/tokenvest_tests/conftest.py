import pytest
from prometheus_client import CollectorRegistry

from tokenvest.core.allocation_ledger import AllocationInput, AllocationLedger
from tokenvest.core.contracts.fungible_token import FungibleToken
from tokenvest.core.transfer_service import QueuedTransferService
from tokenvest.core.vesting_contract import VestingContract
from tokenvest.core.vesting_metrics import VestingMetrics

DEPLOYER = "token-factory.tokenhub.testnet"
VESTING_ACCOUNT = "vesting.tokenhub.testnet"
TOTAL_SUPPLY = 1_000_000


class FakeClock:
    """Deterministic nanosecond time source."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, delta: int) -> None:
        self.now += delta


class RecordingTransferService:
    """Transfer service that only records requests; tests resolve them by hand."""

    def __init__(self):
        self.requests = []

    def request_transfer(self, request, on_complete):
        self.requests.append((request, on_complete))


@pytest.fixture
def deployer():
    return DEPLOYER


@pytest.fixture
def total_supply():
    return TOTAL_SUPPLY


@pytest.fixture
def metrics():
    return VestingMetrics(registry=CollectorRegistry())


@pytest.fixture
def allocations():
    """alice vests 50% with 10% up front over 10 intervals; bob starts later."""
    return {
        "alice": AllocationInput(
            allocated_percent=5000,
            initial_release=1000,
            vesting_start_time=0,
            vesting_end_time=1000,
            vesting_interval=100,
        ),
        "bob": AllocationInput(
            allocated_percent=3000,
            initial_release=0,
            vesting_start_time=200,
            vesting_end_time=1200,
            vesting_interval=250,
        ),
    }


@pytest.fixture
def ledger(allocations):
    return AllocationLedger(deployer=DEPLOYER).initialize(
        DEPLOYER, "0xtoken", TOTAL_SUPPLY, allocations
    )


@pytest.fixture
def recording_service():
    return RecordingTransferService()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token():
    token = FungibleToken(name="Vest Token", symbol="VST", owner=DEPLOYER)
    token.mint(DEPLOYER, VESTING_ACCOUNT, TOTAL_SUPPLY)
    return token


@pytest.fixture
def transfer_service(token):
    return QueuedTransferService(token, VESTING_ACCOUNT)


@pytest.fixture
def contract(token, transfer_service, allocations, clock, metrics):
    return VestingContract.deploy(
        DEPLOYER,
        token.address,
        TOTAL_SUPPLY,
        allocations,
        transfer_service,
        deployer=DEPLOYER,
        time_source=clock,
        metrics=metrics,
    )
