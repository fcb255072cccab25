"""
Unit tests for QueuedTransferService.
"""

import pytest

from tokenvest.core.contracts.fungible_token import FungibleToken
from tokenvest.core.transfer_service import (
    QueuedTransferService,
    TransferRequest,
    TransferStatus,
)


@pytest.fixture
def service():
    token = FungibleToken(name="Vest Token", symbol="VST", owner="owner")
    token.mint("owner", "pool", 1_000)
    return QueuedTransferService(token, "pool")


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, receiver, amount, results):
        self.calls.append((receiver, amount, list(results)))


def test_requests_wait_for_settlement(service):
    recorder = Recorder()
    request = TransferRequest("alice", 100, service.token.address)
    service.request_transfer(request, recorder)

    assert recorder.calls == []
    assert service.pending == [request]
    assert service.token.balance_of("alice") == 0

    service.settle()
    assert service.pending == []
    assert service.token.balance_of("alice") == 100
    receiver, amount, results = recorder.calls[0]
    assert (receiver, amount) == ("alice", 100)
    assert len(results) == 1
    assert results[0].status is TransferStatus.SUCCESS
    assert results[0].request_id == request.request_id


def test_settle_respects_limit_and_order(service):
    recorder = Recorder()
    first = TransferRequest("alice", 1, service.token.address)
    second = TransferRequest("bob", 2, service.token.address)
    service.request_transfer(first, recorder)
    service.request_transfer(second, recorder)

    assert [r.request_id for r in service.settle(limit=1)] == [first.request_id]
    assert service.pending == [second]
    assert [r.request_id for r in service.settle()] == [second.request_id]


def test_forced_failure_moves_nothing(service):
    recorder = Recorder()
    request = TransferRequest("alice", 100, service.token.address)
    service.request_transfer(request, recorder)
    service.fail(request.request_id, "frozen account")

    result = service.settle()[0]
    assert result.status is TransferStatus.FAILED
    assert result.reason == "frozen account"
    assert service.token.balance_of("alice") == 0


def test_fail_unknown_request(service):
    with pytest.raises(KeyError):
        service.fail("missing")


def test_token_rejection_becomes_failed_result(service):
    recorder = Recorder()
    service.request_transfer(TransferRequest("alice", 5_000, service.token.address), recorder)
    result = service.settle()[0]
    assert result.succeeded is False
    assert service.token.balance_of("pool") == 1_000
