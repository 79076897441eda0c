from __future__ import annotations

from decimal import Decimal

from autopayout.balance.oracle import StaticBalanceOracle
from autopayout.workers.payout_job import check_balance_and_send_payout


class FakeQueue:
    def __init__(self):
        self.submitted: list[Decimal] = []

    def submit(self, amount, recipient=None):
        self.submitted.append(amount)
        return "sub-1"


class BrokenOracle:
    def get_balance(self):
        raise ConnectionError("balance service unreachable")


def test_surplus_above_reserve_is_queued():
    queue = FakeQueue()

    amount = check_balance_and_send_payout(StaticBalanceOracle(Decimal("150.00")), queue, minimum_reserve=Decimal("20.00"))

    assert amount == Decimal("130.00")
    assert queue.submitted == [Decimal("130.00")]


def test_low_balance_queues_nothing(caplog):
    caplog.set_level("INFO")
    queue = FakeQueue()

    amount = check_balance_and_send_payout(StaticBalanceOracle(Decimal("15.00")), queue, minimum_reserve=Decimal("20.00"))

    assert amount is None
    assert queue.submitted == []
    assert "Balance too low. Current balance: 15.00. Minimum required: 20.00." in caplog.text


def test_balance_equal_to_reserve_queues_nothing():
    queue = FakeQueue()

    assert check_balance_and_send_payout(StaticBalanceOracle(Decimal("20")), queue, minimum_reserve=Decimal("20")) is None
    assert queue.submitted == []


def test_oracle_failure_skips_the_run(caplog):
    queue = FakeQueue()

    assert check_balance_and_send_payout(BrokenOracle(), queue, minimum_reserve=Decimal("20")) is None
    assert queue.submitted == []
    assert "Balance lookup failed" in caplog.text


def test_back_to_back_runs_each_queue_a_payout():
    queue = FakeQueue()
    oracle = StaticBalanceOracle(Decimal("150.00"))

    check_balance_and_send_payout(oracle, queue, minimum_reserve=Decimal("20.00"))
    check_balance_and_send_payout(oracle, queue, minimum_reserve=Decimal("20.00"))

    assert queue.submitted == [Decimal("130.00"), Decimal("130.00")]


def test_sub_cent_surplus_is_not_queued(caplog):
    queue = FakeQueue()

    amount = check_balance_and_send_payout(StaticBalanceOracle(Decimal("20.004")), queue, minimum_reserve=Decimal("20.00"))

    assert amount is None
    assert queue.submitted == []
    assert "Not queueing payout" in caplog.text
