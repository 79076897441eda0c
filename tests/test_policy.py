from decimal import Decimal

import pytest

from autopayout.payouts.policy import decide


def test_balance_above_reserve_sends_difference():
    assert decide(Decimal("150.00"), Decimal("20.00")) == Decimal("130.00")


def test_balance_below_reserve_sends_nothing(caplog):
    caplog.set_level("INFO")
    assert decide(Decimal("15.00"), Decimal("20.00")) is None
    assert "Balance too low" in caplog.text


def test_balance_equal_to_reserve_sends_nothing():
    assert decide(Decimal("20.00"), Decimal("20.00")) is None


@pytest.mark.parametrize(
    "balance, reserve",
    [
        ("0", "0"),
        ("0.01", "0"),
        ("20.01", "20.00"),
        ("1000000.10", "0.05"),
        ("19.99", "20.00"),
    ],
)
def test_decide_is_exact(balance, reserve):
    b, r = Decimal(balance), Decimal(reserve)
    result = decide(b, r)
    if b <= r:
        assert result is None
    else:
        assert result == b - r
        assert result > 0
