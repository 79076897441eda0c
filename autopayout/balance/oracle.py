
# autopayout/balance/oracle.py
from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from settings import settings


class BalanceOracle(Protocol):
    def get_balance(self) -> Decimal: ...


class StaticBalanceOracle:
    """
    Stand-in until a real balance lookup exists: reports a fixed,
    configured balance.
    """

    def __init__(self, balance: Decimal | None = None):
        self.balance = Decimal(settings.STATIC_BALANCE if balance is None else balance)

    def get_balance(self) -> Decimal:
        return self.balance
