# autopayout/payouts/policy.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

logger = logging.getLogger("autopayout.policy")


def decide(balance: Decimal, minimum_reserve: Decimal) -> Optional[Decimal]:
    """
    Amount to disburse, keeping minimum_reserve in the account.
    None when the balance does not exceed the reserve.
    """
    balance = Decimal(balance)
    minimum_reserve = Decimal(minimum_reserve)

    if balance <= minimum_reserve:
        logger.info(
            "Balance too low. Current balance: %s. Minimum required: %s.",
            balance,
            minimum_reserve,
        )
        return None

    amount = balance - minimum_reserve
    logger.info("Balance is sufficient, sending %s to recipient.", amount)
    return amount
