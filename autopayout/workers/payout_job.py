# autopayout/workers/payout_job.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from autopayout.balance.oracle import BalanceOracle
from autopayout.payouts.model import payout_amount
from autopayout.payouts.policy import decide
from autopayout.workers.single_flight import SingleFlightQueue
from settings import settings

logger = logging.getLogger("autopayout.job")


def check_balance_and_send_payout(
    oracle: BalanceOracle,
    payouts: SingleFlightQueue,
    *,
    minimum_reserve: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """
    Scheduled entry point. Returns the queued amount, or None when nothing
    was queued. Safe to call twice in a row: the queue serializes.
    """
    reserve = settings.MINIMUM_RESERVE if minimum_reserve is None else Decimal(minimum_reserve)

    try:
        balance = oracle.get_balance()
    except Exception:
        logger.exception("Balance lookup failed; skipping this payout run")
        return None

    amount = decide(balance, reserve)
    if amount is None:
        return None

    try:
        amount = payout_amount(amount)
    except ValueError as e:
        logger.error("Not queueing payout: %s", e)
        return None

    payouts.submit(amount)
    return amount
