from __future__ import annotations

import argparse
from decimal import Decimal, InvalidOperation

from autopayout.payouts.policy import decide
from main import build_daemon
from services.metrics import render_prometheus
from services.observability import configure_logging
from settings import settings, validate_env_settings


def _amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if amount <= 0:
        raise argparse.ArgumentTypeError("amount must be positive")
    return amount


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the payout job once and wait for the chain to finish.")
    parser.add_argument("--amount", type=_amount, default=None, help="send this amount, skipping the balance check")
    parser.add_argument("--recipient", default=None, help="override RECIPIENT_EMAIL")
    parser.add_argument("--dry-run", action="store_true", help="only print the policy decision")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    if args.dry_run:
        amount = args.amount or decide(settings.STATIC_BALANCE, settings.MINIMUM_RESERVE)
        print("decision:", amount if amount is not None else "no payout")
        return

    validate_env_settings()
    daemon = build_daemon()
    try:
        if args.amount is not None:
            daemon.queue.submit(args.amount, recipient=args.recipient)
        elif args.recipient:
            amount = decide(daemon.oracle.get_balance(), settings.MINIMUM_RESERVE)
            if amount is not None:
                daemon.queue.submit(amount, recipient=args.recipient)
        else:
            daemon.run_job()

        daemon.queue.join()
    finally:
        daemon.shutdown()

    for state in daemon.queue.history:
        print(
            "result:",
            f"phase={state.phase}",
            f"attempts={state.retry_count + 1}",
            f"transaction_id={state.transaction_id}",
            f"last_error={state.last_error}",
        )
    print("recorder:", daemon.recorder.destination)
    print(render_prometheus(), end="")


if __name__ == "__main__":
    main()
