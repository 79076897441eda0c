


# autopayout/payouts/state_machine.py

class InvalidTransition(Exception):
    pass


ALLOWED = {
    "ATTEMPTING": {"ATTEMPTING", "SUCCEEDED", "PERMANENTLY_FAILED", "ABANDONED"},  # ATTEMPTING->ATTEMPTING is a retry
    "SUCCEEDED": set(),
    "PERMANENTLY_FAILED": set(),
    "ABANDONED": set(),
}


def assert_transition(old: str, new: str) -> None:
    if new not in ALLOWED.get(old, set()):
        raise InvalidTransition(f"Illegal attempt transition: {old} -> {new}")


def assert_retry_budget(retry_count: int, max_retries: int) -> None:
    """
    Invariant: attempt n exists only for n in [0, max_retries).
    """
    if retry_count < 0 or retry_count >= max_retries:
        raise InvalidTransition(
            f"Attempt {retry_count} is outside the retry budget (max_retries={max_retries})"
        )
