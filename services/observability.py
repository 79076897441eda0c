from __future__ import annotations

import logging
from contextvars import ContextVar


_chain_id: ContextVar[str | None] = ContextVar("chain_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [chain=%(chain_id)s]: %(message)s"


def set_chain_id(value: str | None) -> None:
    _chain_id.set(value)


def get_chain_id() -> str | None:
    return _chain_id.get()


class ChainIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.chain_id = get_chain_id() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, ChainIdFilter) for f in handler.filters):
            handler.addFilter(ChainIdFilter())
