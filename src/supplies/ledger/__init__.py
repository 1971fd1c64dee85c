"""Quantity ledger factory.

Provides get_ledger() / set_ledger() to swap implementations. The default
ledger is built from the ``[custom]`` section of the domain config:

- LEDGER_STRATEGY: "atomic" (default) or "best_effort"
- LEDGER_FALLBACK_ENABLED: fall back to best effort on LedgerConflict
- LEDGER_MAX_RETRIES: compare-and-set attempts before giving up
"""

from protean.utils.globals import current_domain

from supplies.ledger.ledger import LedgerResult, QuantityLedger
from supplies.ledger.strategies import (
    AtomicLedgerStrategy,
    BestEffortLedgerStrategy,
    LedgerStrategy,
)

_current_ledger: QuantityLedger | None = None


def build_ledger(config: dict | None = None) -> QuantityLedger:
    config = config or {}
    max_retries = config.get("LEDGER_MAX_RETRIES", 3)

    if config.get("LEDGER_STRATEGY", "atomic") == "best_effort":
        return QuantityLedger(BestEffortLedgerStrategy())

    fallback = BestEffortLedgerStrategy() if config.get("LEDGER_FALLBACK_ENABLED", True) else None
    return QuantityLedger(AtomicLedgerStrategy(max_retries=max_retries), fallback=fallback)


def get_ledger() -> QuantityLedger:
    """Return the active ledger, building it from domain config on first use."""
    global _current_ledger
    if _current_ledger is None:
        _current_ledger = build_ledger(current_domain.config.get("custom") or {})
    return _current_ledger


def set_ledger(ledger: QuantityLedger) -> None:
    """Override the active ledger (useful for tests)."""
    global _current_ledger
    _current_ledger = ledger


def reset_ledger() -> None:
    """Drop the active ledger so the next call rebuilds it from config."""
    global _current_ledger
    _current_ledger = None


__all__ = [
    "AtomicLedgerStrategy",
    "BestEffortLedgerStrategy",
    "LedgerResult",
    "LedgerStrategy",
    "QuantityLedger",
    "build_ledger",
    "get_ledger",
    "reset_ledger",
    "set_ledger",
]
