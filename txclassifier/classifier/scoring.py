"""Shared scoring helpers for detectors.

Every detector scores evidence the same way: fixed additive weights,
a family ceiling, and suppression when the total is not positive.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Optional

from ..constants import ZERO_ADDRESS, TransactionType
from .models import Log, ProtocolMatch, Receipt, Transaction

# Confidences are rounded so identical evidence yields identical floats.
CONFIDENCE_PRECISION = 4


class SignalScore:
    """Additive evidence accumulator capped at a family ceiling."""

    def __init__(self, ceiling: float):
        if not 0 < ceiling <= 1:
            raise ValueError(f"ceiling must be in (0, 1], got {ceiling}")
        self.ceiling = ceiling
        self.total = 0.0
        self.reasons: list[str] = []

    def add(self, weight: float, reason: str) -> None:
        self.total += weight
        self.reasons.append(reason)

    def penalize(self, weight: float, reason: str) -> None:
        self.total -= abs(weight)
        self.reasons.append(reason)

    @property
    def confidence(self) -> float:
        return round(min(self.total, self.ceiling), CONFIDENCE_PRECISION)

    def to_match(self, label: str, tx_type: TransactionType) -> Optional[ProtocolMatch]:
        """Finalize into a match, or None when the evidence nets out non-positive."""
        confidence = self.confidence
        if confidence <= 0:
            return None
        return ProtocolMatch(
            name=label,
            confidence=confidence,
            type=tx_type,
            reasons=tuple(self.reasons),
        )


def call_target(tx: Transaction) -> Optional[str]:
    to = getattr(tx, "to", None)
    if isinstance(to, str) and to:
        return to.lower()
    return None


def call_selector(tx: Transaction) -> Optional[str]:
    try:
        return tx.selector
    except AttributeError:
        return None


def iter_logs(receipt: Receipt) -> Iterator[Log]:
    """Yield well-formed logs in execution order."""
    logs = getattr(receipt, "logs", None)
    if not isinstance(logs, tuple):
        return
    for log in logs:
        if isinstance(log, Log):
            yield log


def log_emitter(log: Log) -> Optional[str]:
    if isinstance(log.address, str) and log.address:
        return log.address.lower()
    return None


def topic_at(log: Log, index: int) -> Optional[str]:
    if index >= len(log.topics):
        return None
    value = log.topics[index]
    return value.lower() if isinstance(value, str) else None


def topic_address(topic: Optional[str]) -> Optional[str]:
    """Extract the address packed into an indexed 32-byte topic."""
    if not topic or len(topic) != 66:
        return None
    return "0x" + topic[-40:]


def is_zero_address(value: Any) -> bool:
    return isinstance(value, str) and value.lower() == ZERO_ADDRESS
