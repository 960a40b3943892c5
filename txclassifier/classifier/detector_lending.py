"""Lending market detector (Aave / Compound style pools)."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, iter_logs, log_emitter

FAMILY = "lending"
GENERIC_LABEL = "Lending"

POOL_WEIGHT = 0.35
EVENT_WEIGHT = 0.25
INTERNAL_WEIGHT = 0.20
SELECTOR_WEIGHT = 0.15
CEILING = 0.45

# Most significant action first
ACTION_PRECEDENCE = ("liquidation", "borrow", "repay", "withdraw", "deposit")

_TYPES = {
    "liquidation": TransactionType.LENDING_LIQUIDATION,
    "borrow": TransactionType.LENDING_BORROW,
    "repay": TransactionType.LENDING_REPAY,
    "withdraw": TransactionType.LENDING_WITHDRAW,
    "deposit": TransactionType.LENDING_DEPOSIT,
}


class LendingDetector:
    id = "lending"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        label = GENERIC_LABEL
        chain_id = getattr(tx, "chain_id", None)

        to = call_target(tx)
        pool = self.registry.address(FAMILY, to, chain_id)
        if pool:
            score.add(POOL_WEIGHT, f"Known lending pool: {pool.label}")
            label = pool.label

        selector = call_selector(tx)
        selector_action = self.registry.selector(FAMILY, selector)
        if selector_action:
            score.add(SELECTOR_WEIGHT, f"Lending method {selector} ({selector_action})")

        event_actions: set[str] = set()
        event_label = None
        internal = None
        for log in iter_logs(receipt):
            signal = self.registry.topic(FAMILY, log.topic0)
            if signal is not None:
                event_actions.add(signal.action)
                event_label = event_label or signal.label
            emitter = log_emitter(log)
            if internal is None and emitter and emitter != to:
                internal = self.registry.address(FAMILY, emitter, chain_id)

        if event_actions:
            score.add(EVENT_WEIGHT, "Lending event emitted")
        if internal:
            score.add(INTERNAL_WEIGHT, f"Interaction with {internal.label}")

        if label == GENERIC_LABEL:
            if internal:
                label = internal.label
            elif event_label:
                label = event_label

        action = next((a for a in ACTION_PRECEDENCE if a in event_actions), selector_action)
        return score.to_match(label, _TYPES.get(action, TransactionType.LENDING_DEPOSIT))
