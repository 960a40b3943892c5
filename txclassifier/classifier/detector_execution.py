"""Account-abstraction and multisig execution detector.

These wrappers say *how* a transaction was executed rather than *what*
it did, so the family carries a low ceiling and a low priority: any
detector that recognises the inner action should win.
"""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, iter_logs

FAMILY = "execution"

ENTRY_POINT_WEIGHT = 0.25
SELECTOR_WEIGHT = 0.15
EVENT_WEIGHT = 0.15
CEILING = 0.30

ACCOUNT_ABSTRACTION = "account_abstraction"

_LABELS = {
    ACCOUNT_ABSTRACTION: "ERC-4337 Account Abstraction",
    "multisig": "Safe Multisig",
}


class ExecutionDetector:
    id = "execution"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        actions: set[str] = set()
        label = None

        to = call_target(tx)
        entry = self.registry.address(FAMILY, to, getattr(tx, "chain_id", None))
        if entry:
            score.add(ENTRY_POINT_WEIGHT, f"Known entry point: {entry.label}")
            label = entry.label
            actions.add(entry.action or ACCOUNT_ABSTRACTION)

        selector = call_selector(tx)
        method = self.registry.selector(FAMILY, selector)
        if method:
            score.add(SELECTOR_WEIGHT, f"Execution method {selector} ({method})")
            actions.add(method)

        event_actions = {
            signal.action
            for signal in (self.registry.topic(FAMILY, log.topic0) for log in iter_logs(receipt))
            if signal is not None
        }
        if event_actions:
            score.add(EVENT_WEIGHT, "Execution event emitted")
            actions |= event_actions

        if ACCOUNT_ABSTRACTION in actions:
            tx_type = TransactionType.ACCOUNT_ABSTRACTION
            label = label or _LABELS[ACCOUNT_ABSTRACTION]
        else:
            tx_type = TransactionType.MULTISIG_EXECUTION
            label = label or _LABELS["multisig"]

        return score.to_match(label, tx_type)
