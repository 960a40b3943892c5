"""On-chain governance detector (Governor Bravo / OpenZeppelin Governor)."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, iter_logs

FAMILY = "governance"
GENERIC_LABEL = "Governance"

CONTRACT_WEIGHT = 0.35
EVENT_WEIGHT = 0.25  # counted once
SELECTOR_WEIGHT = 0.20
CEILING = 0.45

_TYPES = {
    "vote": TransactionType.GOVERNANCE_VOTE,
    "propose": TransactionType.GOVERNANCE_PROPOSE,
    "delegate": TransactionType.GOVERNANCE_DELEGATE,
    "execute": TransactionType.GOVERNANCE_EXECUTE,
}


class GovernanceDetector:
    id = "governance"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        label = GENERIC_LABEL

        selector = call_selector(tx)
        action = self.registry.selector(FAMILY, selector)
        if action:
            score.add(SELECTOR_WEIGHT, f"Governance method {selector} ({action})")

        first_event = None
        for log in iter_logs(receipt):
            signal = self.registry.topic(FAMILY, log.topic0)
            if signal is not None:
                first_event = signal.action
                break
        if first_event:
            score.add(EVENT_WEIGHT, f"Governance event emitted ({first_event})")
            action = action or first_event

        to = call_target(tx)
        contract = self.registry.address(FAMILY, to, getattr(tx, "chain_id", None))
        if contract:
            score.add(CONTRACT_WEIGHT, f"Known governance contract: {contract.label}")
            label = contract.label

        return score.to_match(label, _TYPES.get(action, TransactionType.GOVERNANCE_VOTE))
