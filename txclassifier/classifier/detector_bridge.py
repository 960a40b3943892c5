"""Cross-chain bridge detector."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, iter_logs, log_emitter

FAMILY = "bridge"
GENERIC_LABEL = "Bridge"

ADDRESS_WEIGHT = 0.35
EVENT_WEIGHT = 0.25
INTERNAL_WEIGHT = 0.20
SELECTOR_WEIGHT = 0.15
CEILING = 0.45

_TYPES = {
    "deposit": TransactionType.BRIDGE,
    "withdraw": TransactionType.BRIDGE_WITHDRAW,
}


class BridgeDetector:
    """Detects deposits into and withdrawals out of canonical bridges."""

    id = "bridge"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        label = GENERIC_LABEL
        chain_id = getattr(tx, "chain_id", None)

        to = call_target(tx)
        bridge = self.registry.address(FAMILY, to, chain_id)
        if bridge:
            score.add(ADDRESS_WEIGHT, f"Known bridge: {bridge.label}")
            label = bridge.label

        selector = call_selector(tx)
        selector_action = self.registry.selector(FAMILY, selector)
        if selector_action:
            score.add(SELECTOR_WEIGHT, f"Bridge method {selector} ({selector_action})")

        event_actions: set[str] = set()
        internal = None
        for log in iter_logs(receipt):
            signal = self.registry.topic(FAMILY, log.topic0)
            if signal is not None:
                event_actions.add(signal.action)
            emitter = log_emitter(log)
            if internal is None and emitter and emitter != to:
                internal = self.registry.address(FAMILY, emitter, chain_id)

        if event_actions:
            score.add(EVENT_WEIGHT, "Bridge event emitted")
        if internal:
            score.add(INTERNAL_WEIGHT, f"Interaction with {internal.label}")
            if label == GENERIC_LABEL:
                label = internal.label

        if "deposit" in event_actions:
            direction = "deposit"
        elif "withdraw" in event_actions:
            direction = "withdraw"
        else:
            direction = selector_action or "deposit"

        return score.to_match(label, _TYPES.get(direction, TransactionType.BRIDGE))
