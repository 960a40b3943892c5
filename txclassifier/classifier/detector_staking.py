"""Liquid staking and staking-pool detector."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, iter_logs

FAMILY = "staking"
GENERIC_LABEL = "Staking"

CONTRACT_WEIGHT = 0.25
SELECTOR_WEIGHT = 0.15
EVENT_WEIGHT = 0.15
# withdraw(uint256) and friends are too common to stand alone
UNCORROBORATED_PENALTY = 0.15
CEILING = 0.35

ACTION_PRECEDENCE = ("stake", "unstake", "claim")

_TYPES = {
    "stake": TransactionType.STAKE,
    "unstake": TransactionType.UNSTAKE,
    "claim": TransactionType.CLAIM_REWARDS,
}


class StakingDetector:
    id = "staking"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        label = GENERIC_LABEL

        to = call_target(tx)
        contract = self.registry.address(FAMILY, to, getattr(tx, "chain_id", None))
        if contract:
            score.add(CONTRACT_WEIGHT, f"Known staking contract: {contract.label}")
            label = contract.label

        selector = call_selector(tx)
        selector_action = self.registry.selector(FAMILY, selector)
        if selector_action:
            score.add(SELECTOR_WEIGHT, f"Staking method {selector} ({selector_action})")

        event_actions = {
            signal.action
            for signal in (self.registry.topic(FAMILY, log.topic0) for log in iter_logs(receipt))
            if signal is not None
        }
        if event_actions:
            score.add(EVENT_WEIGHT, "Staking event emitted")

        if selector_action and not contract and not event_actions:
            score.penalize(UNCORROBORATED_PENALTY, "Staking method on unknown contract without events")

        action = next((a for a in ACTION_PRECEDENCE if a in event_actions), None)
        if action is None:
            action = selector_action or "stake"
        return score.to_match(label, _TYPES.get(action, TransactionType.STAKE))
