"""DEX swap and liquidity detector."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, iter_logs
from .signatures import DEX_LABEL_BALANCER, DEX_LABEL_CURVE, DEX_LABEL_V2, DEX_LABEL_V3

FAMILY = "dex"
GENERIC_LABEL = "DEX"

ROUTER_WEIGHT = 0.25
SELECTOR_WEIGHT = 0.15
SWAP_EVENT_WEIGHT = 0.15
LIQUIDITY_ONLY_PENALTY = 0.20
CEILING = 0.35

# First match wins when refining a generic label from swap logs
LABEL_PRECEDENCE = (DEX_LABEL_V3, DEX_LABEL_V2, DEX_LABEL_BALANCER, DEX_LABEL_CURVE)


class DexDetector:
    """Scores router calls, swap selectors and pool events.

    Liquidity events without any swap event pull the score down and turn
    the type into ADD_LIQUIDITY / REMOVE_LIQUIDITY; on their own they are
    not enough to claim the transaction.
    """

    id = "dex"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        label = GENERIC_LABEL
        tx_type = TransactionType.SWAP

        to = call_target(tx)
        router = self.registry.address(FAMILY, to, getattr(tx, "chain_id", None))
        if router:
            score.add(ROUTER_WEIGHT, f"Known router: {router.label}")
            label = router.label

        selector = call_selector(tx)
        method = self.registry.selector(FAMILY, selector)
        if method:
            score.add(SELECTOR_WEIGHT, f"DEX method {selector} ({method})")

        swap_labels: set[str] = set()
        has_swap = False
        has_mint = False
        has_burn = False
        for log in iter_logs(receipt):
            signal = self.registry.topic(FAMILY, log.topic0)
            if signal is None:
                continue
            if signal.action == "swap":
                has_swap = True
                if signal.label:
                    swap_labels.add(signal.label)
            elif signal.action == "add_liquidity":
                has_mint = True
            elif signal.action == "remove_liquidity":
                has_burn = True

        if has_swap:
            score.add(SWAP_EVENT_WEIGHT, "Swap event emitted")
            if label == GENERIC_LABEL:
                for candidate in LABEL_PRECEDENCE:
                    if candidate in swap_labels:
                        label = candidate
                        break
                else:
                    if swap_labels:
                        label = sorted(swap_labels)[0]
        elif has_mint or has_burn:
            score.penalize(LIQUIDITY_ONLY_PENALTY, "Liquidity event without swap")
            tx_type = TransactionType.ADD_LIQUIDITY if has_mint else TransactionType.REMOVE_LIQUIDITY

        return score.to_match(label, tx_type)
