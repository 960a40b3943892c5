"""Native value and ERC-20 transfer detector (the fallback family)."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, is_zero_address, iter_logs, topic_address, topic_at

FAMILY = "transfer"
TOKEN_LABEL = "ERC-20"
NATIVE_LABEL = "Native Transfer"

NATIVE_WEIGHT = 0.30
SELECTOR_WEIGHT = 0.15
EVENT_WEIGHT = 0.15
OTHER_ACTIVITY_PENALTY = 0.10
CEILING = 0.30

BULK_THRESHOLD = 3


class TransferDetector:
    """Plain value movement.

    Capped below the protocol families, and last in the tie-break order.
    """

    id = "transfer"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        logs = list(iter_logs(receipt))

        value = getattr(tx, "value", 0)
        if (
            isinstance(value, int)
            and value > 0
            and call_target(tx) is not None
            and not tx.has_calldata
            and not logs
        ):
            score.add(NATIVE_WEIGHT, "Native value sent without calldata")
            return score.to_match(NATIVE_LABEL, TransactionType.NATIVE_TRANSFER)

        selector = call_selector(tx)
        method = self.registry.selector(FAMILY, selector)
        if method:
            score.add(SELECTOR_WEIGHT, f"Token method {selector} ({method})")

        transfers = []
        approvals = 0
        other = 0
        for log in logs:
            signal = self.registry.topic(FAMILY, log.topic0)
            # ERC-20 events index exactly two addresses
            if signal is None or len(log.topics) != 3:
                other += 1
            elif signal.action == "transfer":
                transfers.append(log)
            elif signal.action == "approval":
                approvals += 1
            else:
                other += 1

        if transfers or approvals:
            score.add(EVENT_WEIGHT, f"{len(transfers)} transfer / {approvals} approval events")
        if other:
            score.penalize(OTHER_ACTIVITY_PENALTY, f"{other} unrelated events")

        if transfers:
            senders = [topic_address(topic_at(log, 1)) for log in transfers]
            recipients = [topic_address(topic_at(log, 2)) for log in transfers]
            if any(is_zero_address(sender) for sender in senders):
                tx_type = TransactionType.MINT
            elif any(is_zero_address(recipient) for recipient in recipients):
                tx_type = TransactionType.BURN
            elif len(transfers) > BULK_THRESHOLD:
                tx_type = TransactionType.BULK_TRANSFER
            else:
                tx_type = TransactionType.TRANSFER
        elif approvals or method == "approve":
            tx_type = TransactionType.APPROVAL
        else:
            tx_type = TransactionType.TRANSFER

        return score.to_match(TOKEN_LABEL, tx_type)
