"""NFT marketplace and NFT movement detector."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .registry import SignalRegistry
from .scoring import SignalScore, call_selector, call_target, is_zero_address, iter_logs, topic_address, topic_at

FAMILY = "nft"
GENERIC_LABEL = "NFT"

MARKETPLACE_WEIGHT = 0.25
SELECTOR_WEIGHT = 0.15
SALE_EVENT_WEIGHT = 0.15
MOVEMENT_WEIGHT = 0.10
NO_EVIDENCE_PENALTY = 0.20
CEILING = 0.40

LABEL_PRECEDENCE = ("OpenSea Seaport", "Blur", "LooksRare", "OpenSea")


class NftMarketplaceDetector:
    """Detects marketplace sales and plain ERC-721 / ERC-1155 movements."""

    id = "nft_marketplace"

    def __init__(self, registry: SignalRegistry):
        self.registry = registry

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        score = SignalScore(CEILING)
        label = GENERIC_LABEL

        to = call_target(tx)
        marketplace = self.registry.address(FAMILY, to, getattr(tx, "chain_id", None))
        if marketplace:
            score.add(MARKETPLACE_WEIGHT, f"Known marketplace: {marketplace.label}")
            label = marketplace.label

        selector = call_selector(tx)
        method = self.registry.selector(FAMILY, selector)
        if method:
            score.add(SELECTOR_WEIGHT, f"NFT method {selector} ({method})")

        sale_labels: set[str] = set()
        moved = False
        minted = False
        for log in iter_logs(receipt):
            signal = self.registry.topic(FAMILY, log.topic0)
            if signal is None:
                continue
            if signal.action == "sale":
                sale_labels.add(signal.label or GENERIC_LABEL)
            elif signal.action == "transfer":
                # ERC-20 shares this signature; only ERC-721 indexes the token id
                if len(log.topics) == 4:
                    moved = True
                    minted = minted or is_zero_address(topic_address(topic_at(log, 1)))
            elif signal.action in ("transfer_single", "transfer_batch"):
                moved = True
                minted = minted or is_zero_address(topic_address(topic_at(log, 2)))

        if sale_labels:
            score.add(SALE_EVENT_WEIGHT, "Marketplace sale event emitted")
            if label == GENERIC_LABEL:
                label = next(
                    (candidate for candidate in LABEL_PRECEDENCE if candidate in sale_labels),
                    sorted(sale_labels)[0],
                )

        if moved:
            score.add(MOVEMENT_WEIGHT, "NFT moved")
        elif not sale_labels:
            score.penalize(NO_EVIDENCE_PENALTY, "No NFT moved and no sale recorded")

        if marketplace or sale_labels:
            tx_type = TransactionType.NFT_SALE
        elif minted:
            tx_type = TransactionType.NFT_MINT
        else:
            tx_type = TransactionType.NFT_TRANSFER

        return score.to_match(label, tx_type)
