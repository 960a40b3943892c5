"""Contract deployment detector."""

from __future__ import annotations

from typing import Optional

from ..constants import TransactionType
from .models import ProtocolMatch, Receipt, Transaction
from .scoring import SignalScore, call_target

LABEL = "Contract Deployment"

DEPLOYMENT_WEIGHT = 0.50
INIT_CODE_WEIGHT = 0.10
CEILING = 0.60


class ContractCreationDetector:
    """Native deployments: no recipient and a created contract address."""

    id = "contract_creation"

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:
        if call_target(tx) is not None:
            return None
        created = getattr(receipt, "contract_address", None)
        if not isinstance(created, str) or not created:
            return None

        score = SignalScore(CEILING)
        score.add(DEPLOYMENT_WEIGHT, f"Deployed contract {created.lower()}")
        if tx.has_calldata:
            score.add(INIT_CODE_WEIGHT, "Init code supplied")
        return score.to_match(LABEL, TransactionType.CONTRACT_DEPLOYMENT)
