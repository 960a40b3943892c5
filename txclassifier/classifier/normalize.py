"""Conversion of RPC-shaped payloads into typed records.

Everything loosely typed is handled here so detectors only ever see
Transaction/Receipt/Log values. Conversion fails closed: a field that
cannot be understood becomes empty (or 0 / None) instead of raising, and
the transaction simply produces fewer signals downstream.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from ..constants import TransactionEnvelope
from .models import Log, Receipt, Transaction

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")
_HEX_RE = re.compile(r"^0x[0-9a-f]*$")
_TOPIC_RE = re.compile(r"^0x[0-9a-f]{64}$")
_QUANTITY_RE = re.compile(r"^(0x[0-9a-f]+|[0-9]+)$")


def normalize_address(value: Any) -> Optional[str]:
    """Lower-case a 20-byte hex address; None when missing or malformed."""
    if not isinstance(value, str):
        return None
    candidate = value.strip().lower()
    if _ADDRESS_RE.match(candidate):
        return candidate
    return None


def normalize_data(value: Any) -> str:
    """Lower-case a hex payload. Non-hex strings are kept so they match nothing."""
    if not isinstance(value, str):
        return "0x"
    candidate = value.strip().lower()
    if not candidate:
        return "0x"
    if not _HEX_RE.match(candidate):
        logger.debug("Non-hex payload kept verbatim: %.20s", candidate)
    return candidate


def normalize_quantity(value: Any) -> int:
    """Parse an RPC quantity (int, 0x-hex or decimal string); 0 when invalid."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if value >= 0 else 0
    if not isinstance(value, str):
        return 0
    text = value.strip().lower()
    try:
        if text.startswith("0x"):
            parsed = int(text, 16) if len(text) > 2 else 0
        else:
            parsed = int(text, 10)
    except ValueError:
        return 0
    return parsed if parsed >= 0 else 0


def normalize_topics(value: Any) -> tuple[str, ...]:
    """Lower-case topic hashes; drop the whole list if any entry is malformed."""
    if not isinstance(value, (list, tuple)):
        return ()
    topics: list[str] = []
    for topic in value:
        if not isinstance(topic, str):
            return ()
        candidate = topic.strip().lower()
        if not _TOPIC_RE.match(candidate):
            return ()
        topics.append(candidate)
    return tuple(topics)


def _optional_quantity(value: Any) -> Optional[int]:
    """Like normalize_quantity, but None when the value is absent or unparseable."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    if isinstance(value, str) and not _QUANTITY_RE.match(value.strip().lower()):
        return None
    return normalize_quantity(value)


def log_from_rpc(raw: Any) -> Optional[Log]:
    """Build a Log from an RPC log object."""
    if not isinstance(raw, Mapping):
        return None
    return Log(
        address=normalize_address(raw.get("address")) or "",
        topics=normalize_topics(raw.get("topics")),
        data=normalize_data(raw.get("data")),
    )


def transaction_from_rpc(raw: Any) -> Transaction:
    """Build a Transaction from an eth_getTransactionByHash-style object."""
    if not isinstance(raw, Mapping):
        logger.debug("Transaction payload is not a mapping: %s", type(raw).__name__)
        return Transaction(hash="")

    payload = raw.get("input")
    if payload is None:
        payload = raw.get("data")

    chain_id = raw.get("chainId")
    if chain_id is None:
        chain_id = raw.get("chain_id")

    envelope_id = _optional_quantity(raw.get("type"))

    tx_hash = raw.get("hash")
    return Transaction(
        hash=tx_hash.strip().lower() if isinstance(tx_hash, str) else "",
        from_address=normalize_address(raw.get("from")) or "",
        to=normalize_address(raw.get("to")),
        input=normalize_data(payload),
        value=normalize_quantity(raw.get("value")),
        chain_id=normalize_quantity(chain_id) if chain_id is not None else 1,
        envelope=TransactionEnvelope.from_type_id(envelope_id),
    )


def receipt_from_rpc(raw: Any) -> Receipt:
    """Build a Receipt from an eth_getTransactionReceipt-style object."""
    if not isinstance(raw, Mapping):
        logger.debug("Receipt payload is not a mapping: %s", type(raw).__name__)
        return Receipt(logs=(), status=None)

    raw_logs = raw.get("logs")
    logs: list[Log] = []
    if isinstance(raw_logs, (list, tuple)):
        for entry in raw_logs:
            log = log_from_rpc(entry)
            if log is not None:
                logs.append(log)

    status = _optional_quantity(raw.get("status"))
    if status not in (0, 1):
        status = None

    return Receipt(
        logs=tuple(logs),
        status=status,
        contract_address=normalize_address(raw.get("contractAddress")),
    )
