"""Typed records flowing through the classification pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..constants import TransactionEnvelope, TransactionType

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]*$")


def _as_tuple(value) -> tuple:
    if value is None:
        return ()
    if isinstance(value, tuple):
        return value
    if isinstance(value, (list, set, frozenset)):
        return tuple(value)
    return ()


@dataclass(frozen=True)
class Transaction:
    """A submitted transaction, as seen by detectors."""

    hash: str
    from_address: str = ""
    to: Optional[str] = None  # None for contract deployments
    input: str = "0x"
    value: int = 0
    chain_id: int = 1
    envelope: TransactionEnvelope = TransactionEnvelope.LEGACY

    @property
    def selector(self) -> Optional[str]:
        """First 4 bytes of the call payload as 0x + 8 hex, if well-formed."""
        data = self.input
        if not isinstance(data, str) or len(data) < 10:
            return None
        head = data[:10]
        if not _HEX_RE.match(head):
            return None
        return head.lower()

    @property
    def has_calldata(self) -> bool:
        return isinstance(self.input, str) and self.input not in ("", "0x")


@dataclass(frozen=True)
class Log:
    """An event emitted during execution."""

    address: str
    topics: tuple[str, ...] = ()
    data: str = "0x"

    def __post_init__(self):
        object.__setattr__(self, "topics", _as_tuple(self.topics))

    @property
    def topic0(self) -> Optional[str]:
        if not self.topics:
            return None
        first = self.topics[0]
        return first.lower() if isinstance(first, str) else None


@dataclass(frozen=True)
class Receipt:
    """Execution outcome of a transaction."""

    logs: tuple[Log, ...] = ()
    status: Optional[int] = 1  # 1 success, 0 reverted, None unknown
    contract_address: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "logs", _as_tuple(self.logs))

    @property
    def reverted(self) -> bool:
        return self.status == 0


@dataclass(frozen=True)
class ProtocolMatch:
    """A single detector's claim about a transaction."""

    name: str
    confidence: float
    type: TransactionType
    reasons: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "reasons", _as_tuple(self.reasons))

    def to_dict(self) -> dict:
        return {
            "label": self.name,
            "confidence": self.confidence,
            "type": self.type.value,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class DetectorTrace:
    """Per-detector outcome recorded when debug tracing is enabled."""

    detector_id: str
    priority: int
    matched: bool = False
    confidence: float = 0.0
    type: Optional[TransactionType] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "detectorId": self.detector_id,
            "priority": self.priority,
            "matched": self.matched,
            "confidence": self.confidence,
            "type": self.type.value if self.type else None,
            "error": self.error,
        }


UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class ClassificationResult:
    """Final verdict for one transaction. Never absent."""

    label: str
    confidence: float
    type: TransactionType
    matched_detector_id: Optional[str] = None
    secondary: tuple[tuple[str, ProtocolMatch], ...] = ()
    warnings: tuple[str, ...] = ()
    trace: Optional[tuple[DetectorTrace, ...]] = None
    reasons: tuple[str, ...] = ()

    @classmethod
    def unknown(cls, **kwargs) -> "ClassificationResult":
        """The sentinel returned when no detector matched."""
        return cls(
            label=UNKNOWN_LABEL,
            confidence=0.0,
            type=TransactionType.UNKNOWN,
            **kwargs,
        )

    @classmethod
    def from_match(cls, detector_id: str, match: ProtocolMatch, **kwargs) -> "ClassificationResult":
        return cls(
            label=match.name,
            confidence=match.confidence,
            type=match.type,
            matched_detector_id=detector_id,
            reasons=match.reasons,
            **kwargs,
        )

    @property
    def is_unknown(self) -> bool:
        return self.matched_detector_id is None

    def to_dict(self) -> dict:
        """Serialize for report generation."""
        data = {
            "label": self.label,
            "confidence": self.confidence,
            "type": self.type.value,
            "matchedDetectorId": self.matched_detector_id,
            "reasons": list(self.reasons),
            "secondary": [
                {"detectorId": detector_id, **match.to_dict()}
                for detector_id, match in self.secondary
            ],
            "warnings": list(self.warnings),
        }
        if self.trace is not None:
            data["trace"] = [entry.to_dict() for entry in self.trace]
        return data
