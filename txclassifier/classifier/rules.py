"""Detector interface and registration record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from .models import ProtocolMatch, Receipt, Transaction


@runtime_checkable
class Detector(Protocol):
    """Interface for protocol-family detectors.

    Implementations must be pure: same inputs, same output, no I/O and
    no exceptions on malformed fields.
    """

    id: str

    def detect(self, tx: Transaction, receipt: Receipt) -> Optional[ProtocolMatch]:  # pragma: no cover - interface
        ...


@dataclass(frozen=True)
class DetectorRegistration:
    """A detector plus its tie-break rank (higher wins on equal confidence)."""

    detector: Detector
    priority: int

    @property
    def detector_id(self) -> str:
        return getattr(self.detector, "id", type(self.detector).__name__)
