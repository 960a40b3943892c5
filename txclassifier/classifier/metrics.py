"""Classification metrics tracking.

Shows which detectors are matching, winning and failing, which is the
input for tuning weights and registry coverage.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class DetectorMetrics:
    """Counters for a single detector."""

    matches: int = 0  # Times the detector returned a match
    wins: int = 0  # Times its match was selected
    faults: int = 0  # Exceptions or invalid results
    last_fault: Optional[datetime] = None
    confidence_sum: float = 0.0

    def record_match(self, confidence: float) -> None:
        self.matches += 1
        self.confidence_sum += confidence

    def record_fault(self) -> None:
        self.faults += 1
        self.last_fault = datetime.now()

    @property
    def mean_confidence(self) -> float:
        if not self.matches:
            return 0.0
        return round(self.confidence_sum / self.matches, 4)


class ClassificationMetrics:
    """Thread-safe metrics collector for classification runs."""

    _instance: Optional["ClassificationMetrics"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ClassificationMetrics":
        """Singleton pattern for global metrics access."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self._lock = threading.Lock()
        self._detectors: dict[str, DetectorMetrics] = defaultdict(DetectorMetrics)
        self._types: dict[str, int] = defaultdict(int)
        self._total: int = 0
        self._unknown: int = 0
        self._cache_hits: int = 0
        self._started: datetime = datetime.now()

    def record_match(self, detector_id: str, confidence: float) -> None:
        with self._lock:
            self._detectors[detector_id].record_match(confidence)

    def record_fault(self, detector_id: str) -> None:
        with self._lock:
            self._detectors[detector_id].record_fault()

    def record_result(self, tx_type: str, detector_id: Optional[str]) -> None:
        """Record the resolved outcome of one classification."""
        with self._lock:
            self._total += 1
            self._types[tx_type] += 1
            if detector_id is None:
                self._unknown += 1
            else:
                self._detectors[detector_id].wins += 1

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hits += 1

    def get_summary(self) -> dict:
        """Get a summary of all metrics."""
        with self._lock:
            uptime = datetime.now() - self._started
            return {
                "uptime_seconds": int(uptime.total_seconds()),
                "total_classifications": self._total,
                "unknown": self._unknown,
                "cache_hits": self._cache_hits,
                "types": dict(self._types),
                "detectors": {
                    name: {
                        "matches": m.matches,
                        "wins": m.wins,
                        "faults": m.faults,
                        "mean_confidence": m.mean_confidence,
                        "last_fault": m.last_fault.isoformat() if m.last_fault else None,
                    }
                    for name, m in sorted(self._detectors.items())
                },
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._detectors.clear()
            self._types.clear()
            self._total = 0
            self._unknown = 0
            self._cache_hits = 0
            self._started = datetime.now()


# Global instance
metrics = ClassificationMetrics()
