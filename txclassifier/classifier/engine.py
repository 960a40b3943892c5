"""Classification engine: runs every detector and resolves one result."""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable, Optional

from ..cache import ResultCache, create_result_cache
from ..constants import TransactionType
from .detector_bridge import BridgeDetector
from .detector_creation import ContractCreationDetector
from .detector_dex import DexDetector
from .detector_execution import ExecutionDetector
from .detector_governance import GovernanceDetector
from .detector_lending import LendingDetector
from .detector_nft import NftMarketplaceDetector
from .detector_staking import StakingDetector
from .detector_transfer import TransferDetector
from .errors import ClassificationTimeout
from .metrics import ClassificationMetrics, metrics
from .models import ClassificationResult, DetectorTrace, ProtocolMatch, Receipt, Transaction
from .registry import RegistryLoader, SignalRegistry, get_registry, init_registry
from .rules import Detector, DetectorRegistration

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)

# Tie-break ranks, consulted only when confidences are exactly equal.
# Higher wins. Deployments first, then protocol families by how specific
# their evidence is, then execution wrappers, then bare transfers.
DETECTOR_PRIORITIES: dict[str, int] = {
    "contract_creation": 100,
    "bridge": 90,
    "lending": 85,
    "governance": 80,
    "dex": 75,
    "nft_marketplace": 70,
    "staking": 65,
    "execution": 50,
    "transfer": 40,
}

DEFAULT_CONFLICT_MARGIN = 0.10


def default_detectors(registry: SignalRegistry) -> list[Detector]:
    """The fixed detector set, one per protocol family."""
    return [
        ContractCreationDetector(),
        BridgeDetector(registry),
        LendingDetector(registry),
        GovernanceDetector(registry),
        DexDetector(registry),
        NftMarketplaceDetector(registry),
        StakingDetector(registry),
        ExecutionDetector(registry),
        TransferDetector(registry),
    ]


def default_registrations(
    registry: SignalRegistry, disabled: Iterable[str] = ()
) -> list[DetectorRegistration]:
    skip = set(disabled)
    return [
        DetectorRegistration(detector, DETECTOR_PRIORITIES[detector.id])
        for detector in default_detectors(registry)
        if detector.id not in skip
    ]


class ClassificationEngine:
    """Aggregates detector matches into a single ClassificationResult.

    Resolution: strictly highest confidence wins; equal confidences are
    broken by registration priority. A detector that raises or returns an
    out-of-range match is logged and treated as "no match".
    """

    def __init__(
        self,
        registrations: Iterable[DetectorRegistration],
        cache: Optional[ResultCache] = None,
        debug_trace: bool = False,
        parallel: bool = False,
        max_workers: int = 4,
        conflict_margin: float = DEFAULT_CONFLICT_MARGIN,
        timeout: Optional[float] = None,
        metrics_collector: Optional[ClassificationMetrics] = None,
    ):
        registrations = list(registrations)
        ids = [r.detector_id for r in registrations]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate detector ids: {sorted(ids)}")
        priorities = [r.priority for r in registrations]
        if len(set(priorities)) != len(priorities):
            raise ValueError(f"Detector priorities must be unique: {sorted(priorities)}")

        self._registrations = tuple(sorted(registrations, key=lambda r: -r.priority))
        self.cache = cache
        self.debug_trace = debug_trace
        self.parallel = parallel
        self.max_workers = max(1, max_workers)
        self.conflict_margin = conflict_margin
        self.timeout = timeout
        self.metrics = metrics_collector or metrics
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: "Config", registry: Optional[SignalRegistry] = None) -> "ClassificationEngine":
        """Build the default engine; loads the registry when none is given."""
        if registry is None:
            registry = RegistryLoader(config.config_dir, config.registry_file).load()
            init_registry(registry)
        return cls(
            default_registrations(registry, config.disabled_detectors),
            cache=create_result_cache(config.cache_size, config.cache_ttl_seconds),
            debug_trace=config.debug_trace,
            parallel=config.parallel_detectors,
            max_workers=config.max_workers,
            conflict_margin=config.conflict_margin,
            timeout=config.classification_timeout,
        )

    @classmethod
    def default(cls, **kwargs) -> "ClassificationEngine":
        """Engine over the process-wide registry with every detector enabled."""
        return cls(default_registrations(get_registry()), **kwargs)

    @property
    def detector_ids(self) -> list[str]:
        return [r.detector_id for r in self._registrations]

    def classify(self, tx: Transaction, receipt: Receipt) -> ClassificationResult:
        """Classify one transaction. Never raises for malformed input."""
        cache_key = self._cache_key(tx)
        if cache_key and self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.metrics.record_cache_hit()
                self.metrics.record_result(cached.type.value, cached.matched_detector_id)
                return cached

        outcomes = self._run_detectors(tx, receipt)
        result = self._resolve(outcomes, receipt)

        self.metrics.record_result(result.type.value, result.matched_detector_id)
        if self.debug_trace:
            logger.info(
                "Classified %s as %s (%s, %.2f) via %s",
                getattr(tx, "hash", "?"),
                result.type.value,
                result.label,
                result.confidence,
                result.matched_detector_id or "-",
            )

        if cache_key and self.cache is not None:
            self.cache.set(cache_key, result)
        return result

    async def classify_async(
        self, tx: Transaction, receipt: Receipt, timeout: Optional[float] = None
    ) -> ClassificationResult:
        """Classify in a worker thread under an optional deadline.

        The deadline defaults to the engine timeout (None waits forever).
        Hitting it means a detector regressed; it raises ClassificationTimeout.
        """
        if timeout is None:
            timeout = self.timeout
        try:
            return await asyncio.wait_for(asyncio.to_thread(self.classify, tx, receipt), timeout)
        except asyncio.TimeoutError:
            raise ClassificationTimeout(
                f"Classification of {getattr(tx, 'hash', '?')} exceeded {timeout}s"
            ) from None

    def close(self) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    def __enter__(self) -> "ClassificationEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _cache_key(tx: Transaction) -> Optional[str]:
        tx_hash = getattr(tx, "hash", None)
        if not isinstance(tx_hash, str) or not tx_hash:
            return None
        return f"{getattr(tx, 'chain_id', 0)}:{tx_hash.lower()}"

    def _run_detectors(
        self, tx: Transaction, receipt: Receipt
    ) -> list[tuple[DetectorRegistration, Optional[ProtocolMatch], Optional[str]]]:
        if self.parallel and len(self._registrations) > 1:
            with self._executor_lock:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=self.max_workers, thread_name_prefix="detector"
                    )
                executor = self._executor
            results = list(
                executor.map(lambda r: self._run_one(r, tx, receipt), self._registrations)
            )
        else:
            results = [self._run_one(r, tx, receipt) for r in self._registrations]
        return [(reg, match, error) for reg, (match, error) in zip(self._registrations, results)]

    def _run_one(
        self, registration: DetectorRegistration, tx: Transaction, receipt: Receipt
    ) -> tuple[Optional[ProtocolMatch], Optional[str]]:
        detector_id = registration.detector_id
        try:
            match = registration.detector.detect(tx, receipt)
        except Exception as exc:
            logger.warning(
                "Detector %s failed for %s: %s",
                detector_id,
                getattr(tx, "hash", "?"),
                exc,
            )
            self.metrics.record_fault(detector_id)
            return None, f"{type(exc).__name__}: {exc}"

        if match is None:
            return None, None
        if not _is_valid_match(match):
            logger.warning(
                "Detector %s returned an invalid match for %s: %r",
                detector_id,
                getattr(tx, "hash", "?"),
                match,
            )
            self.metrics.record_fault(detector_id)
            return None, "invalid match"

        self.metrics.record_match(detector_id, match.confidence)
        return match, None

    def _resolve(
        self,
        outcomes: list[tuple[DetectorRegistration, Optional[ProtocolMatch], Optional[str]]],
        receipt: Receipt,
    ) -> ClassificationResult:
        candidates = [(reg, match) for reg, match, _ in outcomes if match is not None]
        candidates.sort(key=lambda c: (-c[1].confidence, -c[0].priority))

        warnings: list[str] = []
        if getattr(receipt, "status", None) == 0:
            warnings.append("Transaction reverted")
        if len(candidates) > 1:
            (_, best), (runner_reg, runner) = candidates[0], candidates[1]
            if round(best.confidence - runner.confidence, 4) < self.conflict_margin:
                warnings.append(
                    f"Close call: {runner_reg.detector_id} scored {runner.confidence:.2f} "
                    f"({runner.name}, {runner.type.value})"
                )

        trace = None
        if self.debug_trace:
            trace = tuple(
                DetectorTrace(
                    detector_id=reg.detector_id,
                    priority=reg.priority,
                    matched=match is not None,
                    confidence=match.confidence if match else 0.0,
                    type=match.type if match else None,
                    error=error,
                )
                for reg, match, error in outcomes
            )

        if not candidates:
            return ClassificationResult.unknown(warnings=tuple(warnings), trace=trace)

        winner_reg, winner = candidates[0]
        secondary = tuple((reg.detector_id, match) for reg, match in candidates[1:])
        return ClassificationResult.from_match(
            winner_reg.detector_id,
            winner,
            secondary=secondary,
            warnings=tuple(warnings),
            trace=trace,
        )


def _is_valid_match(match: object) -> bool:
    if not isinstance(match, ProtocolMatch):
        return False
    if not isinstance(match.type, TransactionType) or not isinstance(match.name, str):
        return False
    confidence = match.confidence
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return False
    return 0 < confidence <= 1
