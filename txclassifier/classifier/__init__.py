"""Classification core for txclassifier."""

from .engine import DETECTOR_PRIORITIES, ClassificationEngine, default_registrations
from .errors import ClassificationTimeout, ClassifierError, RegistryLoadError
from .models import ClassificationResult, Log, ProtocolMatch, Receipt, Transaction
from .normalize import receipt_from_rpc, transaction_from_rpc
from .registry import RegistryLoader, SignalRegistry, build_registry, get_registry, init_registry
from .rules import Detector, DetectorRegistration

__all__ = [
    "DETECTOR_PRIORITIES",
    "ClassificationEngine",
    "default_registrations",
    "ClassificationTimeout",
    "ClassifierError",
    "RegistryLoadError",
    "ClassificationResult",
    "Log",
    "ProtocolMatch",
    "Receipt",
    "Transaction",
    "receipt_from_rpc",
    "transaction_from_rpc",
    "RegistryLoader",
    "SignalRegistry",
    "build_registry",
    "get_registry",
    "init_registry",
    "Detector",
    "DetectorRegistration",
]
