"""Signal registry: immutable lookup tables shared by all detectors."""

from __future__ import annotations

import copy
import logging
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

import yaml

from .errors import RegistryLoadError
from .signatures import DEFAULT_SIGNALS, FAMILIES

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = "registry.yaml"

_KEY_PATTERNS = {
    "addresses": re.compile(r"^0x[0-9a-f]{40}$"),
    "selectors": re.compile(r"^0x[0-9a-f]{8}$"),
    "topics": re.compile(r"^0x[0-9a-f]{64}$"),
}
_CHAIN_TABLES = ("addresses",)
_EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class AddressSignal:
    """A known contract: display label and, for some families, an action."""

    label: str
    action: Optional[str] = None


@dataclass(frozen=True)
class TopicSignal:
    """A known event signature."""

    action: str
    label: Optional[str] = None


@dataclass(frozen=True)
class FamilySignals:
    """Lookup tables for one detector family."""

    addresses: Mapping[str, AddressSignal] = field(default_factory=lambda: _EMPTY)
    selectors: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    topics: Mapping[str, TopicSignal] = field(default_factory=lambda: _EMPTY)


_EMPTY_FAMILY = FamilySignals()


class SignalRegistry:
    """Read-only signal tables, keyed by lower-case hex."""

    def __init__(
        self,
        families: Mapping[str, FamilySignals],
        chains: Optional[Mapping[int, Mapping[str, FamilySignals]]] = None,
        version: str = "builtin",
    ):
        self._families = MappingProxyType(dict(families))
        self._chains = MappingProxyType(
            {chain: MappingProxyType(dict(tables)) for chain, tables in (chains or {}).items()}
        )
        self.version = version

    @property
    def families(self) -> Mapping[str, FamilySignals]:
        return self._families

    def family(self, name: str) -> FamilySignals:
        return self._families.get(name, _EMPTY_FAMILY)

    def address(
        self, family: str, address: Any, chain_id: Optional[int] = None
    ) -> Optional[AddressSignal]:
        """Look up a contract, preferring the chain-specific table."""
        if not isinstance(address, str):
            return None
        key = address.lower()
        if chain_id is not None:
            chain_tables = self._chains.get(chain_id)
            if chain_tables is not None:
                hit = chain_tables.get(family, _EMPTY_FAMILY).addresses.get(key)
                if hit is not None:
                    return hit
        return self.family(family).addresses.get(key)

    def selector(self, family: str, selector: Any) -> Optional[str]:
        if not isinstance(selector, str):
            return None
        return self.family(family).selectors.get(selector.lower())

    def topic(self, family: str, topic: Any) -> Optional[TopicSignal]:
        if not isinstance(topic, str):
            return None
        return self.family(family).topics.get(topic.lower())

    def stats(self) -> dict:
        """Entry counts per family, for logging and the CLI."""
        return {
            "version": self.version,
            "families": {
                name: {
                    "addresses": len(tables.addresses),
                    "selectors": len(tables.selectors),
                    "topics": len(tables.topics),
                }
                for name, tables in self._families.items()
            },
            "chains": sorted(self._chains),
        }


def _merge(base: dict, overlay: Mapping, source: str) -> dict:
    """Merge overlay tables into base; overlay entries win."""
    merged = copy.deepcopy(base)
    for family, tables in overlay.items():
        if family in ("version", "last_updated"):
            continue
        if family == "chains":
            if not isinstance(tables, Mapping):
                raise RegistryLoadError("'chains' must be a mapping", source)
            chains = merged.setdefault("chains", {})
            for chain_id, chain_families in tables.items():
                chain_key = _coerce_chain_id(chain_id, source)
                if not isinstance(chain_families, Mapping):
                    raise RegistryLoadError(f"chain {chain_key} must be a mapping", source)
                target = chains.setdefault(chain_key, {})
                for name, chain_tables in chain_families.items():
                    _merge_family(target, name, chain_tables, source)
            continue
        _merge_family(merged, family, tables, source)
    return merged


def _merge_family(target: dict, family: Any, tables: Any, source: str) -> None:
    if not isinstance(tables, Mapping):
        raise RegistryLoadError(f"family {family!r} must be a mapping", source)
    existing = target.setdefault(family, {})
    for table, entries in tables.items():
        if not isinstance(entries, Mapping):
            raise RegistryLoadError(f"{family}.{table} must be a mapping", source)
        existing.setdefault(table, {}).update(entries)


def _coerce_chain_id(value: Any, source: str) -> int:
    try:
        chain_id = int(value)
    except (TypeError, ValueError):
        raise RegistryLoadError(f"invalid chain id {value!r}", source) from None
    if chain_id <= 0:
        raise RegistryLoadError(f"invalid chain id {value!r}", source)
    return chain_id


def _coerce_key(table: str, key: Any, where: str, source: str) -> str:
    if not isinstance(key, str):
        raise RegistryLoadError(f"{where}: key {key!r} is not a string", source)
    normalized = key.strip().lower()
    if not _KEY_PATTERNS[table].match(normalized):
        raise RegistryLoadError(f"{where}: malformed key {key!r}", source)
    return normalized


def _coerce_address(value: Any, where: str, source: str) -> AddressSignal:
    if isinstance(value, str) and value.strip():
        return AddressSignal(label=value.strip())
    if isinstance(value, Mapping):
        label = value.get("label")
        action = value.get("action")
        if isinstance(label, str) and label.strip() and (action is None or isinstance(action, str)):
            return AddressSignal(label=label.strip(), action=action)
    raise RegistryLoadError(f"{where}: invalid address entry {value!r}", source)


def _coerce_selector(value: Any, where: str, source: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise RegistryLoadError(f"{where}: invalid selector entry {value!r}", source)


def _coerce_topic(value: Any, where: str, source: str) -> TopicSignal:
    if isinstance(value, str) and value.strip():
        return TopicSignal(action=value.strip())
    if isinstance(value, Mapping):
        action = value.get("action")
        label = value.get("label")
        if isinstance(action, str) and action.strip() and (label is None or isinstance(label, str)):
            return TopicSignal(action=action.strip(), label=label)
    raise RegistryLoadError(f"{where}: invalid topic entry {value!r}", source)


_COERCERS = {
    "addresses": _coerce_address,
    "selectors": _coerce_selector,
    "topics": _coerce_topic,
}


def _build_family(
    name: str, tables: Mapping, source: str, allowed: tuple[str, ...] = tuple(_KEY_PATTERNS)
) -> FamilySignals:
    if not isinstance(tables, Mapping):
        raise RegistryLoadError(f"{name} must be a mapping", source)
    built: dict[str, Mapping] = {}
    for table, entries in tables.items():
        if table not in allowed:
            raise RegistryLoadError(f"{name}: unknown table {table!r}", source)
        if not isinstance(entries, Mapping):
            raise RegistryLoadError(f"{name}.{table} must be a mapping", source)
        coerce = _COERCERS[table]
        rows = {}
        for key, value in entries.items():
            where = f"{name}.{table}"
            rows[_coerce_key(table, key, where, source)] = coerce(value, where, source)
        built[table] = MappingProxyType(rows)
    return FamilySignals(**built)


def build_registry(
    data: Mapping = DEFAULT_SIGNALS,
    overlay: Optional[Mapping] = None,
    source: str = "builtin",
) -> SignalRegistry:
    """Validate signal tables and freeze them into a registry.

    Raises RegistryLoadError on any malformed entry; a partially built
    registry is never returned.
    """
    if not isinstance(data, Mapping):
        raise RegistryLoadError("signal tables must be a mapping", source)
    merged = dict(data)
    version = "builtin"
    if overlay:
        if not isinstance(overlay, Mapping):
            raise RegistryLoadError("overlay must be a mapping", source)
        merged = _merge(merged, overlay, source)
        version = str(overlay.get("version", source))

    families: dict[str, FamilySignals] = {}
    chains: dict[int, dict[str, FamilySignals]] = {}
    for name, tables in merged.items():
        if name in ("version", "last_updated"):
            continue
        if name == "chains":
            if not isinstance(tables, Mapping):
                raise RegistryLoadError("'chains' must be a mapping", source)
            for chain_id, chain_families in tables.items():
                chain_key = _coerce_chain_id(chain_id, source)
                if not isinstance(chain_families, Mapping):
                    raise RegistryLoadError(f"chain {chain_key} must be a mapping", source)
                chains[chain_key] = {}
                for family, chain_tables in chain_families.items():
                    if family not in FAMILIES:
                        raise RegistryLoadError(f"chain {chain_key}: unknown family {family!r}", source)
                    chains[chain_key][family] = _build_family(
                        f"chains.{chain_key}.{family}", chain_tables, source, _CHAIN_TABLES
                    )
            continue
        if name not in FAMILIES:
            raise RegistryLoadError(f"unknown family {name!r}", source)
        families[name] = _build_family(name, tables, source)

    return SignalRegistry(families, chains, version=version)


def read_overlay(path: Path) -> dict:
    """Parse a YAML overlay file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise RegistryLoadError(f"cannot read overlay: {exc}", str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise RegistryLoadError("overlay root must be a mapping", str(path))
    return dict(data)


class RegistryLoader:
    """Builds the registry from embedded tables and an optional overlay file."""

    def __init__(self, config_dir: Path, registry_file: Optional[Path] = None):
        self.config_dir = Path(config_dir)
        self.registry_file = Path(registry_file) if registry_file else self.config_dir / REGISTRY_FILENAME
        self._registry: Optional[SignalRegistry] = None

    def load(self) -> SignalRegistry:
        """Load the registry. Raises RegistryLoadError on malformed data."""
        overlay = None
        if self.registry_file.exists():
            overlay = read_overlay(self.registry_file)
        else:
            logger.debug("No registry overlay at %s, using embedded tables", self.registry_file)

        registry = build_registry(DEFAULT_SIGNALS, overlay, source=str(self.registry_file) if overlay else "builtin")
        counts = registry.stats()["families"]
        logger.info(
            f"Loaded signal registry v{registry.version}: "
            f"{sum(c['addresses'] for c in counts.values())} addresses, "
            f"{sum(c['selectors'] for c in counts.values())} selectors, "
            f"{sum(c['topics'] for c in counts.values())} topics"
        )
        self._registry = registry
        return registry

    def get(self) -> SignalRegistry:
        if self._registry is None:
            return self.load()
        return self._registry

    def reload(self) -> SignalRegistry:
        self._registry = None
        return self.load()


_registry: Optional[SignalRegistry] = None
_registry_lock = threading.Lock()


def init_registry(registry: SignalRegistry) -> SignalRegistry:
    """Install the process-wide registry. Call once at start-up."""
    global _registry
    with _registry_lock:
        _registry = registry
    return registry


def get_registry() -> SignalRegistry:
    """Return the process-wide registry, building the embedded one if needed."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = build_registry()
    return _registry


def reset_registry() -> None:
    """Forget the process-wide registry (tests only)."""
    global _registry
    with _registry_lock:
        _registry = None
