"""Tests for the classification engine (resolution, isolation, caching)."""

import itertools
import logging
import time

import pytest

from txclassifier.cache import ResultCache
from txclassifier.classifier.detector_transfer import TransferDetector
from txclassifier.classifier.engine import (
    DETECTOR_PRIORITIES,
    ClassificationEngine,
    default_registrations,
)
from txclassifier.classifier.errors import ClassificationTimeout
from txclassifier.classifier.metrics import metrics
from txclassifier.classifier.models import Log, ProtocolMatch, Receipt, Transaction
from txclassifier.classifier.rules import Detector, DetectorRegistration
from txclassifier.classifier.signatures import MINT_V2_TOPIC, SWAP_V2_TOPIC, SWAP_V3_TOPIC, TRANSFER_TOPIC
from txclassifier.config import Config
from txclassifier.constants import TransactionType

USER = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
POOL = "0xb4e16d0168e52d35cacd2c6185b44281ec28c9dc"
UNISWAP_V2_ROUTER = "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"
OPTIMISM_BRIDGE = "0x99c9fc46f92e8a1c0dec1b1747d010903e884be1"
UNKNOWN_CONTRACT = "0x00000000000000000000000000000000deadbeef"


def pad(address: str) -> str:
    return "0x" + "0" * 24 + address[2:]


class StubDetector:
    """Detector returning a fixed outcome."""

    def __init__(self, detector_id, match=None, error=None, delay=0.0):
        self.id = detector_id
        self.match = match
        self.error = error
        self.delay = delay
        self.calls = 0

    def detect(self, tx, receipt):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.match


def match(confidence, name="Stub", tx_type=TransactionType.SWAP):
    return ProtocolMatch(name=name, confidence=confidence, type=tx_type)


def register(*detectors):
    return [DetectorRegistration(d, DETECTOR_PRIORITIES[d.id]) for d in detectors]


TX = Transaction(hash="0xfeed", from_address=USER, to=UNKNOWN_CONTRACT, input="0x12345678")
RECEIPT = Receipt()


def swap_transaction():
    tx = Transaction(
        hash="0x01",
        from_address=USER,
        to=UNISWAP_V2_ROUTER,
        input="0x38ed1739" + "00" * 64,
    )
    receipt = Receipt(
        logs=(
            Log(address=TOKEN, topics=(TRANSFER_TOPIC, pad(USER), pad(POOL))),
            Log(address=POOL, topics=(SWAP_V2_TOPIC, pad(UNISWAP_V2_ROUTER), pad(USER))),
            Log(address=TOKEN, topics=(TRANSFER_TOPIC, pad(POOL), pad(USER))),
        )
    )
    return tx, receipt


def corpus():
    """A spread of realistic and degenerate inputs."""
    cases = [swap_transaction()]
    cases.append((Transaction(hash="0x02", to=OTHER, value=10**18), Receipt()))
    cases.append((Transaction(hash="0x03", to=None, input="0x"), Receipt()))
    cases.append(
        (
            Transaction(hash="0x04", to=None, input="0x60806040"),
            Receipt(contract_address=UNKNOWN_CONTRACT),
        )
    )
    cases.append(
        (
            Transaction(hash="0x05", to=OPTIMISM_BRIDGE, input="0x9a2ac6d5" + "00" * 32, value=1),
            Receipt(status=0),
        )
    )
    cases.append((Transaction(hash="0x06", to=UNKNOWN_CONTRACT), Receipt(logs=(Log(POOL, (MINT_V2_TOPIC,)),))))
    cases.append((Transaction(hash="0x07", to=12345, input=None), Receipt(logs=("junk", None))))  # type: ignore[arg-type]
    cases.append((Transaction(hash="0x08", to=UNKNOWN_CONTRACT), Receipt(logs=(Log(POOL, (SWAP_V3_TOPIC,)),))))
    return cases


class TestResolution:
    def test_highest_confidence_wins(self):
        engine = ClassificationEngine(
            register(StubDetector("dex", match(0.30)), StubDetector("bridge", match(0.20, tx_type=TransactionType.BRIDGE)))
        )
        result = engine.classify(TX, RECEIPT)

        assert result.matched_detector_id == "dex"
        assert result.confidence == 0.30
        assert result.type == TransactionType.SWAP

    def test_tie_broken_by_declared_priority(self):
        """Equal confidences resolve by DETECTOR_PRIORITIES, not registration order."""
        ids = ["transfer", "dex", "bridge"]
        expected = max(ids, key=DETECTOR_PRIORITIES.__getitem__)
        for order in (ids, list(reversed(ids))):
            engine = ClassificationEngine(register(*(StubDetector(i, match(0.30, name=i)) for i in order)))
            result = engine.classify(TX, RECEIPT)
            assert result.matched_detector_id == expected
            assert result.label == expected

    def test_priority_list_is_unique(self):
        assert len(set(DETECTOR_PRIORITIES.values())) == len(DETECTOR_PRIORITIES)

    def test_no_match_is_unknown(self):
        engine = ClassificationEngine(register(StubDetector("dex"), StubDetector("transfer")))
        result = engine.classify(TX, RECEIPT)

        assert result.is_unknown
        assert result.type == TransactionType.UNKNOWN
        assert result.confidence == 0.0
        assert result.label == "Unknown"
        assert result.matched_detector_id is None

    def test_runner_ups_kept_as_secondary(self):
        engine = ClassificationEngine(
            register(
                StubDetector("dex", match(0.35)),
                StubDetector("transfer", match(0.15, tx_type=TransactionType.TRANSFER)),
                StubDetector("staking"),
            )
        )
        result = engine.classify(TX, RECEIPT)
        assert [detector_id for detector_id, _ in result.secondary] == ["transfer"]
        assert result.warnings == ()

    def test_close_call_warning(self):
        engine = ClassificationEngine(
            register(StubDetector("dex", match(0.30)), StubDetector("lending", match(0.25, tx_type=TransactionType.LENDING_DEPOSIT)))
        )
        result = engine.classify(TX, RECEIPT)

        assert result.matched_detector_id == "dex"
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Close call: lending")

    def test_reverted_warning(self):
        engine = ClassificationEngine(register(StubDetector("dex", match(0.30))))
        result = engine.classify(TX, Receipt(status=0))
        assert "Transaction reverted" in result.warnings

    def test_duplicate_priority_rejected(self):
        registrations = [
            DetectorRegistration(StubDetector("dex"), 10),
            DetectorRegistration(StubDetector("bridge"), 10),
        ]
        with pytest.raises(ValueError, match="unique"):
            ClassificationEngine(registrations)

    def test_duplicate_id_rejected(self):
        registrations = [
            DetectorRegistration(StubDetector("dex"), 10),
            DetectorRegistration(StubDetector("dex"), 20),
        ]
        with pytest.raises(ValueError, match="Duplicate"):
            ClassificationEngine(registrations)


class TestIsolation:
    def test_raising_detector_equals_null_detector(self, caplog):
        winner = match(0.20, tx_type=TransactionType.TRANSFER)
        failing = ClassificationEngine(
            register(StubDetector("dex", error=RuntimeError("boom")), StubDetector("transfer", winner))
        )
        silent = ClassificationEngine(register(StubDetector("dex"), StubDetector("transfer", winner)))

        with caplog.at_level(logging.WARNING):
            assert failing.classify(TX, RECEIPT) == silent.classify(TX, RECEIPT)

        assert "Detector dex failed" in caplog.text
        assert metrics.get_summary()["detectors"]["dex"]["faults"] == 1

    @pytest.mark.parametrize(
        "bad",
        [
            match(0.0),
            match(-0.1),
            match(1.5),
            ProtocolMatch(name="Stub", confidence=True, type=TransactionType.SWAP),
            ProtocolMatch(name="Stub", confidence=0.2, type="swap"),  # type: ignore[arg-type]
            {"name": "Stub", "confidence": 0.2},
        ],
    )
    def test_invalid_match_ignored(self, bad):
        engine = ClassificationEngine(register(StubDetector("dex", bad), StubDetector("transfer")))
        result = engine.classify(TX, RECEIPT)

        assert result.is_unknown
        assert metrics.get_summary()["detectors"]["dex"]["faults"] == 1

    def test_every_detector_failing_still_returns_result(self):
        engine = ClassificationEngine(
            register(*(StubDetector(i, error=ValueError(i)) for i in DETECTOR_PRIORITIES))
        )
        assert engine.classify(TX, RECEIPT).is_unknown

    def test_trace_records_errors(self):
        engine = ClassificationEngine(
            register(StubDetector("dex", error=KeyError("x")), StubDetector("transfer", match(0.15))),
            debug_trace=True,
        )
        result = engine.classify(TX, RECEIPT)
        trace = {entry.detector_id: entry for entry in result.trace}

        assert trace["dex"].error.startswith("KeyError")
        assert not trace["dex"].matched
        assert trace["transfer"].matched
        assert trace["transfer"].confidence == 0.15
        assert "trace" in result.to_dict()

    def test_no_trace_by_default(self):
        engine = ClassificationEngine(register(StubDetector("dex", match(0.2))))
        result = engine.classify(TX, RECEIPT)
        assert result.trace is None
        assert "trace" not in result.to_dict()


class TestDeterminism:
    def test_order_independence(self):
        detectors = [
            StubDetector("dex", match(0.30)),
            StubDetector("nft_marketplace", match(0.30, tx_type=TransactionType.NFT_SALE)),
            StubDetector("execution", match(0.25, tx_type=TransactionType.ACCOUNT_ABSTRACTION)),
            StubDetector("transfer", error=RuntimeError("nope")),
        ]
        results = {
            ClassificationEngine(register(*perm)).classify(TX, RECEIPT)
            for perm in itertools.permutations(detectors)
        }
        assert len(results) == 1
        assert results.pop().matched_detector_id == "dex"

    def test_repeated_classification_identical(self, engine):
        for tx, receipt in corpus():
            assert engine.classify(tx, receipt) == engine.classify(tx, receipt)

    def test_parallel_matches_sequential(self, registry, engine):
        with ClassificationEngine(default_registrations(registry), parallel=True, max_workers=3) as parallel:
            for tx, receipt in corpus():
                assert parallel.classify(tx, receipt) == engine.classify(tx, receipt)

    def test_confidence_range(self, engine):
        for tx, receipt in corpus():
            result = engine.classify(tx, receipt)
            if result.is_unknown:
                assert result.confidence == 0.0
            else:
                assert 0 < result.confidence <= 1
            for _, runner_up in result.secondary:
                assert 0 < runner_up.confidence <= result.confidence


class TestDefaultEngine:
    def test_swap_beats_token_transfers(self, engine):
        tx, receipt = swap_transaction()
        result = engine.classify(tx, receipt)

        assert result.matched_detector_id == "dex"
        assert result.label == "Uniswap V2"
        assert result.type == TransactionType.SWAP
        assert result.confidence == 0.35
        assert "transfer" in dict(result.secondary)

    def test_degenerate_input_is_unknown(self, engine):
        result = engine.classify(Transaction(hash="0x0", to=None, input="0x"), Receipt())
        assert result.is_unknown
        assert result.confidence == 0.0
        assert result.secondary == ()

    def test_deployment(self, engine):
        tx = Transaction(hash="0x04", to=None, input="0x60806040")
        result = engine.classify(tx, Receipt(contract_address=UNKNOWN_CONTRACT))
        assert result.type == TransactionType.CONTRACT_DEPLOYMENT

    def test_reverted_bridge_deposit(self, engine):
        tx = Transaction(hash="0x05", to=OPTIMISM_BRIDGE, input="0x9a2ac6d5" + "00" * 32, value=1)
        result = engine.classify(tx, Receipt(status=0))

        assert result.type == TransactionType.BRIDGE
        assert result.label == "Optimism Bridge"
        assert "Transaction reverted" in result.warnings

    def test_disabled_detectors(self, registry):
        engine = ClassificationEngine(default_registrations(registry, disabled={"transfer", "dex"}))
        assert "transfer" not in engine.detector_ids
        assert "dex" not in engine.detector_ids
        assert engine.detector_ids[0] == "contract_creation"

    def test_detectors_satisfy_interface(self, registry):
        for registration in default_registrations(registry):
            assert isinstance(registration.detector, Detector)

    def test_from_config(self, tmp_path):
        config = Config(config_dir=tmp_path, disabled_detectors={"execution"}, cache_size=5)
        with ClassificationEngine.from_config(config) as engine:
            assert "execution" not in engine.detector_ids
            assert engine.cache is not None and engine.cache.max_entries == 5

    def test_default_uses_shared_registry(self):
        with ClassificationEngine.default() as engine:
            assert set(engine.detector_ids) == set(DETECTOR_PRIORITIES)


class TestCaching:
    def test_cache_hit_skips_detectors(self):
        stub = StubDetector("dex", match(0.30))
        engine = ClassificationEngine(register(stub), cache=ResultCache(max_entries=10))

        first = engine.classify(TX, RECEIPT)
        second = engine.classify(TX, RECEIPT)

        assert first == second
        assert stub.calls == 1
        summary = metrics.get_summary()
        assert summary["cache_hits"] == 1
        assert summary["total_classifications"] == 2
        assert summary["detectors"]["dex"]["wins"] == 2
        assert summary["types"] == {"swap": 2}

    def test_cache_keyed_by_chain(self):
        stub = StubDetector("dex", match(0.30))
        engine = ClassificationEngine(register(stub), cache=ResultCache(max_entries=10))

        engine.classify(TX, RECEIPT)
        engine.classify(Transaction(hash=TX.hash, to=TX.to, chain_id=8453), RECEIPT)
        assert stub.calls == 2

    def test_disabled_cache(self):
        stub = StubDetector("dex", match(0.30))
        engine = ClassificationEngine(register(stub), cache=ResultCache(max_entries=0))

        engine.classify(TX, RECEIPT)
        engine.classify(TX, RECEIPT)
        assert stub.calls == 2


class TestAsync:
    async def test_classify_async(self, engine):
        tx, receipt = swap_transaction()
        result = await engine.classify_async(tx, receipt, timeout=5)
        assert result.type == TransactionType.SWAP

    async def test_timeout_raises(self):
        engine = ClassificationEngine(register(StubDetector("dex", match(0.3), delay=0.5)))
        with pytest.raises(ClassificationTimeout):
            await engine.classify_async(TX, RECEIPT, timeout=0.05)

    async def test_engine_timeout_is_default_deadline(self):
        engine = ClassificationEngine(register(StubDetector("dex", match(0.3), delay=0.5)), timeout=0.05)
        with pytest.raises(ClassificationTimeout):
            await engine.classify_async(TX, RECEIPT)

    async def test_configured_timeout_applies(self, tmp_path, monkeypatch):
        def slow_detect(self, tx, receipt):
            time.sleep(0.5)
            return None

        monkeypatch.setattr(TransferDetector, "detect", slow_detect)
        config = Config(config_dir=tmp_path, classification_timeout=0.05, cache_size=0)
        with ClassificationEngine.from_config(config) as engine:
            assert engine.timeout == 0.05
            with pytest.raises(ClassificationTimeout):
                await engine.classify_async(TX, RECEIPT)


class TestMetrics:
    def test_wins_and_unknowns_counted(self):
        engine = ClassificationEngine(register(StubDetector("dex", match(0.30)), StubDetector("transfer")))
        engine.classify(TX, RECEIPT)
        ClassificationEngine(register(StubDetector("dex"))).classify(TX, RECEIPT)

        summary = metrics.get_summary()
        assert summary["total_classifications"] == 2
        assert summary["unknown"] == 1
        assert summary["detectors"]["dex"]["wins"] == 1
        assert summary["types"] == {"swap": 1, "unknown": 1}
