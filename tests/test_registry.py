"""Tests for signal registry building, validation and overlays."""

from pathlib import Path

import pytest

from txclassifier.classifier.errors import RegistryLoadError
from txclassifier.classifier.registry import (
    AddressSignal,
    FamilySignals,
    RegistryLoader,
    TopicSignal,
    build_registry,
    get_registry,
    init_registry,
    read_overlay,
    reset_registry,
)
from txclassifier.classifier.signatures import DEFAULT_SIGNALS, FAMILIES, SWAP_V2_TOPIC

EXAMPLE_OVERLAY = Path(__file__).resolve().parent.parent / "config" / "registry.example.yaml"

UNISWAP_V2_ROUTER = "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"
NEW_ROUTER = "0x" + "ab" * 20


class TestBuiltinRegistry:
    def test_every_family_present(self, registry):
        assert set(registry.families) == set(FAMILIES)

    def test_lookups_are_case_insensitive(self, registry):
        assert registry.address("dex", UNISWAP_V2_ROUTER.upper().replace("0X", "0x")).label == "Uniswap V2"
        assert registry.selector("dex", "0x38ED1739") == "swap"
        assert registry.topic("dex", SWAP_V2_TOPIC.upper().replace("0X", "0x")).action == "swap"

    def test_non_string_lookups(self, registry):
        assert registry.address("dex", None) is None
        assert registry.selector("dex", 0x38ED1739) is None
        assert registry.topic("dex", b"\x00") is None

    def test_unknown_family_lookup_is_empty(self, registry):
        assert registry.address("perps", UNISWAP_V2_ROUTER) is None

    def test_tables_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.family("dex").addresses[NEW_ROUTER] = AddressSignal("X")  # type: ignore[index]
        with pytest.raises(TypeError):
            registry.families["dex"] = None  # type: ignore[index]

    def test_default_family_tables_empty_and_read_only(self):
        empty = FamilySignals()

        assert dict(empty.addresses) == {}
        assert empty.selectors is empty.topics
        with pytest.raises(TypeError):
            empty.selectors["0x12345678"] = "swap"  # type: ignore[index]

    def test_partial_family_keeps_other_tables_empty(self):
        registry = build_registry(data={"transfer": {"selectors": {"0xa9059cbb": "transfer"}}})
        assert registry.family("transfer").topics == {}
        assert registry.family("transfer").addresses == {}

    def test_entry_shapes(self, registry):
        assert registry.topic("dex", SWAP_V2_TOPIC) == TopicSignal(action="swap", label="Uniswap V2 Compatible")
        entry_point = registry.address("execution", "0x5ff137d4b0fdcd49dca30c7cf57e578a026d2789")
        assert entry_point.action == "account_abstraction"

    def test_chain_overlay_preferred(self, registry):
        bridge = "0x4200000000000000000000000000000000000010"
        assert registry.address("bridge", bridge, 8453).label == "Base Bridge"
        assert registry.address("bridge", bridge, 10).label == "Optimism Bridge"
        assert registry.address("bridge", bridge, 1) is None
        assert registry.address("bridge", bridge) is None

    def test_chain_falls_back_to_global(self, registry):
        assert registry.address("dex", UNISWAP_V2_ROUTER, 8453).label == "Uniswap V2"

    def test_stats(self, registry):
        stats = registry.stats()
        assert stats["version"] == "builtin"
        assert stats["chains"] == [10, 8453]
        assert stats["families"]["transfer"]["addresses"] == 0

    def test_embedded_tables_not_mutated_by_overlay(self):
        build_registry(overlay={"dex": {"addresses": {NEW_ROUTER: "New"}}})
        assert NEW_ROUTER not in DEFAULT_SIGNALS["dex"]["addresses"]


class TestValidation:
    @pytest.mark.parametrize(
        "overlay, message",
        [
            ({"dex": {"addresses": {"0x1234": "Short"}}}, "malformed key"),
            ({"dex": {"selectors": {"0x38ed17": "swap"}}}, "malformed key"),
            ({"dex": {"topics": {"0x" + "zz" * 32: "swap"}}}, "malformed key"),
            ({"dex": {"addresses": {NEW_ROUTER: ""}}}, "invalid address entry"),
            ({"dex": {"addresses": {NEW_ROUTER: {"action": "swap"}}}}, "invalid address entry"),
            ({"dex": {"topics": {"0x" + "ab" * 32: {"label": "No action"}}}}, "invalid topic entry"),
            ({"dex": {"selectors": {"0x12345678": 7}}}, "invalid selector entry"),
            ({"dex": {"events": {}}}, "unknown table"),
            ({"perps": {"addresses": {}}}, "unknown family"),
            ({"dex": ["not", "a", "mapping"]}, "must be a mapping"),
            ({"dex": {"addresses": ["x"]}}, "must be a mapping"),
            ({"chains": {"base": {}}}, "invalid chain id"),
            ({"chains": {-1: {}}}, "invalid chain id"),
            ({"chains": {1: {"perps": {"addresses": {}}}}}, "unknown family"),
            ({"chains": {1: {"dex": {"selectors": {"0x12345678": "swap"}}}}}, "unknown table"),
        ],
    )
    def test_rejects_malformed(self, overlay, message):
        with pytest.raises(RegistryLoadError, match=message):
            build_registry(overlay=overlay, source="test.yaml")

    def test_error_names_source(self):
        with pytest.raises(RegistryLoadError) as exc_info:
            build_registry(overlay={"perps": {}}, source="custom.yaml")
        assert exc_info.value.source == "custom.yaml"
        assert str(exc_info.value).startswith("custom.yaml: ")

    def test_rejects_non_mapping_tables(self):
        with pytest.raises(RegistryLoadError):
            build_registry(data=["dex"])  # type: ignore[arg-type]


class TestOverlay:
    def test_overlay_adds_and_overrides(self):
        registry = build_registry(
            overlay={
                "version": "7",
                "dex": {"addresses": {NEW_ROUTER: "New DEX", UNISWAP_V2_ROUTER: "Uniswap V2 Router02"}},
            }
        )
        assert registry.version == "7"
        assert registry.address("dex", NEW_ROUTER).label == "New DEX"
        assert registry.address("dex", UNISWAP_V2_ROUTER).label == "Uniswap V2 Router02"
        # untouched entries survive
        assert registry.selector("dex", "0x38ed1739") == "swap"

    def test_overlay_keys_normalized(self):
        registry = build_registry(overlay={"dex": {"addresses": {"  " + NEW_ROUTER.upper().replace("0X", "0x"): "Upper"}}})
        assert registry.address("dex", NEW_ROUTER).label == "Upper"

    def test_chain_overlay_merges(self):
        registry = build_registry(overlay={"chains": {"8453": {"dex": {"addresses": {NEW_ROUTER: "Base DEX"}}}}})
        assert registry.address("dex", NEW_ROUTER, 8453).label == "Base DEX"
        assert registry.address("dex", "0x2626664c2603336e57b271c5c0b26f421741e481", 8453).label == "Uniswap V3"

    def test_example_overlay_is_valid(self):
        registry = build_registry(overlay=read_overlay(EXAMPLE_OVERLAY), source=str(EXAMPLE_OVERLAY))
        assert registry.version == "2026.10"
        assert registry.address("dex", "0x1b02da8cb0d097eb8d57a175b88c7d8b47997506").label == "SushiSwap"
        assert registry.address("bridge", "0x0000000000000000000000000000000000000064", 42161).label == "Arbitrum Bridge"
        assert registry.selector("execution", "0x765e827f") == "account_abstraction"


class TestReadOverlay:
    def test_empty_file(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("")
        assert read_overlay(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("dex: [unclosed\n")
        with pytest.raises(RegistryLoadError, match="cannot read overlay"):
            read_overlay(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(RegistryLoadError, match="root must be a mapping"):
            read_overlay(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RegistryLoadError):
            read_overlay(tmp_path / "nope.yaml")


class TestRegistryLoader:
    def test_without_overlay(self, tmp_path):
        registry = RegistryLoader(tmp_path).load()
        assert registry.version == "builtin"

    def test_with_overlay(self, tmp_path):
        (tmp_path / "registry.yaml").write_text(
            f'version: "3"\ndex:\n  addresses:\n    "{NEW_ROUTER}": Loaded DEX\n'
        )
        loader = RegistryLoader(tmp_path)
        registry = loader.get()

        assert registry.version == "3"
        assert registry.address("dex", NEW_ROUTER).label == "Loaded DEX"
        assert loader.get() is registry

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text('version: "1"\n')
        loader = RegistryLoader(tmp_path, path)
        assert loader.load().version == "1"

        path.write_text('version: "2"\n')
        assert loader.reload().version == "2"

    def test_malformed_overlay_raises(self, tmp_path):
        (tmp_path / "registry.yaml").write_text('dex:\n  addresses:\n    "0xnothex": Bad\n')
        with pytest.raises(RegistryLoadError):
            RegistryLoader(tmp_path).load()


class TestProcessRegistry:
    def test_lazy_default(self):
        assert get_registry() is get_registry()
        assert get_registry().version == "builtin"

    def test_init_and_reset(self):
        custom = build_registry(overlay={"version": "custom"})
        assert init_registry(custom) is custom
        assert get_registry() is custom

        reset_registry()
        assert get_registry() is not custom
