# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 4 — Override merger and layer list builder tests.
Covers the canonical badge/background scenarios and the price
triggering rule (literal text OR template default; override never
triggers on its own).
"""

from acgen.models.asset import (
    AcFormFactor,
    DecorationAsset,
    DecorationCategory,
    ProductAsset,
    ProductCategory,
)
from acgen.models.composition import CompositionInput, LayerKind
from acgen.models.instance import DecorationAdjustment, InstanceConfig, PriceOverride
from acgen.models.project import (
    DefaultPriceConfig,
    LayerOrderConfig,
    LayerType,
    Point,
    PriceLayerConfig,
    ProjectTemplate,
)
from acgen.modules.composition import apply_overrides, compute_layers
from acgen.modules.composition.layer_builder import (
    DEFAULT_ORIGINAL_PRICE_STYLE,
    DEFAULT_PROMO_PRICE_STYLE,
)


# ─── Helpers ─────────────────────────────────────────────────────────────────

PRODUCT = ProductAsset(
    id="P", file_path="products/P.png", category=ProductCategory.AC,
    form_factor=AcFormFactor.WALL, series="X1", color="White",
    energy_levels=["B1"], capacity_codes=["35"],
)
D1 = DecorationAsset(
    id="D1", file_path="decorations/D1.png", project_name="proj",
    category=DecorationCategory.ENERGY_BADGE, energy_levels=["B1"],
)
D2 = DecorationAsset(
    id="D2", file_path="decorations/D2.png", project_name="proj",
    category=DecorationCategory.BACKGROUND,
)
TEMPLATE = ProjectTemplate(layer_order=[
    LayerOrderConfig(type=LayerType.BACKGROUND, z_index=0),
    LayerOrderConfig(type=LayerType.PRODUCT, z_index=50),
    LayerOrderConfig(
        type=LayerType.DECORATION, decoration_category=DecorationCategory.ENERGY_BADGE,
        z_index=100,
    ),
])


def _inp(energy="B1", capacity="35", **kw) -> CompositionInput:
    return CompositionInput(
        project_name="proj", product_id="P", energy_level=energy, capacity_code=capacity, **kw,
    )


def _instance(**kw) -> InstanceConfig:
    return InstanceConfig(
        project_id="proj-id", product_id="P", energy_level="B1", capacity_code="35", **kw,
    )


def _with_price_defaults(template: ProjectTemplate) -> ProjectTemplate:
    return template.model_copy(update={"default_price_config": DefaultPriceConfig(
        original_price=PriceLayerConfig(x=10, y=20, font_size=30, color="#999999"),
        promo_price=PriceLayerConfig(x=10, y=60, font_size=50, color="#FF0000", bold=True),
    )})


def _ids(layers) -> list[str]:
    return [layer.id for layer in layers]


# ─── Canonical Scenarios ─────────────────────────────────────────────────────

def test_scenario_matching_energy_orders_background_product_badge():
    layers = compute_layers(PRODUCT, [D1, D2], _inp("B1", "35"), TEMPLATE)

    assert _ids(layers) == ["deco-D2", "product-P", "deco-D1"]
    assert [layer.z_index for layer in layers] == [0, 50, 100]
    assert layers[0].layer_type == LayerType.BACKGROUND
    assert layers[2].layer_type == LayerType.DECORATION


def test_scenario_other_energy_excludes_badge():
    layers = compute_layers(PRODUCT, [D1, D2], _inp("B3", "35"), TEMPLATE)
    assert _ids(layers) == ["deco-D2", "product-P"]


def test_scenario_adjustment_sets_absolute_position():
    config = _instance(decoration_adjustments=[
        DecorationAdjustment(decoration_id="D1", offset_x=10, offset_y=-5),
    ])
    layers = compute_layers(PRODUCT, [D1, D2], _inp(), TEMPLATE, config)
    by_id = {layer.id: layer for layer in layers}

    assert (by_id["deco-D1"].x, by_id["deco-D1"].y) == (10, -5)
    assert (by_id["deco-D2"].x, by_id["deco-D2"].y) == (0, 0)
    assert (by_id["product-P"].x, by_id["product-P"].y) == (0, 0)


# ─── Price Triggering Rule ───────────────────────────────────────────────────

def test_override_alone_emits_no_price_layer():
    config = _instance(price_override=PriceOverride(promo="¥999"))
    layers = compute_layers(PRODUCT, [D1, D2], _inp(), TEMPLATE, config)
    assert not any(layer.layer_type == LayerType.PRICE for layer in layers)


def test_override_with_template_default_emits_promo():
    config = _instance(price_override=PriceOverride(promo="¥999"))
    layers = compute_layers(PRODUCT, [D1, D2], _inp(), _with_price_defaults(TEMPLATE), config)

    prices = [layer for layer in layers if layer.layer_type == LayerType.PRICE]
    # Original slot is triggered by the default but has no text: dropped
    assert _ids(prices) == ["price-promo"]
    promo = prices[0]
    assert promo.kind == LayerKind.TEXT
    assert promo.text_content == "¥999"
    assert (promo.x, promo.y) == (10, 60)
    assert promo.text_style.bold is True
    assert promo.z_index == 200


def test_override_replaces_literal_text_and_position():
    config = _instance(price_override=PriceOverride(
        promo="¥999", promo_position=Point(x=300, y=400),
    ))
    layers = compute_layers(
        PRODUCT, [], _inp(price_promo_text="¥1299"), TEMPLATE, config,
    )
    promo = next(layer for layer in layers if layer.id == "price-promo")
    assert promo.text_content == "¥999"
    assert (promo.x, promo.y) == (300, 400)
    assert promo.text_style == DEFAULT_PROMO_PRICE_STYLE


def test_literal_text_without_template_uses_builtin_styles():
    layers = compute_layers(
        PRODUCT, [], _inp(price_original_text="¥3999", price_promo_text="¥2999"),
    )
    original, promo = [layer for layer in layers if layer.layer_type == LayerType.PRICE]

    assert original.id == "price-original"
    assert original.text_style == DEFAULT_ORIGINAL_PRICE_STYLE
    assert (original.x, original.y) == (DEFAULT_ORIGINAL_PRICE_STYLE.x, DEFAULT_ORIGINAL_PRICE_STYLE.y)
    assert promo.id == "price-promo"
    assert promo.text_content == "¥2999"


def test_empty_override_text_keeps_literal():
    config = _instance(price_override=PriceOverride(promo=""))
    layers = compute_layers(PRODUCT, [], _inp(price_promo_text="¥2999"), TEMPLATE, config)
    promo = next(layer for layer in layers if layer.id == "price-promo")
    assert promo.text_content == "¥2999"


# ─── Ordering Invariants ─────────────────────────────────────────────────────

def test_output_sorted_and_ties_keep_insertion_order():
    logo_a = DecorationAsset(
        id="LA", file_path="decorations/a.png", project_name="proj",
        category=DecorationCategory.BRAND_LOGO,
    )
    logo_b = logo_a.model_copy(update={"id": "LB"})
    layers = compute_layers(
        PRODUCT, [logo_a, D2, logo_b], _inp(price_original_text="a", price_promo_text="b"),
    )

    zs = [layer.z_index for layer in layers]
    assert zs == sorted(zs)
    assert _ids(layers) == [
        "deco-D2", "product-P", "deco-LA", "deco-LB", "price-original", "price-promo",
    ]


def test_rebuild_is_identical():
    config = _instance(decoration_adjustments=[
        DecorationAdjustment(decoration_id="D2", offset_x=3, offset_y=4),
    ])
    first = compute_layers(PRODUCT, [D1, D2], _inp(), TEMPLATE, config)
    second = compute_layers(PRODUCT, [D1, D2], _inp(), TEMPLATE, config)
    assert first == second


def test_labels_are_deterministic():
    layers = compute_layers(PRODUCT, [D1], _inp(price_promo_text="¥1"))
    assert [layer.label for layer in layers] == [
        "Product: X1 White", "ENERGY_BADGE: D1", "Price: promo",
    ]


# ─── apply_overrides ─────────────────────────────────────────────────────────

def test_apply_overrides_without_config_is_identity():
    base = compute_layers(PRODUCT, [D1, D2], _inp(), TEMPLATE)
    assert apply_overrides(base, None) == base


def test_apply_overrides_does_not_mutate_input():
    base = compute_layers(PRODUCT, [D1, D2], _inp(), TEMPLATE)
    config = _instance(decoration_adjustments=[
        DecorationAdjustment(decoration_id="D1", offset_x=99, offset_y=99),
    ])
    merged = apply_overrides(base, config)

    assert next(layer for layer in base if layer.id == "deco-D1").x == 0
    assert next(layer for layer in merged if layer.id == "deco-D1").x == 99


def test_adjustment_for_unmatched_decoration_is_ignored():
    config = _instance(decoration_adjustments=[
        DecorationAdjustment(decoration_id="GONE", offset_x=5, offset_y=5),
    ])
    layers = compute_layers(PRODUCT, [D2], _inp(), TEMPLATE, config)
    assert all((layer.x, layer.y) == (0, 0) for layer in layers)
