# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Layer List Builder
Produces the ordered LayerItem list for one variant. The same function
feeds the interactive preview and the final renderers, so what the user
fine-tunes is exactly what gets exported.

Steps:
  1. Product layer at resolve_z(PRODUCT), position (0, 0)
  2. Eligible decorations (matcher), each resolved through the three-tier
     z-order with its own id; BACKGROUND category maps to the background
     layer type, everything else to decoration
  3. Price text layers (original, then promo) when triggered
  4. Instance overrides merged
  5. Stable ascending sort by z-index

Price triggering rule:
  A slot's layer is triggered iff the input carries literal text for that
  slot OR the template has a default price config. An instance price
  override alone never triggers a layer; it only replaces text/position
  of a triggered one. A triggered layer that still has no text after
  merging is dropped.

Pure: no I/O, no shared state, inputs are never mutated.
"""

from __future__ import annotations

from typing import Iterable, Optional

from acgen.models.asset import DecorationAsset, DecorationCategory, ProductAsset
from acgen.models.composition import CompositionInput, LayerItem, LayerKind
from acgen.models.instance import InstanceConfig
from acgen.models.project import LayerType, PriceLayerConfig, ProjectTemplate
from acgen.modules.composition.matcher import match_decorations
from acgen.modules.composition.overrides import (
    PRICE_ORIGINAL_ID,
    PRICE_PROMO_ID,
    apply_overrides,
)
from acgen.modules.composition.z_order import resolve_z

# Used when literal price text is supplied but the template has no price styling
DEFAULT_ORIGINAL_PRICE_STYLE = PriceLayerConfig(
    x=40, y=40, font_size=36, color="#8C8C8C"
)
DEFAULT_PROMO_PRICE_STYLE = PriceLayerConfig(
    x=40, y=96, font_size=64, color="#E60012", bold=True
)


def product_layer(
    product: ProductAsset, template: Optional[ProjectTemplate]
) -> LayerItem:
    label = " ".join(p for p in (product.series, product.color) if p) or product.id
    return LayerItem(
        id=f"product-{product.id}",
        kind=LayerKind.IMAGE,
        layer_type=LayerType.PRODUCT,
        label=f"Product: {label}",
        asset_id=product.id,
        file_path=product.file_path,
        z_index=resolve_z(LayerType.PRODUCT, template=template),
    )


def decoration_layer(
    decoration: DecorationAsset, template: Optional[ProjectTemplate]
) -> LayerItem:
    layer_type = (
        LayerType.BACKGROUND
        if decoration.category == DecorationCategory.BACKGROUND
        else LayerType.DECORATION
    )
    return LayerItem(
        id=f"deco-{decoration.id}",
        kind=LayerKind.IMAGE,
        layer_type=layer_type,
        label=f"{decoration.category.value}: {decoration.id}",
        asset_id=decoration.id,
        file_path=decoration.file_path,
        z_index=resolve_z(
            layer_type,
            decoration_category=decoration.category,
            decoration_id=decoration.id,
            template=template,
        ),
    )


def price_layers(
    inp: CompositionInput, template: Optional[ProjectTemplate]
) -> list[LayerItem]:
    """Synthesize the triggered price layers with base text and style."""
    defaults = template.default_price_config if template else None
    z = resolve_z(LayerType.PRICE, template=template)

    slots = (
        (PRICE_ORIGINAL_ID, "original", inp.price_original_text,
         defaults.original_price if defaults else DEFAULT_ORIGINAL_PRICE_STYLE),
        (PRICE_PROMO_ID, "promo", inp.price_promo_text,
         defaults.promo_price if defaults else DEFAULT_PROMO_PRICE_STYLE),
    )

    layers: list[LayerItem] = []
    for layer_id, slot, literal, style in slots:
        if not literal and defaults is None:
            continue
        layers.append(LayerItem(
            id=layer_id,
            kind=LayerKind.TEXT,
            layer_type=LayerType.PRICE,
            label=f"Price: {slot}",
            text_content=literal or "",
            text_style=style,
            z_index=z,
            x=style.x,
            y=style.y,
        ))
    return layers


def compute_layers(
    product: ProductAsset,
    decorations: Iterable[DecorationAsset],
    inp: CompositionInput,
    template: Optional[ProjectTemplate] = None,
    instance_config: Optional[InstanceConfig] = None,
) -> list[LayerItem]:
    """
    Build the final, z-sorted layer list for one variant.

    Args:
        product:         The variant's product asset
        decorations:     Full decoration catalog (filtered here)
        inp:             The variant being composed
        template:        Project template, or None for type defaults
        instance_config: Per-variant overrides, or None

    Returns:
        LayerItems sorted ascending by z_index; ties keep insertion order
        (product, decorations in catalog order, price original, promo).
    """
    layers: list[LayerItem] = [product_layer(product, template)]

    for deco in match_decorations(product, decorations, inp):
        layers.append(decoration_layer(deco, template))

    layers.extend(price_layers(inp, template))

    layers = apply_overrides(layers, instance_config)
    layers = [
        layer for layer in layers
        if layer.kind != LayerKind.TEXT or layer.text_content
    ]

    # sorted() is stable: equal z keeps insertion order
    return sorted(layers, key=lambda layer: layer.z_index)
