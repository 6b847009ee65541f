# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Instance Override Merger
Applies one variant's InstanceConfig onto the base layer list.

  Decoration / background layers: a DecorationAdjustment for the asset id
      REPLACES x/y (absolute position relative to the template origin,
      not a delta)
  Product layer: always (0, 0), never adjustable
  Price layers: the price override replaces text and, when given, the
      position of a price layer that was already emitted; it never
      creates one

Returns new LayerItems; inputs are not modified.
"""

from __future__ import annotations

from typing import Optional

from acgen.models.composition import LayerItem
from acgen.models.instance import InstanceConfig, PriceOverride
from acgen.models.project import LayerType, Point

PRICE_ORIGINAL_ID = "price-original"
PRICE_PROMO_ID = "price-promo"


def _price_override_for(
    layer_id: str, override: PriceOverride
) -> tuple[Optional[str], Optional[Point]]:
    if layer_id == PRICE_ORIGINAL_ID:
        return override.original, override.original_position
    if layer_id == PRICE_PROMO_ID:
        return override.promo, override.promo_position
    return None, None


def _apply_one(layer: LayerItem, config: InstanceConfig) -> LayerItem:
    if layer.layer_type == LayerType.PRODUCT:
        if layer.x == 0 and layer.y == 0:
            return layer
        return layer.model_copy(update={"x": 0.0, "y": 0.0})

    if layer.layer_type in (LayerType.DECORATION, LayerType.BACKGROUND):
        adj = config.adjustment_for(layer.asset_id or "")
        if adj is None:
            return layer
        return layer.model_copy(update={"x": adj.offset_x, "y": adj.offset_y})

    if layer.layer_type == LayerType.PRICE and config.price_override is not None:
        text, position = _price_override_for(layer.id, config.price_override)
        update: dict = {}
        if text:
            update["text_content"] = text
        if position is not None:
            update["x"] = position.x
            update["y"] = position.y
        return layer.model_copy(update=update) if update else layer

    return layer


def apply_overrides(
    base_layers: list[LayerItem],
    instance_config: Optional[InstanceConfig] = None,
) -> list[LayerItem]:
    """
    Merge per-instance overrides onto the base layers.
    Order is preserved; sorting is the builder's job.
    """
    if instance_config is None:
        return list(base_layers)
    return [_apply_one(layer, instance_config) for layer in base_layers]
