# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Z-Order Resolver
Computes the stacking index of a layer from the project template.

Three independent tiers, tried in order; the first non-None result wins:

  Tier 1 (id binding):       template entry whose decoration_id equals the
                             decoration being resolved
  Tier 2 (category binding): first entry with the same layer type and NO
                             decoration_id; decorations also require an
                             equal category
  Tier 3 (type default):     DEFAULT_Z_INDEX

An id-bound entry can never satisfy a tier-2 lookup, so pinning one asset
in a category (e.g. a single OTHER overlay) leaves the rest of that
category on the shared category z-index.
"""

from __future__ import annotations

from typing import Callable, Optional

from acgen.models.asset import DecorationCategory
from acgen.models.project import LayerType, ProjectTemplate

DEFAULT_Z_INDEX: dict[LayerType, int] = {
    LayerType.BACKGROUND: 0,
    LayerType.PRODUCT: 50,
    LayerType.DECORATION: 100,
    LayerType.PRICE: 200,
}

ZLookup = Callable[
    [LayerType, Optional[DecorationCategory], Optional[str], Optional[ProjectTemplate]],
    Optional[int],
]


def z_by_decoration_id(
    layer_type: LayerType,
    category: Optional[DecorationCategory],
    decoration_id: Optional[str],
    template: Optional[ProjectTemplate],
) -> Optional[int]:
    if template is None or not decoration_id:
        return None
    for entry in template.layer_order:
        if entry.decoration_id == decoration_id:
            return entry.z_index
    return None


def z_by_category(
    layer_type: LayerType,
    category: Optional[DecorationCategory],
    decoration_id: Optional[str],
    template: Optional[ProjectTemplate],
) -> Optional[int]:
    if template is None:
        return None
    for entry in template.layer_order:
        if entry.type != layer_type or entry.decoration_id:
            continue
        if layer_type == LayerType.DECORATION and entry.decoration_category != category:
            continue
        return entry.z_index
    return None


def z_by_type_default(
    layer_type: LayerType,
    category: Optional[DecorationCategory],
    decoration_id: Optional[str],
    template: Optional[ProjectTemplate],
) -> Optional[int]:
    return DEFAULT_Z_INDEX[layer_type]


RESOLUTION_TIERS: tuple[ZLookup, ...] = (
    z_by_decoration_id,
    z_by_category,
    z_by_type_default,
)


def resolve_z(
    layer_type: LayerType,
    decoration_category: Optional[DecorationCategory] = None,
    decoration_id: Optional[str] = None,
    template: Optional[ProjectTemplate] = None,
) -> int:
    """
    Resolve the z-index for one layer.

    Args:
        layer_type:          Layer role (background/product/decoration/price)
        decoration_category: Category of the decoration, if any
        decoration_id:       Specific decoration id for tier-1 lookup
        template:            Project template; None means defaults only

    Returns:
        Integer z-index (lower paints first).
    """
    for lookup in RESOLUTION_TIERS:
        z = lookup(layer_type, decoration_category, decoration_id, template)
        if z is not None:
            return z
    # Unreachable while DEFAULT_Z_INDEX covers every LayerType
    raise KeyError(layer_type)
