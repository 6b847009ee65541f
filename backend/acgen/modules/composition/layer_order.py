# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Template Layer Order Editing
Pure helpers behind the template editor's drag-to-reorder list. The list
is shown top-first (highest z at index 0), the opposite of render order.
Not part of the composition engine; the engine only reads the result.
"""

from __future__ import annotations

from typing import Iterable, TypeVar

from pydantic import BaseModel

from acgen.models.asset import DecorationAsset, DecorationCategory
from acgen.models.project import LayerOrderConfig, LayerType

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def reorder(items: list[T], from_index: int, to_index: int) -> list[T]:
    """Return a new list with the item at from_index moved to to_index."""
    if not 0 <= from_index < len(items):
        raise IndexError(f"from_index {from_index} out of range for {len(items)} items")
    if not 0 <= to_index < len(items):
        raise IndexError(f"to_index {to_index} out of range for {len(items)} items")
    result = list(items)
    result.insert(to_index, result.pop(from_index))
    return result


def assign_descending_z(items: list[M], step: int = 10, base: int = 0) -> list[M]:
    """
    Re-derive z-indices from list position: index 0 (top) gets the highest.
    Item i of n gets (n - i) * step + base.
    """
    total = len(items)
    return [
        item.model_copy(update={"z_index": (total - i) * step + base})
        for i, item in enumerate(items)
    ]


def top_first(entries: Iterable[LayerOrderConfig]) -> list[LayerOrderConfig]:
    """Template entries in editor order (descending z, stable)."""
    return sorted(entries, key=lambda e: -e.z_index)


def default_layer_order(decorations: Iterable[DecorationAsset]) -> list[LayerOrderConfig]:
    """
    Seed a template for a project that has none, in top-first order:
    price 200, one entry per decoration category seen (100 + first-seen
    index, BACKGROUND excluded), product 50, background 0.
    """
    categories: list[DecorationCategory] = []
    for deco in decorations:
        if deco.category not in categories:
            categories.append(deco.category)

    entries = [LayerOrderConfig(type=LayerType.PRICE, z_index=200)]
    decoration_entries = [
        LayerOrderConfig(
            type=LayerType.DECORATION,
            decoration_category=cat,
            z_index=100 + index,
        )
        for index, cat in enumerate(categories)
        if cat != DecorationCategory.BACKGROUND
    ]
    entries.extend(top_first(decoration_entries))
    entries.append(LayerOrderConfig(type=LayerType.PRODUCT, z_index=50))
    entries.append(LayerOrderConfig(type=LayerType.BACKGROUND, z_index=0))
    return entries
