# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Variant Generator
Cartesian product of products × selected energy levels × selected
capacity codes, skipping combinations outside a product's declared range.

An empty selection means "not specified" and yields a single variant
with that field absent. A product with no declared range accepts every
selected value.
"""

from __future__ import annotations

from typing import Iterable, Optional

from acgen.models.asset import ProductAsset
from acgen.models.composition import CompositionInput


def _in_range(declared: Optional[list[str]], value: Optional[str]) -> bool:
    return value is None or not declared or value in declared


def generate_variants(
    project_name: str,
    products: Iterable[ProductAsset],
    energy_levels: list[str],
    capacity_codes: list[str],
) -> list[CompositionInput]:
    selected_energy: list[Optional[str]] = list(energy_levels) or [None]
    selected_capacity: list[Optional[str]] = list(capacity_codes) or [None]

    variants: list[CompositionInput] = []
    for product in products:
        for energy in selected_energy:
            if not _in_range(product.energy_levels, energy):
                continue
            for capacity in selected_capacity:
                if not _in_range(product.capacity_codes, capacity):
                    continue
                variants.append(CompositionInput(
                    project_name=project_name,
                    product_id=product.id,
                    energy_level=energy,
                    capacity_code=capacity,
                ))
    return variants
