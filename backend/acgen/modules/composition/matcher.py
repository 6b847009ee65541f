# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Decoration Metadata Matcher
Decides which decoration assets are eligible for one variant.

Rules per candidate, in order:
  1. Owning project name must equal the input's project name
  2. LIFE_APPLIANCE products: any energy/capacity restriction marks the
     decoration as AC-only, so it is rejected
  3. AC products: a non-empty restriction set must contain the variant's
     value; an absent variant value never satisfies a non-empty set
  4. Category does not gate eligibility (only stacking)

Restrictions are inclusive-by-absence: None and [] both mean "any".
Never raises; an empty result is a valid state.
"""

from __future__ import annotations

from typing import Iterable, Optional

from acgen.models.asset import DecorationAsset, ProductAsset, ProductCategory
from acgen.models.composition import CompositionInput


def _admits(restriction: Optional[list[str]], value: Optional[str]) -> bool:
    if not restriction:
        return True
    return value is not None and value in restriction


def is_eligible(
    product: ProductAsset,
    decoration: DecorationAsset,
    inp: CompositionInput,
) -> bool:
    if decoration.project_name != inp.project_name:
        return False

    if product.category == ProductCategory.LIFE_APPLIANCE:
        return not decoration.is_restricted

    return (
        _admits(decoration.energy_levels, inp.energy_level)
        and _admits(decoration.capacity_codes, inp.capacity_code)
    )


def match_decorations(
    product: ProductAsset,
    decorations: Iterable[DecorationAsset],
    inp: CompositionInput,
) -> list[DecorationAsset]:
    """Return eligible decorations, preserving catalog order."""
    return [d for d in decorations if is_eligible(product, d, inp)]
