# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Variant File Naming
<series>-<typeLabel>-<energyLevel>-<color>-<capacityCode>.<ext>
e.g. 天丽-挂机-B3-皓雪白-26.png

Empty components are dropped before joining. An empty series becomes
"Unknown". The pattern is shared with downstream tooling; keep it exact.
"""

from __future__ import annotations

from typing import Optional

from acgen.models.asset import AcFormFactor, ProductAsset
from acgen.models.composition import RenderFormat

FORM_FACTOR_LABELS: dict[AcFormFactor, str] = {
    AcFormFactor.WALL: "挂机",
    AcFormFactor.CABINET: "柜机",
}


def variant_stem(
    product: ProductAsset,
    energy_level: Optional[str] = None,
    capacity_code: Optional[str] = None,
) -> str:
    type_label = FORM_FACTOR_LABELS.get(product.form_factor, "") if product.form_factor else ""
    parts = [
        product.series or "Unknown",
        type_label,
        energy_level or "",
        product.color or "",
        capacity_code or "",
    ]
    return "-".join(p for p in parts if p)


def variant_file_name(
    product: ProductAsset,
    energy_level: Optional[str],
    capacity_code: Optional[str],
    fmt: RenderFormat,
) -> str:
    return f"{variant_stem(product, energy_level, capacity_code)}.{fmt.value}"


def dedupe_file_name(name: str, taken: set[str]) -> str:
    """
    Return `name`, or `stem_<n>.ext` with the lowest n >= 2 not in `taken`.
    Adds the returned name to `taken`.
    """
    if name not in taken:
        taken.add(name)
        return name
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    n = 2
    while True:
        candidate = f"{stem}_{n}.{ext}" if ext else f"{stem}_{n}"
        if candidate not in taken:
            taken.add(candidate)
            return candidate
        n += 1
