# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Layer Composition Engine
Public API for matching, z-order resolution, override merging and layer
list building. Everything here is pure and safe to call concurrently.
"""

from acgen.modules.composition.layer_builder import compute_layers
from acgen.modules.composition.layer_order import (
    assign_descending_z,
    default_layer_order,
    reorder,
    top_first,
)
from acgen.modules.composition.matcher import is_eligible, match_decorations
from acgen.modules.composition.naming import (
    dedupe_file_name,
    variant_file_name,
    variant_stem,
)
from acgen.modules.composition.overrides import apply_overrides
from acgen.modules.composition.variants import generate_variants
from acgen.modules.composition.z_order import DEFAULT_Z_INDEX, resolve_z

__all__ = [
    # Matcher
    "is_eligible",
    "match_decorations",
    # Z-order
    "DEFAULT_Z_INDEX",
    "resolve_z",
    # Overrides
    "apply_overrides",
    # Builder
    "compute_layers",
    # Naming
    "variant_stem",
    "variant_file_name",
    "dedupe_file_name",
    # Editing helpers
    "reorder",
    "assign_descending_z",
    "top_first",
    "default_layer_order",
    # Variants
    "generate_variants",
]
