# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Asset Catalog Models
Product photos are shared across projects; decoration overlays belong to
exactly one project (bound by project name, not by project id).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class ProductCategory(str, Enum):
    AC = "AC"
    LIFE_APPLIANCE = "LIFE_APPLIANCE"


class AcFormFactor(str, Enum):
    WALL = "WALL"
    CABINET = "CABINET"


class DecorationCategory(str, Enum):
    BACKGROUND = "BACKGROUND"
    ENERGY_BADGE = "ENERGY_BADGE"
    CAPACITY_BADGE = "CAPACITY_BADGE"
    BRAND_LOGO = "BRAND_LOGO"
    OTHER = "OTHER"


class ProductAsset(BaseModel):
    """One product photo plus the metadata used for matching and naming."""
    id: str
    file_path: str = Field(..., description="Path relative to the storage root")
    category: ProductCategory
    # Only meaningful (and required) for AC products
    form_factor: Optional[AcFormFactor] = None
    series: str = ""
    color: str = ""
    energy_levels: Optional[list[str]] = None
    capacity_codes: Optional[list[str]] = None

    @model_validator(mode="after")
    def _form_factor_required_for_ac(self) -> "ProductAsset":
        if self.category == ProductCategory.AC and self.form_factor is None:
            raise ValueError("form_factor is required when category is AC")
        return self


class DecorationAsset(BaseModel):
    """One project-scoped overlay image."""
    id: str
    file_path: str = Field(..., description="Path relative to the storage root")
    project_name: str = Field(..., min_length=1)
    category: DecorationCategory
    energy_levels: Optional[list[str]] = None
    capacity_codes: Optional[list[str]] = None

    @property
    def is_restricted(self) -> bool:
        """True if the decoration declares any energy or capacity restriction."""
        return bool(self.energy_levels) or bool(self.capacity_codes)


# ─── Upload Metadata Schemas ─────────────────────────────────────────────────

class ProductMeta(BaseModel):
    """Metadata submitted alongside a product image upload."""
    category: ProductCategory
    form_factor: Optional[AcFormFactor] = None
    series: str = ""
    color: str = ""
    energy_levels: Optional[list[str]] = None
    capacity_codes: Optional[list[str]] = None


class DecorationMeta(BaseModel):
    """Metadata submitted alongside a decoration image upload."""
    project_name: str = Field(..., min_length=1)
    category: DecorationCategory
    energy_levels: Optional[list[str]] = None
    capacity_codes: Optional[list[str]] = None
