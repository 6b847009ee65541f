# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Instance Override Models
Per-variant fine-tuning, keyed by (project_id, product_id, energy_level,
capacity_code). Created on first edit, updated by upsert, never deleted
automatically.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from acgen.models.project import Point


class DecorationAdjustment(BaseModel):
    decoration_id: str
    # Final position relative to the template origin, not a delta
    offset_x: float = 0.0
    offset_y: float = 0.0


class PriceOverride(BaseModel):
    original: Optional[str] = None
    promo: Optional[str] = None
    original_position: Optional[Point] = None
    promo_position: Optional[Point] = None


class InstanceConfig(BaseModel):
    id: str = ""
    project_id: str
    product_id: str
    energy_level: Optional[str] = None
    capacity_code: Optional[str] = None

    price_override: Optional[PriceOverride] = None
    decoration_adjustments: list[DecorationAdjustment] = Field(default_factory=list)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def key(self) -> tuple[str, str, Optional[str], Optional[str]]:
        return (self.project_id, self.product_id, self.energy_level, self.capacity_code)

    def adjustment_for(self, decoration_id: str) -> Optional[DecorationAdjustment]:
        for adj in self.decoration_adjustments:
            if adj.decoration_id == decoration_id:
                return adj
        return None
