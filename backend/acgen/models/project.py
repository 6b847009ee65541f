# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Project and Template Models
A project owns a canvas size and an optional template. The template is
the base stacking order and price styling shared by every variant of the
project; per-variant deviations live in InstanceConfig instead.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from acgen.models.asset import DecorationCategory


class LayerType(str, Enum):
    """Closed set of layer roles. DEFAULT_Z_INDEX must cover every member."""
    BACKGROUND = "background"
    PRODUCT = "product"
    DECORATION = "decoration"
    PRICE = "price"


class LayerOrderConfig(BaseModel):
    """
    One template stacking rule.
    With decoration_id set, the rule pins that single asset and is never
    used as a category-level rule.
    """
    type: LayerType
    decoration_category: Optional[DecorationCategory] = None
    decoration_id: Optional[str] = None
    z_index: int


class Point(BaseModel):
    x: float
    y: float


class PriceLayerConfig(BaseModel):
    """Style and default position of one price text layer."""
    x: float = 0.0
    y: float = 0.0
    font_family: str = ""
    font_size: int = Field(48, gt=0)
    color: str = "#000000"
    bold: bool = False


class DefaultPriceConfig(BaseModel):
    original_price: PriceLayerConfig
    promo_price: PriceLayerConfig


class ProjectTemplate(BaseModel):
    layer_order: list[LayerOrderConfig] = Field(default_factory=list)
    default_price_config: Optional[DefaultPriceConfig] = None


class Project(BaseModel):
    id: str
    # Unique key; decorations and composition inputs refer to this
    project_name: str = Field(..., min_length=1)
    display_name: str = ""
    canvas_width: int = Field(..., gt=0)
    canvas_height: int = Field(..., gt=0)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    template: Optional[ProjectTemplate] = None


# ─── API Request Schemas ─────────────────────────────────────────────────────

class ProjectCreate(BaseModel):
    """Request body for POST /projects."""
    project_name: str = Field(..., min_length=1)
    display_name: str = ""
    canvas_width: int = Field(800, gt=0)
    canvas_height: int = Field(800, gt=0)
    template: Optional[ProjectTemplate] = None


class ProjectUpdate(BaseModel):
    """Request body for PUT /projects/{id}. Only provided fields change."""
    display_name: Optional[str] = None
    canvas_width: Optional[int] = Field(None, gt=0)
    canvas_height: Optional[int] = Field(None, gt=0)
    template: Optional[ProjectTemplate] = None


class ProjectDuplicate(BaseModel):
    """Request body for POST /projects/{id}/duplicate."""
    project_name: str = Field(..., min_length=1)
    display_name: str = ""


class TemplateReorderRequest(BaseModel):
    """
    Request body for POST /projects/{id}/template/reorder.
    Indices refer to the top-first listing (highest z first).
    """
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)
