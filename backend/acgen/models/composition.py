# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Composition Models
CompositionInput is the request to render one variant; LayerItem is the
engine's output unit. LayerItems are immutable and computed fresh per
request; they are never persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from acgen.models.project import LayerType, PriceLayerConfig


class LayerKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"


class RenderFormat(str, Enum):
    PNG = "png"
    PSD = "psd"

    @property
    def media_type(self) -> str:
        return "image/png" if self is RenderFormat.PNG else "image/vnd.adobe.photoshop"


class CompositionInput(BaseModel):
    """One variant: product + optional energy level + optional capacity code."""
    project_name: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    energy_level: Optional[str] = None
    capacity_code: Optional[str] = None
    price_original_text: Optional[str] = None
    price_promo_text: Optional[str] = None


class LayerItem(BaseModel):
    """One resolved layer, ready for preview or rendering."""
    model_config = ConfigDict(frozen=True)

    id: str
    kind: LayerKind
    layer_type: LayerType
    # Deterministic display name; used as the PSD layer name
    label: str

    # ── image kind ──
    asset_id: Optional[str] = None
    file_path: Optional[str] = None

    # ── text kind ──
    text_content: Optional[str] = None
    text_style: Optional[PriceLayerConfig] = None

    z_index: int
    x: float = 0.0
    y: float = 0.0


class RenderedOutput(BaseModel):
    """Bytes and deterministic file name for one rendered variant."""
    data: bytes
    file_name: str
    format: RenderFormat

    @property
    def media_type(self) -> str:
        return self.format.media_type


# ─── API Request Schemas ─────────────────────────────────────────────────────

class BatchRequest(BaseModel):
    """Request body for POST /batch/generate and POST /batch/jobs."""
    variants: list[CompositionInput] = Field(..., min_length=1)
    format: RenderFormat = RenderFormat.PNG


class VariantRequest(BaseModel):
    """Request body for POST /compose/variants."""
    project_name: str = Field(..., min_length=1)
    product_ids: list[str] = Field(default_factory=list)
    energy_levels: list[str] = Field(default_factory=list)
    capacity_codes: list[str] = Field(default_factory=list)
