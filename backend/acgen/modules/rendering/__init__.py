# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Rendering Module
Public API for turning a layer list into PNG or PSD bytes.
"""

from acgen.modules.rendering.layer_pixels import layer_pixels, round_px
from acgen.modules.rendering.layered_renderer import render_layered
from acgen.modules.rendering.raster_renderer import render_flat
from acgen.modules.rendering.text_rasterizer import load_font, rasterize_text

__all__ = [
    "render_flat",
    "render_layered",
    "rasterize_text",
    "load_font",
    "layer_pixels",
    "round_px",
]
