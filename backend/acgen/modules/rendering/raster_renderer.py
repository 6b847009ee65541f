# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Raster Renderer
Flattens an ordered layer list into a single PNG.

Starts from a fully transparent canvas and composites every layer in
ascending z-order ("over" operator, straight alpha). Image layers land at
their rounded (x, y) and are clipped to the canvas; text layers arrive as
full-canvas overlays. The same layer list always encodes to the same
bytes: no timestamps or random state reach the encoder.
"""

from __future__ import annotations

from pathlib import Path

from acgen.api.middleware.error_handler import RenderError
from acgen.models.composition import LayerItem
from acgen.modules.rendering.layer_pixels import layer_pixels
from acgen.utils.image_utils import alpha_composite_at, rgba_to_png_bytes, transparent_canvas
from acgen.utils.logger import get_logger

log = get_logger(__name__)


def render_flat(
    layers: list[LayerItem],
    canvas_width: int,
    canvas_height: int,
    storage_root: Path | None = None,
) -> bytes:
    """
    Composite layers into one PNG.

    Args:
        layers:        LayerItems (re-sorted stably by z_index here)
        canvas_width:  Output width in pixels
        canvas_height: Output height in pixels
        storage_root:  Root for resolving image file paths (settings default)

    Returns:
        PNG bytes.

    Raises:
        RenderError: an asset could not be read or the PNG not encoded.
    """
    canvas = transparent_canvas(canvas_width, canvas_height)

    for layer in sorted(layers, key=lambda layer: layer.z_index):
        pixels, left, top = layer_pixels(layer, canvas_width, canvas_height, storage_root)
        canvas = alpha_composite_at(canvas, pixels, left, top)

    try:
        data = rgba_to_png_bytes(canvas)
    except RuntimeError as exc:
        raise RenderError(str(exc)) from exc

    log.debug(
        "flat_render_complete",
        layers=len(layers),
        size=(canvas_width, canvas_height),
        bytes=len(data),
    )
    return data
