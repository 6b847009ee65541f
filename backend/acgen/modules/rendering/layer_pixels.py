# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Layer Pixel Source
Turns one LayerItem into (RGBA pixels, left, top) for either renderer.
All asset I/O failures surface as RenderError so a batch can isolate
them to the one variant.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from acgen.api.middleware.error_handler import RenderError
from acgen.models.composition import LayerItem, LayerKind
from acgen.modules.rendering.text_rasterizer import rasterize_text
from acgen.utils.image_utils import load_image_rgba, round_px
from acgen.utils.storage import resolve_asset_path


def load_layer_image(layer: LayerItem, storage_root: Path | None = None) -> np.ndarray:
    if not layer.file_path:
        raise RenderError(f"Image layer {layer.id} has no file_path")
    try:
        path = resolve_asset_path(layer.file_path, storage_root)
    except ValueError as exc:
        raise RenderError(str(exc)) from exc
    try:
        return load_image_rgba(path)
    except (FileNotFoundError, ValueError) as exc:
        raise RenderError(f"Cannot read asset for layer {layer.id}: {exc}") from exc


def layer_pixels(
    layer: LayerItem,
    canvas_width: int,
    canvas_height: int,
    storage_root: Path | None = None,
) -> tuple[np.ndarray, int, int]:
    """
    Returns:
        (rgba, left, top). Image layers keep their native resolution at
        their rounded offset; text layers are full-canvas at (0, 0).
    """
    if layer.kind == LayerKind.IMAGE:
        return load_layer_image(layer, storage_root), round_px(layer.x), round_px(layer.y)

    try:
        return rasterize_text(layer, canvas_width, canvas_height), 0, 0
    except (OSError, ValueError) as exc:
        raise RenderError(f"Cannot rasterize text layer {layer.id}: {exc}") from exc
