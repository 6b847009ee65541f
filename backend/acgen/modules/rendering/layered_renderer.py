# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Layered (PSD) Renderer
Writes one named pixel layer per LayerItem, bottom to top, so designers
can keep editing the composition in Photoshop.

Layer stack (index 0 = bottom):
    LayerItems in ascending z_index, each named by its label, image
    layers at their rounded offset, text layers as full-canvas pixels
  + one hidden 1x1 transparent layer on top named after the variant,
    which keeps the variant identity inside the file.
"""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image
from psd_tools import PSDImage
from psd_tools.api.layers import PixelLayer
from psd_tools.constants import Tag

from acgen.api.middleware.error_handler import RenderError
from acgen.models.composition import LayerItem
from acgen.modules.rendering.layer_pixels import layer_pixels
from acgen.utils.image_utils import rgba_to_pil
from acgen.utils.logger import get_logger

log = get_logger(__name__)


def _named_layer(image: Image.Image, psd: PSDImage, name: str, top: int, left: int) -> PixelLayer:
    """
    Pixel layer carrying `name` in full. The legacy Pascal name is Mac Roman
    only, so CJK names such as X1-挂机-B1 live in the Unicode name block.
    """
    legacy = name.encode("macroman", "replace").decode("macroman")
    layer = PixelLayer.frompil(image, psd, legacy, top=top, left=left)
    layer.tagged_blocks.set_data(Tag.UNICODE_LAYER_NAME, name)
    return layer


def render_layered(
    layers: list[LayerItem],
    canvas_width: int,
    canvas_height: int,
    variant_name: str,
    storage_root: Path | None = None,
) -> bytes:
    """
    Build a PSD document for the given layers.

    Returns:
        PSD bytes.

    Raises:
        RenderError: an asset could not be read or the document not written.
    """
    rasters = [
        (layer, *layer_pixels(layer, canvas_width, canvas_height, storage_root))
        for layer in sorted(layers, key=lambda layer: layer.z_index)
    ]

    try:
        psd = PSDImage.new("RGBA", (canvas_width, canvas_height))
        for layer, pixels, left, top in rasters:
            psd.append(_named_layer(rgba_to_pil(pixels), psd, layer.label, top, left))

        marker = _named_layer(Image.new("RGBA", (1, 1), (0, 0, 0, 0)), psd, variant_name, 0, 0)
        marker.visible = False
        psd.append(marker)

        buf = io.BytesIO()
        psd.save(buf)
    except (OSError, ValueError, TypeError) as exc:
        raise RenderError(f"Failed to write PSD for {variant_name}: {exc}") from exc

    data = buf.getvalue()
    log.debug(
        "layered_render_complete",
        variant=variant_name,
        layers=len(rasters) + 1,
        bytes=len(data),
    )
    return data
