# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Price Text Rasterizer
Draws one text LayerItem onto a full-canvas transparent RGBA overlay.

Font lookup searches each configured font dir (and one level below it)
for <family>.ttf/.otf/.ttc; bold requests try <family>-Bold first. With
no bold face available, bold is synthesised with a stroke in the fill
colour. Unresolvable families fall back to the configured default family,
then to Pillow's built-in font at the requested size.

The text is anchored at its ascender line: (x, y) is the top of the
tallest glyphs, so the baseline lands at y + ascent.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from acgen.config import get_settings
from acgen.models.composition import LayerItem
from acgen.models.project import PriceLayerConfig
from acgen.utils.image_utils import round_px

_FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")


def _candidate_names(family: str, bold: bool) -> list[str]:
    if bold:
        return [f"{family}-Bold", f"{family}Bold", f"{family} Bold"]
    return [family]


@lru_cache(maxsize=256)
def find_font_file(family: str, bold: bool, font_dirs: tuple[Path, ...]) -> Optional[Path]:
    """Locate a font file for family/weight, or None."""
    if not family:
        return None
    for directory in font_dirs:
        if not directory.is_dir():
            continue
        for name in _candidate_names(family, bold):
            for ext in _FONT_EXTENSIONS:
                direct = directory / f"{name}{ext}"
                if direct.is_file():
                    return direct
                nested = sorted(directory.glob(f"*/{name}{ext}"))
                if nested:
                    return nested[0]
    return None


@lru_cache(maxsize=128)
def _load_truetype(path: Path, size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(str(path), size)


def load_font(
    family: str, size: int, bold: bool
) -> tuple[ImageFont.FreeTypeFont | ImageFont.ImageFont, bool]:
    """
    Resolve a font for the given style.

    Returns:
        (font, synthetic_bold): synthetic_bold is True when bold was
        requested but only a regular face was found.
    """
    settings = get_settings()
    dirs = tuple(settings.font_dirs)

    if bold:
        path = find_font_file(family, True, dirs)
        if path is not None:
            return _load_truetype(path, size), False

    for fam in (family, settings.default_font_family):
        path = find_font_file(fam, False, dirs)
        if path is not None:
            return _load_truetype(path, size), bold

    return ImageFont.load_default(size=size), bold


def parse_color(color: str) -> tuple[int, int, int, int]:
    """CSS-style colour string to RGBA. Raises ValueError when unparseable."""
    rgba = ImageColor.getrgb(color)
    if len(rgba) == 3:
        return (*rgba, 255)
    return rgba


def rasterize_text(layer: LayerItem, canvas_width: int, canvas_height: int) -> np.ndarray:
    """
    Rasterize a text layer to a canvas-sized RGBA array.
    The layer's resolved x/y is used, not the style's default position.
    """
    style = layer.text_style or PriceLayerConfig()
    font, synthetic_bold = load_font(style.font_family, style.font_size, style.bold)
    r, g, b, a = parse_color(style.color)

    # Draw coverage into an L mask, then build straight-alpha RGBA from it
    mask = Image.new("L", (canvas_width, canvas_height), 0)
    draw = ImageDraw.Draw(mask)
    stroke = max(1, round(style.font_size / 32)) if synthetic_bold else 0
    anchor = "la" if isinstance(font, ImageFont.FreeTypeFont) else None
    draw.text(
        (round_px(layer.x), round_px(layer.y)),
        layer.text_content or "",
        font=font,
        fill=255,
        anchor=anchor,
        stroke_width=stroke,
        stroke_fill=255,
    )

    coverage = np.asarray(mask, dtype=np.uint16)
    out = np.zeros((canvas_height, canvas_width, 4), dtype=np.uint8)
    out[:, :, 0] = r
    out[:, :, 1] = g
    out[:, :, 2] = b
    out[:, :, 3] = (coverage * a // 255).astype(np.uint8)
    # Fully transparent pixels carry no colour
    out[out[:, :, 3] == 0] = 0
    return out
