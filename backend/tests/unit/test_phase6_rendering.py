# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 6 — Raster (PNG) and layered (PSD) renderer tests.
Synthetic RGBA assets are written with OpenCV into tmp_path, which is
passed to the renderers as the storage root.
"""

import io
from pathlib import Path

import cv2
import numpy as np
import pytest
from psd_tools import PSDImage

from acgen.api.middleware.error_handler import RenderError
from acgen.models.composition import LayerItem, LayerKind
from acgen.models.project import LayerType, PriceLayerConfig
from acgen.modules.rendering import (
    layer_pixels,
    rasterize_text,
    render_flat,
    render_layered,
    round_px,
)
from acgen.utils.image_utils import bytes_to_rgba


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _write_rgba(root: Path, rel: str, h: int, w: int, rgba) -> str:
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:] = rgba
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    ok, buf = cv2.imencode(".png", cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA))
    assert ok
    path.write_bytes(buf.tobytes())
    return rel


def _image_layer(lid: str, file_path: str, z: int, x=0.0, y=0.0,
                 layer_type=LayerType.DECORATION) -> LayerItem:
    return LayerItem(
        id=lid, kind=LayerKind.IMAGE, layer_type=layer_type, label=f"Layer {lid}",
        asset_id=lid, file_path=file_path, z_index=z, x=x, y=y,
    )


def _text_layer(text: str, z=200, x=10.0, y=10.0, **style) -> LayerItem:
    return LayerItem(
        id="price-promo", kind=LayerKind.TEXT, layer_type=LayerType.PRICE,
        label="Price: promo", text_content=text,
        text_style=PriceLayerConfig(**style), z_index=z, x=x, y=y,
    )


# ─── Raster Renderer ─────────────────────────────────────────────────────────

def test_empty_layer_list_gives_transparent_canvas(tmp_path):
    out = bytes_to_rgba(render_flat([], 30, 20, storage_root=tmp_path))
    assert out.shape == (20, 30, 4)
    assert out[:, :, 3].max() == 0


def test_image_placed_at_origin(tmp_path):
    rel = _write_rgba(tmp_path, "products/p.png", 10, 10, (255, 0, 0, 255))
    out = bytes_to_rgba(render_flat([_image_layer("p", rel, 50)], 20, 20, tmp_path))

    assert tuple(out[5, 5]) == (255, 0, 0, 255)
    assert out[15, 15, 3] == 0


def test_offset_and_clipping(tmp_path):
    rel = _write_rgba(tmp_path, "decorations/d.png", 10, 10, (0, 255, 0, 255))
    layers = [_image_layer("d", rel, 100, x=15, y=-5)]
    out = bytes_to_rgba(render_flat(layers, 20, 20, tmp_path))

    # Visible part: x 15..19, y 0..4
    assert tuple(out[0, 15]) == (0, 255, 0, 255)
    assert tuple(out[4, 19]) == (0, 255, 0, 255)
    assert out[5, 15, 3] == 0
    assert out[0, 14, 3] == 0


def test_fully_offscreen_layer_is_harmless(tmp_path):
    rel = _write_rgba(tmp_path, "decorations/d.png", 10, 10, (0, 255, 0, 255))
    out = bytes_to_rgba(render_flat([_image_layer("d", rel, 100, x=500, y=500)], 20, 20, tmp_path))
    assert out[:, :, 3].max() == 0


def test_higher_z_paints_over_lower(tmp_path):
    red = _write_rgba(tmp_path, "a.png", 10, 10, (255, 0, 0, 255))
    blue = _write_rgba(tmp_path, "b.png", 10, 10, (0, 0, 255, 255))
    # Deliberately unsorted input
    layers = [_image_layer("b", blue, 100), _image_layer("a", red, 50)]
    out = bytes_to_rgba(render_flat(layers, 10, 10, tmp_path))
    assert tuple(out[5, 5]) == (0, 0, 255, 255)


def test_over_operator_blends_straight_alpha(tmp_path):
    red = _write_rgba(tmp_path, "a.png", 4, 4, (255, 0, 0, 255))
    blue = _write_rgba(tmp_path, "b.png", 4, 4, (0, 0, 255, 128))
    layers = [_image_layer("a", red, 0), _image_layer("b", blue, 1)]
    out = bytes_to_rgba(render_flat(layers, 4, 4, tmp_path))

    r, g, b, a = (int(v) for v in out[1, 1])
    assert a == 255
    assert abs(r - 127) <= 1
    assert g == 0
    assert abs(b - 128) <= 1


def test_render_flat_is_byte_identical(tmp_path):
    rel = _write_rgba(tmp_path, "p.png", 12, 12, (10, 20, 30, 200))
    layers = [_image_layer("p", rel, 50, x=3, y=4), _text_layer("888", font_size=12)]
    assert render_flat(layers, 40, 30, tmp_path) == render_flat(layers, 40, 30, tmp_path)


def test_missing_asset_raises_render_error(tmp_path):
    with pytest.raises(RenderError):
        render_flat([_image_layer("x", "products/missing.png", 50)], 10, 10, tmp_path)


def test_undecodable_asset_raises_render_error(tmp_path):
    (tmp_path / "bad.png").write_bytes(b"not an image")
    with pytest.raises(RenderError):
        render_flat([_image_layer("x", "bad.png", 50)], 10, 10, tmp_path)


def test_path_outside_storage_root_raises_render_error(tmp_path):
    with pytest.raises(RenderError):
        render_flat([_image_layer("x", "../escape.png", 50)], 10, 10, tmp_path)


def test_round_px_half_up():
    assert round_px(0.5) == 1
    assert round_px(1.5) == 2
    assert round_px(-0.5) == 0
    assert round_px(2.4) == 2


# ─── Text Rasterizer ─────────────────────────────────────────────────────────

def test_text_drawn_in_fill_colour():
    layer = _text_layer("888", x=20, y=10, font_size=32, color="#FF0000")
    out = rasterize_text(layer, 200, 80)

    assert out.shape == (80, 200, 4)
    drawn = out[:, :, 3] > 0
    assert drawn.any()
    assert (out[drawn][:, :3] == (255, 0, 0)).all()
    # Nothing left of the anchor
    assert not drawn[:, :15].any()


def test_bold_without_bold_face_is_heavier():
    regular = rasterize_text(_text_layer("888", font_size=32), 200, 80)
    bold = rasterize_text(_text_layer("888", font_size=32, bold=True), 200, 80)
    assert int(bold[:, :, 3].sum()) > int(regular[:, :, 3].sum())


def test_invalid_colour_raises_render_error(tmp_path):
    layer = _text_layer("888", color="not-a-colour")
    with pytest.raises(RenderError):
        layer_pixels(layer, 50, 50, tmp_path)


# ─── Layered (PSD) Renderer ──────────────────────────────────────────────────

def test_psd_has_one_layer_per_item_plus_hidden_marker(tmp_path):
    bg = _write_rgba(tmp_path, "bg.png", 40, 60, (255, 255, 255, 255))
    prod = _write_rgba(tmp_path, "p.png", 10, 10, (255, 0, 0, 255))
    layers = [
        _image_layer("bg", bg, 0, layer_type=LayerType.BACKGROUND),
        _image_layer("p", prod, 50, x=5, y=7, layer_type=LayerType.PRODUCT),
        _text_layer("888", font_size=12),
    ]
    data = render_layered(layers, 60, 40, "X1-B1-White", storage_root=tmp_path)

    psd = PSDImage.open(io.BytesIO(data))
    assert (psd.width, psd.height) == (60, 40)

    stack = list(psd)
    assert [layer.name for layer in stack] == [
        "Layer bg", "Layer p", "Price: promo", "X1-B1-White",
    ]
    assert (stack[1].left, stack[1].top) == (5, 7)
    assert stack[-1].visible is False
    assert all(layer.visible for layer in stack[:-1])


def test_psd_missing_asset_raises_render_error(tmp_path):
    with pytest.raises(RenderError):
        render_layered([_image_layer("x", "nope.png", 50)], 10, 10, "v", tmp_path)


def test_psd_keeps_cjk_layer_and_variant_names(tmp_path):
    prod = _write_rgba(tmp_path, "p.png", 10, 10, (255, 0, 0, 255))
    product = LayerItem(
        id="product-p", kind=LayerKind.IMAGE, layer_type=LayerType.PRODUCT,
        label="Product: 天丽 白色", asset_id="p", file_path=prod, z_index=50,
    )
    data = render_layered(
        [product, _text_layer("¥2999", font_size=12)], 60, 40,
        "天丽-挂机-B1-白色-35", storage_root=tmp_path,
    )

    stack = list(PSDImage.open(io.BytesIO(data)))
    assert [layer.name for layer in stack] == [
        "Product: 天丽 白色", "Price: promo", "天丽-挂机-B1-白色-35",
    ]


def test_psd_text_layer_matches_flat_position(tmp_path):
    text = _text_layer("888", x=30, y=12, font_size=16, color="#000000")
    flat_alpha = rasterize_text(text, 80, 40)[:, :, 3]

    data = render_layered([text], 80, 40, "X1-挂机-B1", storage_root=tmp_path)
    psd_layer = list(PSDImage.open(io.BytesIO(data)))[0]
    psd_alpha = np.asarray(psd_layer.topil().convert("RGBA"))[:, :, 3]

    flat_ys, flat_xs = np.nonzero(flat_alpha)
    psd_ys, psd_xs = np.nonzero(psd_alpha)
    assert psd_xs.min() + psd_layer.left == flat_xs.min()
    assert psd_ys.min() + psd_layer.top == flat_ys.min()
    assert 30 <= flat_xs.min() <= 36
    assert flat_ys.min() >= 12


def test_zero_byte_asset_raises_render_error(tmp_path):
    (tmp_path / "empty.png").write_bytes(b"")
    with pytest.raises(RenderError):
        render_flat([_image_layer("x", "empty.png", 50)], 10, 10, tmp_path)
    with pytest.raises(RenderError):
        render_layered([_image_layer("x", "empty.png", 50)], 10, 10, "v", tmp_path)


def test_truncated_png_raises_render_error(tmp_path):
    rel = _write_rgba(tmp_path, "full.png", 10, 10, (255, 0, 0, 255))
    # Signature and IHDR only: header parses, pixel data is missing
    (tmp_path / "cut.png").write_bytes((tmp_path / rel).read_bytes()[:33])
    with pytest.raises(RenderError):
        render_flat([_image_layer("x", "cut.png", 50)], 10, 10, tmp_path)


def test_empty_bytes_are_a_decode_error():
    with pytest.raises(ValueError):
        bytes_to_rgba(b"")


def test_text_uses_same_rounding_as_images():
    base = rasterize_text(_text_layer("888", x=10, y=10, font_size=16), 60, 40)
    assert np.array_equal(rasterize_text(_text_layer("888", x=9.5, y=10.4, font_size=16), 60, 40), base)
    shifted = rasterize_text(_text_layer("888", x=10.5, y=10, font_size=16), 60, 40)
    assert np.array_equal(shifted[:, 1:], base[:, :-1])
