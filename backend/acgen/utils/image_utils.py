# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Image I/O and Compositing Utilities
Shared helpers used by both renderers and the upload routes.
All compositing works on straight-alpha RGBA uint8 numpy arrays.
OpenCV handles decode/encode (BGR/BGRA on its side of the boundary);
PIL is used only for text rasterization and the PSD writer.
"""

import math
from pathlib import Path

import cv2
import numpy as np
from PIL import Image


# ─── Load / Decode ───────────────────────────────────────────────────────────

def _decode(buf: np.ndarray, source: str) -> np.ndarray:
    """imdecode wrapper: empty or corrupt input raises ValueError, never cv2.error."""
    if buf.size == 0:
        raise ValueError(f"Empty image data: {source}")
    try:
        img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise ValueError(f"Could not decode image: {source}: {exc}") from exc
    if img is None:
        raise ValueError(f"Could not decode image: {source}")
    return _to_rgba(img)


def _to_rgba(img: np.ndarray) -> np.ndarray:
    """Normalise any OpenCV decode result (gray / BGR / BGRA, 8 or 16 bit) to RGBA uint8."""
    if img.dtype == np.uint16:
        img = (img // 257).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise ValueError(f"Unsupported channel count: {channels}")


def load_image_rgba(path: Path) -> np.ndarray:
    """
    Load an image from disk as an RGBA uint8 numpy array, keeping alpha.
    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the file cannot be decoded as an image.
    """
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    # imdecode instead of imread: handles non-ASCII paths on every platform
    return _decode(np.fromfile(str(path), dtype=np.uint8), str(path))


def bytes_to_rgba(data: bytes) -> np.ndarray:
    """Decode raw image bytes (from upload) to an RGBA numpy array."""
    return _decode(np.frombuffer(data, dtype=np.uint8), "uploaded bytes")


# ─── Encode ──────────────────────────────────────────────────────────────────

def rgba_to_png_bytes(img: np.ndarray) -> bytes:
    """Encode an RGBA numpy array to PNG bytes (lossless, deterministic)."""
    bgra = cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA)
    success, buf = cv2.imencode(".png", bgra)
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


# ─── Compositing ─────────────────────────────────────────────────────────────

def round_px(value: float) -> int:
    """Round half up (0.5 -> 1, -0.5 -> 0) for pixel placement of layers and text."""
    return int(math.floor(value + 0.5))


def transparent_canvas(width: int, height: int) -> np.ndarray:
    return np.zeros((height, width, 4), dtype=np.uint8)


def alpha_composite_at(
    canvas: np.ndarray,
    overlay: np.ndarray,
    x: int,
    y: int,
) -> np.ndarray:
    """
    Composite `overlay` over `canvas` with its top-left corner at (x, y)
    using the Porter-Duff "over" operator on straight alpha.
    Regions outside the canvas are clipped; never raises on out-of-bounds
    offsets. Returns a new array; `canvas` is not modified.

    Args:
        canvas:  RGBA uint8 (H×W×4)
        overlay: RGBA uint8 (h×w×4)
        x, y:    Integer offset of the overlay in canvas pixels

    Returns:
        RGBA uint8 array with the same shape as canvas.
    """
    result = canvas.copy()
    ch, cw = canvas.shape[:2]
    oh, ow = overlay.shape[:2]

    x1, y1 = max(0, x), max(0, y)
    x2, y2 = min(cw, x + ow), min(ch, y + oh)
    if x1 >= x2 or y1 >= y2:
        return result

    src = overlay[y1 - y:y2 - y, x1 - x:x2 - x].astype(np.float32) / 255.0
    dst = result[y1:y2, x1:x2].astype(np.float32) / 255.0

    src_a = src[:, :, 3:4]
    dst_a = dst[:, :, 3:4]
    out_a = src_a + dst_a * (1.0 - src_a)

    premul = src[:, :, :3] * src_a + dst[:, :, :3] * dst_a * (1.0 - src_a)
    safe_a = np.where(out_a > 0.0, out_a, 1.0)
    out_rgb = np.where(out_a > 0.0, premul / safe_a, 0.0)

    out = np.concatenate([out_rgb, out_a], axis=2)
    result[y1:y2, x1:x2] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
    return result


# ─── PIL Bridge ──────────────────────────────────────────────────────────────

def rgba_to_pil(img: np.ndarray) -> Image.Image:
    """Convert an RGBA numpy array to a PIL Image (RGBA mode)."""
    return Image.fromarray(np.ascontiguousarray(img))


# ─── Validation ──────────────────────────────────────────────────────────────

def is_valid_image_bytes(data: bytes) -> bool:
    """Return True if bytes can be decoded as a valid image."""
    try:
        img = bytes_to_rgba(data)
        return img.ndim == 3 and img.shape[2] == 4 and img.size > 0
    except Exception:
        return False
