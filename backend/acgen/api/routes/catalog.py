# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: /products + /decorations + /storage
Asset library CRUD. Uploads are multipart: the image as `file`, its
metadata as a JSON string in the `meta` form field.
"""

from __future__ import annotations

import mimetypes
import uuid
from pathlib import Path
from typing import Annotated, Optional

from fastapi import APIRouter, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import ValidationError

from acgen.api.middleware.error_handler import ImageValidationError, InvalidMetadataError
from acgen.config import get_settings
from acgen.dependencies import CatalogDep
from acgen.models.asset import DecorationAsset, DecorationMeta, ProductAsset, ProductMeta
from acgen.utils.image_utils import is_valid_image_bytes
from acgen.utils.logger import get_logger
from acgen.utils.storage import (
    decorations_dir,
    products_dir,
    relative_file_path,
    resolve_asset_path,
)

router = APIRouter(tags=["catalog"])
log = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
}


def _read_upload(upload: UploadFile) -> tuple[bytes, str]:
    """
    Read and validate an uploaded image.
    Returns (data, file extension). Raises ImageValidationError.
    """
    settings = get_settings()

    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise ImageValidationError(
            f"Unsupported file type '{upload.content_type}'. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
        )

    data = upload.file.read()

    if len(data) > settings.upload_max_bytes:
        raise ImageValidationError(
            f"File '{upload.filename}' exceeds maximum size "
            f"of {settings.upload_max_mb} MB."
        )

    if not is_valid_image_bytes(data):
        raise ImageValidationError(
            f"File '{upload.filename}' could not be decoded as a valid image."
        )

    return data, ALLOWED_CONTENT_TYPES[upload.content_type]


def _parse_meta(raw: str, model):
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidMetadataError(f"Invalid metadata: {exc}") from exc


def _save(data: bytes, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    log.debug("upload_saved", path=str(dest), size_bytes=len(data))


# ─── Products ────────────────────────────────────────────────────────────────

@router.get("/products", response_model=list[ProductAsset], summary="List products")
async def list_products(catalog: CatalogDep) -> list[ProductAsset]:
    return catalog.list_products()


@router.post(
    "/products",
    response_model=ProductAsset,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a product image with metadata",
)
async def upload_product(
    file: UploadFile,
    meta: Annotated[str, Form()],
    catalog: CatalogDep,
) -> ProductAsset:
    product_meta = _parse_meta(meta, ProductMeta)
    data, ext = _read_upload(file)

    product_id = str(uuid.uuid4())
    dest = products_dir() / f"{product_id}{ext}"
    try:
        product = ProductAsset(
            id=product_id,
            file_path=relative_file_path(dest),
            **product_meta.model_dump(),
        )
    except ValidationError as exc:
        raise InvalidMetadataError(f"Invalid metadata: {exc}") from exc

    _save(data, dest)
    return catalog.add_product(product)


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product and its image file",
)
async def delete_product(product_id: str, catalog: CatalogDep) -> None:
    catalog.delete_product(product_id)


# ─── Decorations ─────────────────────────────────────────────────────────────

@router.get(
    "/decorations",
    response_model=list[DecorationAsset],
    summary="List decorations, optionally for one project",
)
async def list_decorations(
    catalog: CatalogDep,
    project_name: Annotated[Optional[str], Query()] = None,
) -> list[DecorationAsset]:
    return catalog.list_decorations(project_name)


@router.post(
    "/decorations",
    response_model=DecorationAsset,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a decoration image with metadata",
)
async def upload_decoration(
    file: UploadFile,
    meta: Annotated[str, Form()],
    catalog: CatalogDep,
) -> DecorationAsset:
    deco_meta = _parse_meta(meta, DecorationMeta)
    data, ext = _read_upload(file)

    decoration_id = str(uuid.uuid4())
    dest = decorations_dir() / f"{decoration_id}{ext}"
    decoration = DecorationAsset(
        id=decoration_id,
        file_path=relative_file_path(dest),
        **deco_meta.model_dump(),
    )
    _save(data, dest)
    return catalog.add_decoration(decoration)


@router.delete(
    "/decorations/{decoration_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a decoration and its image file",
)
async def delete_decoration(decoration_id: str, catalog: CatalogDep) -> None:
    catalog.delete_decoration(decoration_id)


# ─── Stored Asset Files ──────────────────────────────────────────────────────

@router.get(
    "/storage/{file_path:path}",
    summary="Serve a stored product or decoration image",
    description="file_path is the record's file_path, e.g. products/<id>.png.",
)
async def get_stored_file(file_path: str) -> FileResponse:
    try:
        resolved = resolve_asset_path(file_path)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Path traversal not allowed.",
        )
    if not resolved.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File '{file_path}' not found.",
        )
    media_type, _ = mimetypes.guess_type(str(resolved))
    return FileResponse(path=str(resolved), media_type=media_type or "application/octet-stream")
