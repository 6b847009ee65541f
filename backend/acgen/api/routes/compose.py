# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: POST /compose/layers + /compose/render + /compose/variants
Single-variant preview and rendering, plus cartesian variant expansion
for the batch builder.
"""

from __future__ import annotations

import asyncio
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Query
from fastapi.responses import Response

from acgen.api.middleware.error_handler import AssetNotFoundError
from acgen.core.compositor import render_variant, resolve_variant
from acgen.dependencies import CatalogDep
from acgen.models.composition import (
    CompositionInput,
    LayerItem,
    RenderFormat,
    VariantRequest,
)
from acgen.modules.composition import generate_variants
from acgen.utils.logger import get_logger

router = APIRouter(prefix="/compose", tags=["compose"])
log = get_logger(__name__)


def attachment_headers(file_name: str) -> dict[str, str]:
    """Content-Disposition that survives non-ASCII (e.g. 挂机) file names."""
    ascii_name = file_name.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return {
        "Content-Disposition": (
            f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"
        )
    }


@router.post(
    "/layers",
    response_model=list[LayerItem],
    summary="Compute the layer list for one variant",
    description=(
        "Resolves matching decorations, template z-order and any stored "
        "instance overrides. Layers are returned in ascending z-order."
    ),
)
async def compose_layers(inp: CompositionInput, catalog: CatalogDep) -> list[LayerItem]:
    resolved = resolve_variant(inp, catalog.snapshot())
    log.debug("layers_composed", product_id=inp.product_id, layers=len(resolved.layers))
    return resolved.layers


@router.post(
    "/render",
    summary="Render one variant to PNG or PSD",
    response_class=Response,
)
async def compose_render(
    inp: CompositionInput,
    catalog: CatalogDep,
    fmt: Annotated[RenderFormat, Query(alias="format")] = RenderFormat.PNG,
) -> Response:
    snapshot = catalog.snapshot()
    output = await asyncio.to_thread(render_variant, inp, snapshot, fmt)
    return Response(
        content=output.data,
        media_type=output.media_type,
        headers=attachment_headers(output.file_name),
    )


@router.post(
    "/variants",
    response_model=list[CompositionInput],
    summary="Expand product/energy/capacity selections into variants",
    description=(
        "Cartesian product over the selections; combinations outside a "
        "product's declared energy or capacity range are skipped."
    ),
)
async def compose_variants(req: VariantRequest, catalog: CatalogDep) -> list[CompositionInput]:
    if catalog.get_project_by_name(req.project_name) is None:
        raise AssetNotFoundError("project", req.project_name)

    products = []
    for product_id in req.product_ids:
        product = catalog.get_product(product_id)
        if product is None:
            raise AssetNotFoundError("product", product_id)
        products.append(product)

    variants = generate_variants(
        req.project_name, products, req.energy_levels, req.capacity_codes
    )
    log.info("variants_generated", project=req.project_name, count=len(variants))
    return variants
