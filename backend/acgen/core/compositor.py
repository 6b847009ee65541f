# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Variant Compositor
Resolves one CompositionInput against a catalog snapshot (project by name,
product by id, the project's decorations, the stored instance config),
builds its layer list and renders it to PNG or PSD bytes.

Raises the domain errors the batch isolates per variant:
    AssetNotFoundError   — unknown product or project
    InvalidMetadataError — project has no usable canvas
    RenderError          — asset unreadable or output not encodable
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from acgen.api.middleware.error_handler import AssetNotFoundError, InvalidMetadataError
from acgen.core.catalog_store import CatalogSnapshot
from acgen.models.asset import ProductAsset
from acgen.models.composition import CompositionInput, LayerItem, RenderedOutput, RenderFormat
from acgen.models.instance import InstanceConfig
from acgen.models.project import Project
from acgen.modules.composition import compute_layers, variant_file_name, variant_stem
from acgen.modules.rendering import render_flat, render_layered
from acgen.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedVariant:
    project: Project
    product: ProductAsset
    instance_config: Optional[InstanceConfig]
    layers: list[LayerItem]


def resolve_variant(inp: CompositionInput, snapshot: CatalogSnapshot) -> ResolvedVariant:
    """Look up everything one variant needs and compute its layers."""
    project = snapshot.project_by_name(inp.project_name)
    if project is None:
        raise AssetNotFoundError("project", inp.project_name)
    if project.canvas_width <= 0 or project.canvas_height <= 0:
        raise InvalidMetadataError(
            f"project {project.project_name} has an invalid canvas size"
        )

    product = snapshot.product(inp.product_id)
    if product is None:
        raise AssetNotFoundError("product", inp.product_id)

    instance_config = snapshot.instance_for(
        project.id, product.id, inp.energy_level, inp.capacity_code
    )
    layers = compute_layers(
        product,
        snapshot.decorations_for(project.project_name),
        inp,
        template=project.template,
        instance_config=instance_config,
    )
    return ResolvedVariant(project, product, instance_config, layers)


def render_variant(
    inp: CompositionInput,
    snapshot: CatalogSnapshot,
    fmt: RenderFormat = RenderFormat.PNG,
    storage_root: Path | None = None,
) -> RenderedOutput:
    """
    Render one variant.

    Returns:
        RenderedOutput with the encoded bytes and the deterministic
        <series>-<type>-<energy>-<color>-<capacity>.<ext> file name.
    """
    resolved = resolve_variant(inp, snapshot)
    project = resolved.project

    if fmt == RenderFormat.PSD:
        data = render_layered(
            resolved.layers,
            project.canvas_width,
            project.canvas_height,
            variant_name=variant_stem(resolved.product, inp.energy_level, inp.capacity_code),
            storage_root=storage_root,
        )
    else:
        data = render_flat(
            resolved.layers,
            project.canvas_width,
            project.canvas_height,
            storage_root=storage_root,
        )

    file_name = variant_file_name(resolved.product, inp.energy_level, inp.capacity_code, fmt)
    log.info(
        "variant_rendered",
        file_name=file_name,
        format=fmt.value,
        layers=len(resolved.layers),
        has_instance_config=resolved.instance_config is not None,
    )
    return RenderedOutput(data=data, file_name=file_name, format=fmt)
