# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: /projects + /instances
Project CRUD, template editing (replace / drag-reorder) and per-variant
instance override upserts.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Query, status

from acgen.api.middleware.error_handler import AssetNotFoundError, InvalidMetadataError
from acgen.dependencies import CatalogDep
from acgen.models.instance import InstanceConfig
from acgen.models.project import (
    Project,
    ProjectCreate,
    ProjectDuplicate,
    ProjectTemplate,
    ProjectUpdate,
    TemplateReorderRequest,
)
from acgen.modules.composition import (
    assign_descending_z,
    default_layer_order,
    reorder,
    top_first,
)
from acgen.utils.logger import get_logger

router = APIRouter(tags=["projects"])
log = get_logger(__name__)


def _require_project(catalog, project_id: str) -> Project:
    project = catalog.get_project(project_id)
    if project is None:
        raise AssetNotFoundError("project", project_id)
    return project


def _editable_template(catalog, project: Project) -> ProjectTemplate:
    """The project's template, or a seeded default when it has no layer order yet."""
    template = project.template or ProjectTemplate()
    if template.layer_order:
        return template.model_copy(update={"layer_order": top_first(template.layer_order)})
    seeded = default_layer_order(catalog.list_decorations(project.project_name))
    return template.model_copy(update={"layer_order": seeded})


# ─── Projects ────────────────────────────────────────────────────────────────

@router.get("/projects", response_model=list[Project], summary="List projects")
async def list_projects(catalog: CatalogDep) -> list[Project]:
    return catalog.list_projects()


@router.post(
    "/projects",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(body: ProjectCreate, catalog: CatalogDep) -> Project:
    return catalog.create_project(Project(id="", **body.model_dump()))


@router.put("/projects/{project_id}", response_model=Project, summary="Update a project")
async def update_project(project_id: str, body: ProjectUpdate, catalog: CatalogDep) -> Project:
    return catalog.update_project(project_id, body)


@router.delete(
    "/projects/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
)
async def delete_project(project_id: str, catalog: CatalogDep) -> None:
    catalog.delete_project(project_id)


@router.post(
    "/projects/{project_id}/duplicate",
    response_model=Project,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate a project with its template and decorations",
)
async def duplicate_project(
    project_id: str, body: ProjectDuplicate, catalog: CatalogDep
) -> Project:
    return catalog.duplicate_project(project_id, body.project_name, body.display_name)


# ─── Template ────────────────────────────────────────────────────────────────

@router.get(
    "/projects/{project_id}/template",
    response_model=ProjectTemplate,
    summary="Template in editor order (top-first), seeded if empty",
)
async def get_template(project_id: str, catalog: CatalogDep) -> ProjectTemplate:
    return _editable_template(catalog, _require_project(catalog, project_id))


@router.put(
    "/projects/{project_id}/template",
    response_model=Project,
    summary="Replace a project's template",
)
async def put_template(
    project_id: str, body: ProjectTemplate, catalog: CatalogDep
) -> Project:
    return catalog.update_project(project_id, ProjectUpdate(template=body))


@router.post(
    "/projects/{project_id}/template/reorder",
    response_model=Project,
    summary="Move one template entry and re-derive z-indices",
    description=(
        "Indices refer to the top-first listing. After the move every "
        "entry's z_index is reassigned as (n - i) * 10."
    ),
)
async def reorder_template(
    project_id: str, body: TemplateReorderRequest, catalog: CatalogDep
) -> Project:
    project = _require_project(catalog, project_id)
    template = _editable_template(catalog, project)

    try:
        moved = reorder(template.layer_order, body.from_index, body.to_index)
    except IndexError as exc:
        raise InvalidMetadataError(str(exc)) from exc

    updated = template.model_copy(update={"layer_order": assign_descending_z(moved)})
    log.info(
        "template_reordered",
        project_id=project_id,
        from_index=body.from_index,
        to_index=body.to_index,
    )
    return catalog.update_project(project_id, ProjectUpdate(template=updated))


# ─── Instance Overrides ──────────────────────────────────────────────────────

@router.get(
    "/instances",
    response_model=list[InstanceConfig],
    summary="List instance configs, optionally for one project",
)
async def list_instances(
    catalog: CatalogDep,
    project_id: Annotated[Optional[str], Query()] = None,
) -> list[InstanceConfig]:
    return catalog.list_instances(project_id)


@router.post(
    "/instances",
    response_model=InstanceConfig,
    summary="Create or update the instance config for one variant",
)
async def upsert_instance(body: InstanceConfig, catalog: CatalogDep) -> InstanceConfig:
    _require_project(catalog, body.project_id)
    if catalog.get_product(body.product_id) is None:
        raise AssetNotFoundError("product", body.product_id)
    return catalog.upsert_instance(body)


@router.delete(
    "/instances/{instance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an instance config",
)
async def delete_instance(instance_id: str, catalog: CatalogDep) -> None:
    catalog.delete_instance(instance_id)
