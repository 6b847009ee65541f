# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Abstract CatalogStore
Keyed collections for products, decorations, projects and instance
configs. All CRUD lives on the base class on top of two primitives
(_read / _write a whole collection), so backends only decide where the
records live.

InMemoryCatalogStore  — tests / throwaway sessions
JsonCatalogStore      — one JSON array file per collection under data_root

Records are stored as pydantic models and handed out as copies; mutating
a returned record never changes the store.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from acgen.api.middleware.error_handler import AssetNotFoundError, InvalidMetadataError
from acgen.models.asset import DecorationAsset, ProductAsset
from acgen.models.instance import InstanceConfig
from acgen.models.project import Project, ProjectUpdate
from acgen.utils.logger import get_logger
from acgen.utils.storage import copy_asset_file, remove_asset_file

log = get_logger(__name__)

PRODUCTS = "products"
DECORATIONS = "decorations"
PROJECTS = "projects"
INSTANCES = "instances"

_MODELS: dict[str, type[BaseModel]] = {
    PRODUCTS: ProductAsset,
    DECORATIONS: DecorationAsset,
    PROJECTS: Project,
    INSTANCES: InstanceConfig,
}


def _new_id() -> str:
    return str(uuid.uuid4())


# ─── Snapshot ────────────────────────────────────────────────────────────────

class CatalogSnapshot(BaseModel):
    """
    Point-in-time copy of every collection, taken once per batch so a
    long render never observes a half-applied edit.
    """
    model_config = ConfigDict(frozen=True)

    products: list[ProductAsset] = Field(default_factory=list)
    decorations: list[DecorationAsset] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    instances: list[InstanceConfig] = Field(default_factory=list)

    def product(self, product_id: str) -> Optional[ProductAsset]:
        return next((p for p in self.products if p.id == product_id), None)

    def project_by_name(self, project_name: str) -> Optional[Project]:
        return next((p for p in self.projects if p.project_name == project_name), None)

    def decorations_for(self, project_name: str) -> list[DecorationAsset]:
        return [d for d in self.decorations if d.project_name == project_name]

    def instance_for(
        self,
        project_id: str,
        product_id: str,
        energy_level: Optional[str],
        capacity_code: Optional[str],
    ) -> Optional[InstanceConfig]:
        key = (project_id, product_id, energy_level, capacity_code)
        return next((i for i in self.instances if i.key() == key), None)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class CatalogStore(ABC):
    """
    Abstract base class for catalog backends.
    Every public method holds the store's RLock for its whole
    read-modify-write, so concurrent requests never lose an update.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def _read(self, collection: str) -> list:
        """Return all records of a collection, in insertion order."""

    @abstractmethod
    def _write(self, collection: str, records: list) -> None:
        """Replace a collection with the given records."""

    # ─── Products ────────────────────────────────────────────────────────────

    def list_products(self) -> list[ProductAsset]:
        with self._lock:
            return self._read(PRODUCTS)

    def get_product(self, product_id: str) -> Optional[ProductAsset]:
        with self._lock:
            return next((p for p in self._read(PRODUCTS) if p.id == product_id), None)

    def add_product(self, product: ProductAsset) -> ProductAsset:
        if not product.id:
            product = product.model_copy(update={"id": _new_id()})
        with self._lock:
            records = self._read(PRODUCTS)
            records.append(product)
            self._write(PRODUCTS, records)
        log.info("product_added", product_id=product.id, series=product.series)
        return product

    def delete_product(self, product_id: str, remove_file: bool = True) -> None:
        """Remove a product record (and its image file). Raises AssetNotFoundError."""
        with self._lock:
            records = self._read(PRODUCTS)
            product = next((p for p in records if p.id == product_id), None)
            if product is None:
                raise AssetNotFoundError("product", product_id)
            self._write(PRODUCTS, [p for p in records if p.id != product_id])
        if remove_file:
            self._remove_file(product.file_path)
        log.info("product_deleted", product_id=product_id)

    # ─── Decorations ─────────────────────────────────────────────────────────

    def list_decorations(self, project_name: Optional[str] = None) -> list[DecorationAsset]:
        with self._lock:
            records = self._read(DECORATIONS)
        if project_name is None:
            return records
        return [d for d in records if d.project_name == project_name]

    def get_decoration(self, decoration_id: str) -> Optional[DecorationAsset]:
        with self._lock:
            return next(
                (d for d in self._read(DECORATIONS) if d.id == decoration_id), None
            )

    def add_decoration(self, decoration: DecorationAsset) -> DecorationAsset:
        if not decoration.id:
            decoration = decoration.model_copy(update={"id": _new_id()})
        with self._lock:
            records = self._read(DECORATIONS)
            records.append(decoration)
            self._write(DECORATIONS, records)
        log.info(
            "decoration_added",
            decoration_id=decoration.id,
            project=decoration.project_name,
            category=decoration.category.value,
        )
        return decoration

    def delete_decoration(self, decoration_id: str, remove_file: bool = True) -> None:
        """Remove a decoration record (and its image file). Raises AssetNotFoundError."""
        with self._lock:
            records = self._read(DECORATIONS)
            decoration = next((d for d in records if d.id == decoration_id), None)
            if decoration is None:
                raise AssetNotFoundError("decoration", decoration_id)
            self._write(DECORATIONS, [d for d in records if d.id != decoration_id])
        if remove_file:
            self._remove_file(decoration.file_path)
        log.info("decoration_deleted", decoration_id=decoration_id)

    def duplicate_decorations(
        self, source_project: str, target_project: str, copy_files: bool = True
    ) -> list[DecorationAsset]:
        """
        Copy every decoration of source_project to target_project under
        new ids. With copy_files, each copy gets its own image file so
        deleting one never breaks the other.
        """
        with self._lock:
            records = self._read(DECORATIONS)
            copies = []
            for deco in records:
                if deco.project_name != source_project:
                    continue
                update = {"id": _new_id(), "project_name": target_project}
                if copy_files:
                    update["file_path"] = copy_asset_file(deco.file_path)
                copies.append(deco.model_copy(update=update))
            self._write(DECORATIONS, records + copies)
        log.info(
            "decorations_duplicated",
            source=source_project,
            target=target_project,
            count=len(copies),
        )
        return copies

    # ─── Projects ────────────────────────────────────────────────────────────

    def list_projects(self) -> list[Project]:
        with self._lock:
            return self._read(PROJECTS)

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            return next((p for p in self._read(PROJECTS) if p.id == project_id), None)

    def get_project_by_name(self, project_name: str) -> Optional[Project]:
        with self._lock:
            return next(
                (p for p in self._read(PROJECTS) if p.project_name == project_name),
                None,
            )

    def create_project(self, project: Project) -> Project:
        """Store a new project. Raises InvalidMetadataError on a duplicate name."""
        if not project.id:
            project = project.model_copy(update={"id": _new_id()})
        with self._lock:
            records = self._read(PROJECTS)
            if any(p.project_name == project.project_name for p in records):
                raise InvalidMetadataError(
                    f"project_name already exists: {project.project_name}"
                )
            records.append(project)
            self._write(PROJECTS, records)
        log.info("project_created", project_id=project.id, name=project.project_name)
        return project

    def update_project(self, project_id: str, changes: ProjectUpdate) -> Project:
        """Apply the provided fields of `changes`. Raises AssetNotFoundError."""
        update = changes.model_dump(exclude_unset=True)
        with self._lock:
            records = self._read(PROJECTS)
            for index, project in enumerate(records):
                if project.id == project_id:
                    updated = Project.model_validate(
                        {**project.model_dump(), **update}
                    )
                    records[index] = updated
                    self._write(PROJECTS, records)
                    break
            else:
                raise AssetNotFoundError("project", project_id)
        log.info("project_updated", project_id=project_id, fields=sorted(update))
        return updated

    def duplicate_project(
        self,
        project_id: str,
        project_name: str,
        display_name: str = "",
        copy_files: bool = True,
    ) -> Project:
        """
        Create a new project with the source's canvas and template, and
        copy its decorations. Template entries pinned to a source
        decoration id are re-pointed at that decoration's copy.
        """
        with self._lock:
            source = self.get_project(project_id)
            if source is None:
                raise AssetNotFoundError("project", project_id)

            originals = self.list_decorations(source.project_name)
            copy = self.create_project(
                Project(
                    id="",
                    project_name=project_name,
                    display_name=display_name or source.display_name,
                    canvas_width=source.canvas_width,
                    canvas_height=source.canvas_height,
                )
            )
            copies = self.duplicate_decorations(
                source.project_name, project_name, copy_files=copy_files
            )
            id_map = {o.id: c.id for o, c in zip(originals, copies)}

            if source.template is not None:
                entries = [
                    entry.model_copy(
                        update={"decoration_id": id_map.get(entry.decoration_id, entry.decoration_id)}
                    )
                    if entry.decoration_id
                    else entry
                    for entry in source.template.layer_order
                ]
                template = source.template.model_copy(
                    update={"layer_order": entries}, deep=True
                )
                copy = self.update_project(copy.id, ProjectUpdate(template=template))

        log.info("project_duplicated", source_id=project_id, project_id=copy.id)
        return copy

    def delete_project(self, project_id: str) -> None:
        """
        Remove a project record. Its decorations and instance configs are
        kept; they are only reachable again through a project of the same name.
        """
        with self._lock:
            records = self._read(PROJECTS)
            if not any(p.id == project_id for p in records):
                raise AssetNotFoundError("project", project_id)
            self._write(PROJECTS, [p for p in records if p.id != project_id])
        log.info("project_deleted", project_id=project_id)

    # ─── Instance Configs ────────────────────────────────────────────────────

    def list_instances(self, project_id: Optional[str] = None) -> list[InstanceConfig]:
        with self._lock:
            records = self._read(INSTANCES)
        if project_id is None:
            return records
        return [i for i in records if i.project_id == project_id]

    def find_instance(
        self,
        project_id: str,
        product_id: str,
        energy_level: Optional[str] = None,
        capacity_code: Optional[str] = None,
    ) -> Optional[InstanceConfig]:
        key = (project_id, product_id, energy_level, capacity_code)
        with self._lock:
            return next((i for i in self._read(INSTANCES) if i.key() == key), None)

    def upsert_instance(self, config: InstanceConfig) -> InstanceConfig:
        """
        Insert or replace the config with the same (project, product,
        energy, capacity) key. Replacement keeps the stored id and
        created_at and refreshes updated_at.
        """
        now = datetime.now(timezone.utc)
        with self._lock:
            records = self._read(INSTANCES)
            for index, existing in enumerate(records):
                if existing.key() == config.key():
                    saved = config.model_copy(
                        update={
                            "id": existing.id,
                            "created_at": existing.created_at,
                            "updated_at": now,
                        }
                    )
                    records[index] = saved
                    created = False
                    break
            else:
                saved = config.model_copy(
                    update={"id": _new_id(), "created_at": now, "updated_at": now}
                )
                records.append(saved)
                created = True
            self._write(INSTANCES, records)
        log.info(
            "instance_upserted",
            instance_id=saved.id,
            project_id=saved.project_id,
            product_id=saved.product_id,
            created=created,
        )
        return saved

    def delete_instance(self, instance_id: str) -> None:
        with self._lock:
            records = self._read(INSTANCES)
            if not any(i.id == instance_id for i in records):
                raise AssetNotFoundError("instance", instance_id)
            self._write(INSTANCES, [i for i in records if i.id != instance_id])
        log.info("instance_deleted", instance_id=instance_id)

    # ─── Snapshot ────────────────────────────────────────────────────────────

    def snapshot(self) -> CatalogSnapshot:
        """Deep copy of every collection, taken under one lock acquisition."""
        with self._lock:
            return CatalogSnapshot(
                products=[p.model_copy(deep=True) for p in self._read(PRODUCTS)],
                decorations=[d.model_copy(deep=True) for d in self._read(DECORATIONS)],
                projects=[p.model_copy(deep=True) for p in self._read(PROJECTS)],
                instances=[i.model_copy(deep=True) for i in self._read(INSTANCES)],
            )

    @staticmethod
    def _remove_file(file_path: str) -> None:
        try:
            removed = remove_asset_file(file_path)
        except (OSError, ValueError) as exc:
            log.warning("asset_file_delete_failed", file_path=file_path, error=str(exc))
            return
        if not removed:
            log.warning("asset_file_missing", file_path=file_path)


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemoryCatalogStore(CatalogStore):
    """Dict-of-lists store. All data is lost on process restart."""

    def __init__(self) -> None:
        super().__init__()
        self._collections: dict[str, list] = {name: [] for name in _MODELS}

    def _read(self, collection: str) -> list:
        return [r.model_copy(deep=True) for r in self._collections[collection]]

    def _write(self, collection: str, records: list) -> None:
        self._collections[collection] = [r.model_copy(deep=True) for r in records]


# ─── JSON File Implementation ────────────────────────────────────────────────

class JsonCatalogStore(CatalogStore):
    """
    One pretty-printed JSON array per collection (products.json, ...).
    Writes go to a temp file in the same directory and are swapped in
    with os.replace, so a crash never leaves a truncated file.
    """

    def __init__(self, data_root: Path) -> None:
        super().__init__()
        self._root = Path(data_root)
        self._root.mkdir(parents=True, exist_ok=True)
        log.info("json_catalog_store_ready", data_root=str(self._root))

    def _path(self, collection: str) -> Path:
        return self._root / f"{collection}.json"

    def _read(self, collection: str) -> list:
        path = self._path(collection)
        if not path.exists():
            return []
        raw = json.loads(path.read_text(encoding="utf-8") or "[]")
        model = _MODELS[collection]
        return [model.model_validate(item) for item in raw]

    def _write(self, collection: str, records: list) -> None:
        path = self._path(collection)
        payload = json.dumps(
            [r.model_dump(mode="json") for r in records],
            ensure_ascii=False,
            indent=2,
        )
        fd, tmp = tempfile.mkstemp(dir=self._root, prefix=f".{collection}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
