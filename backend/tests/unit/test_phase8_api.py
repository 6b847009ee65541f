# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 8 — HTTP API tests.
Full app with lifespan, in-memory backends and a tmp storage root.
"""

import io
import json
import zipfile
from contextlib import asynccontextmanager
from urllib.parse import quote

import cv2
import numpy as np
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient


VARIANT_NAME = "X1-挂机-B1-White-35.png"


# ─── Helpers ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan_client():
    """
    Spin up the full FastAPI app including its lifespan, then yield an
    AsyncClient pointed at it. Callers must request the storage_env fixture.
    """
    from acgen.main import create_app
    test_app = create_app()

    async with LifespanManager(test_app) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def _png_bytes(h: int, w: int, rgba) -> bytes:
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:] = rgba
    ok, buf = cv2.imencode(".png", cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA))
    assert ok
    return buf.tobytes()


async def _upload(c, route: str, meta: dict, data: bytes | None = None, content_type="image/png"):
    return await c.post(
        route,
        files={"file": ("upload.png", data or _png_bytes(20, 20, (255, 0, 0, 255)), content_type)},
        data={"meta": json.dumps(meta)},
    )


async def _seed(c) -> dict:
    """Create project 'proj' (40x30), one wall AC product and one B1 badge."""
    project = await c.post(
        "/projects", json={"project_name": "proj", "canvas_width": 40, "canvas_height": 30},
    )
    assert project.status_code == 201

    product = await _upload(c, "/products", {
        "category": "AC", "form_factor": "WALL", "series": "X1", "color": "White",
    })
    assert product.status_code == 201

    badge = await _upload(c, "/decorations", {
        "project_name": "proj", "category": "ENERGY_BADGE", "energy_levels": ["B1"],
    }, _png_bytes(5, 5, (0, 255, 0, 255)))
    assert badge.status_code == 201

    return {
        "project": project.json(),
        "product_id": product.json()["id"],
        "badge_id": badge.json()["id"],
    }


def _variant(product_id: str, energy="B1", capacity="35") -> dict:
    return {
        "project_name": "proj", "product_id": product_id,
        "energy_level": energy, "capacity_code": capacity,
    }


# ─── Service ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_health_endpoint(storage_env):
    async with lifespan_client() as c:
        resp = await c.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "ac-gen"
    assert data["catalog"] == "memory"


@pytest.mark.asyncio
async def test_status_unknown_job_returns_404(storage_env):
    async with lifespan_client() as c:
        resp = await c.get("/status/nonexistent-job-id")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "JOB_NOT_FOUND"


@pytest.mark.asyncio
async def test_docs_available(storage_env):
    async with lifespan_client() as c:
        resp = await c.get("/docs")
    assert resp.status_code == 200


# ─── Catalog ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_product_upload_and_list(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        listing = await c.get("/products")
        stored = await c.get(f"/storage/{listing.json()[0]['file_path']}")

    assert [p["id"] for p in listing.json()] == [seeded["product_id"]]
    assert listing.json()[0]["file_path"].startswith("products/")
    assert stored.status_code == 200
    assert stored.content[:8] == b"\x89PNG\r\n\x1a\n"


@pytest.mark.asyncio
async def test_upload_rejects_unsupported_type(storage_env):
    async with lifespan_client() as c:
        resp = await _upload(
            c, "/products", {"category": "AC", "form_factor": "WALL"},
            b"plain text", content_type="text/plain",
        )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "IMAGE_VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_upload_rejects_undecodable_image(storage_env):
    async with lifespan_client() as c:
        resp = await _upload(
            c, "/products", {"category": "AC", "form_factor": "WALL"}, b"not really a png",
        )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "IMAGE_VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_upload_rejects_bad_metadata(storage_env):
    async with lifespan_client() as c:
        # AC products need a form factor
        resp = await _upload(c, "/products", {"category": "AC"})
        listing = await c.get("/products")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_METADATA"
    assert listing.json() == []


@pytest.mark.asyncio
async def test_decorations_filtered_by_project(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        mine = await c.get("/decorations", params={"project_name": "proj"})
        other = await c.get("/decorations", params={"project_name": "other"})
    assert [d["id"] for d in mine.json()] == [seeded["badge_id"]]
    assert other.json() == []


@pytest.mark.asyncio
async def test_delete_product(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        deleted = await c.delete(f"/products/{seeded['product_id']}")
        again = await c.delete(f"/products/{seeded['product_id']}")
    assert deleted.status_code == 204
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "NOT_FOUND"


# ─── Projects ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_duplicate_project_name_rejected(storage_env):
    async with lifespan_client() as c:
        await c.post("/projects", json={"project_name": "proj"})
        resp = await c.post("/projects", json={"project_name": "proj"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_METADATA"


@pytest.mark.asyncio
async def test_update_project(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.put(
            f"/projects/{seeded['project']['id']}", json={"display_name": "Summer Sale"},
        )
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "Summer Sale"
    assert resp.json()["canvas_width"] == 40


@pytest.mark.asyncio
async def test_template_seeded_from_decorations(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.get(f"/projects/{seeded['project']['id']}/template")
    types = [e["type"] for e in resp.json()["layer_order"]]
    assert types == ["price", "decoration", "product", "background"]


@pytest.mark.asyncio
async def test_template_reorder_reassigns_z(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        pid = seeded["project"]["id"]
        await c.put(f"/projects/{pid}/template", json={"layer_order": [
            {"type": "background", "z_index": 0},
            {"type": "product", "z_index": 50},
            {"type": "price", "z_index": 200},
        ]})
        resp = await c.post(
            f"/projects/{pid}/template/reorder", json={"from_index": 0, "to_index": 2},
        )
        bad = await c.post(
            f"/projects/{pid}/template/reorder", json={"from_index": 0, "to_index": 9},
        )

    order = resp.json()["template"]["layer_order"]
    assert [(e["type"], e["z_index"]) for e in order] == [
        ("product", 30), ("background", 20), ("price", 10),
    ]
    assert bad.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_project_copies_decorations(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.post(
            f"/projects/{seeded['project']['id']}/duplicate",
            json={"project_name": "proj-copy"},
        )
        copies = await c.get("/decorations", params={"project_name": "proj-copy"})
        originals = await c.get("/decorations", params={"project_name": "proj"})

    assert resp.status_code == 201
    assert resp.json()["project_name"] == "proj-copy"
    assert resp.json()["canvas_width"] == 40
    assert len(copies.json()) == 1
    assert copies.json()[0]["id"] != seeded["badge_id"]
    assert copies.json()[0]["file_path"] != originals.json()[0]["file_path"]


# ─── Compose ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_compose_layers(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.post(
            "/compose/layers",
            json={**_variant(seeded["product_id"]), "price_promo_text": "¥2999"},
        )
    assert resp.status_code == 200
    layers = resp.json()
    assert [layer["layer_type"] for layer in layers] == ["product", "decoration", "price"]
    assert layers[-1]["text_content"] == "¥2999"


@pytest.mark.asyncio
async def test_compose_layers_unknown_product(storage_env):
    async with lifespan_client() as c:
        await _seed(c)
        resp = await c.post("/compose/layers", json=_variant("ghost"))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_instance_adjustment_moves_decoration(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        body = {
            "project_id": seeded["project"]["id"],
            "product_id": seeded["product_id"],
            "energy_level": "B1",
            "capacity_code": "35",
            "decoration_adjustments": [
                {"decoration_id": seeded["badge_id"], "offset_x": 5, "offset_y": 6},
            ],
        }
        first = await c.post("/instances", json=body)
        second = await c.post("/instances", json=body)
        listing = await c.get("/instances", params={"project_id": seeded["project"]["id"]})
        layers = await c.post("/compose/layers", json=_variant(seeded["product_id"]))

    assert first.json()["id"] == second.json()["id"]
    assert len(listing.json()) == 1
    badge = next(layer for layer in layers.json() if layer["asset_id"] == seeded["badge_id"])
    assert (badge["x"], badge["y"]) == (5, 6)


@pytest.mark.asyncio
async def test_compose_render_png(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.post("/compose/render", json=_variant(seeded["product_id"]))

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert quote(VARIANT_NAME) in resp.headers["content-disposition"]
    img = cv2.imdecode(np.frombuffer(resp.content, np.uint8), cv2.IMREAD_UNCHANGED)
    assert img.shape == (30, 40, 4)


@pytest.mark.asyncio
async def test_compose_render_psd(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.post(
            "/compose/render", params={"format": "psd"}, json=_variant(seeded["product_id"]),
        )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/vnd.adobe.photoshop"
    assert resp.content[:4] == b"8BPS"


@pytest.mark.asyncio
async def test_compose_variants(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.post("/compose/variants", json={
            "project_name": "proj",
            "product_ids": [seeded["product_id"]],
            "energy_levels": ["B1", "B2"],
            "capacity_codes": [],
        })
        missing = await c.post("/compose/variants", json={
            "project_name": "nope", "product_ids": [seeded["product_id"]],
        })

    assert [(v["energy_level"], v["capacity_code"]) for v in resp.json()] == [
        ("B1", None), ("B2", None),
    ]
    assert missing.status_code == 404


# ─── Batch ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_batch_generate_streams_zip(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        resp = await c.post("/batch/generate", json={"variants": [
            _variant(seeded["product_id"]), _variant("ghost"),
        ]})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert "proj_batch_output.zip" in resp.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert zf.namelist() == [VARIANT_NAME, "error_0002.txt"]


@pytest.mark.asyncio
async def test_batch_generate_rejects_empty_request(storage_env):
    async with lifespan_client() as c:
        resp = await c.post("/batch/generate", json={"variants": []})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_batch_job_lifecycle(storage_env):
    async with lifespan_client() as c:
        seeded = await _seed(c)
        submitted = await c.post("/batch/jobs", json={"variants": [
            _variant(seeded["product_id"]), _variant(seeded["product_id"], energy="B2"),
        ]})
        job_id = submitted.json()["job_id"]

        # ASGITransport returns after background tasks have run
        status_resp = await c.get(f"/status/{job_id}")
        archive = await c.get(f"/assets/{job_id}/batch.zip")
        forbidden = await c.get(f"/assets/{job_id}/notes.exe")

    assert submitted.status_code == 202
    assert submitted.json()["total_variants"] == 2

    status_data = status_resp.json()
    assert status_data["status"] == "done"
    assert status_data["progress"] == 100
    assert status_data["result"]["rendered_count"] == 2
    assert status_data["result"]["archive_url"] == f"/assets/{job_id}/batch.zip"

    assert archive.status_code == 200
    with zipfile.ZipFile(io.BytesIO(archive.content)) as zf:
        assert zf.namelist() == [VARIANT_NAME, "X1-挂机-B2-White-35.png"]

    assert forbidden.status_code == 403
