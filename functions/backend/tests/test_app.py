import base64
import io
import os
import unittest
from unittest import mock

from fastapi.testclient import TestClient
from PIL import Image

from backend.app import create_app
from backend.config import get_settings
from backend.db import InMemoryDbClient
from backend.dependencies import get_db_client, get_storage_client
from backend.storage import InMemoryStorageClient

CANVAS = {
    "items": [
        {
            "id": "t1",
            "type": "table_small",
            "shape": "round",
            "x": 500,
            "y": 500,
            "w": 60,
            "h": 60,
            "rotation": 0,
            "color": "#D2B48C",
        }
    ],
    "container_size": {"width": 200, "height": 200},
    "template": "banquet",
}


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "#336699").save(buffer, format="PNG")
    return buffer.getvalue()


class BackendApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.db = InMemoryDbClient()
        cls.storage = InMemoryStorageClient()

    def setUp(self):
        self.db.reset()
        self.storage.reset()
        self.env_patch = mock.patch.dict(
            os.environ, {"USE_IN_MEMORY_BACKENDS": "true"}
        )
        self.env_patch.start()
        get_settings.cache_clear()

        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.client = TestClient(app)

    def tearDown(self):
        self.env_patch.stop()
        get_settings.cache_clear()

    def test_catalog_lists_templates_and_prototypes(self):
        response = self.client.get("/api/floorplans/catalog")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        template_ids = [t["id"] for t in payload["templates"]]
        self.assertEqual(template_ids, ["blank", "banquet", "theatre", "cocktail"])
        keys = {p["key"] for p in payload["item_prototypes"]}
        self.assertIn("table_small", keys)
        self.assertIn("buffet", keys)

    def test_layout_maps_items_to_pixels(self):
        response = self.client.post(
            "/api/floorplans/layout",
            json={
                "items": CANVAS["items"],
                "container_size": {"width": 800, "height": 600},
                "selected_id": "t1",
            },
        )
        self.assertEqual(response.status_code, 200)
        style = response.json()["styles"]["t1"]
        self.assertEqual(style["left"], "400px")
        self.assertEqual(style["top"], "300px")
        self.assertEqual(style["width"], "48px")
        self.assertEqual(style["height"], "36px")
        self.assertEqual(style["zIndex"], 999)

    def test_layout_without_container_returns_no_styles(self):
        response = self.client.post(
            "/api/floorplans/layout", json={"items": CANVAS["items"]}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["styles"], {})

    def test_export_returns_png_attachment(self):
        response = self.client.post(
            "/api/floorplans/export", json={**CANVAS, "event_id": "ev1"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "image/png")
        self.assertIn(
            'filename="floorplan-ev1.png"', response.headers["content-disposition"]
        )
        image = Image.open(io.BytesIO(response.content))
        self.assertEqual(image.size, (400, 400))

    def test_export_without_event_uses_default_name(self):
        response = self.client.post("/api/floorplans/export", json=CANVAS)
        self.assertEqual(response.status_code, 200)
        self.assertIn(
            'filename="floorplan-event.png"', response.headers["content-disposition"]
        )

    def test_export_without_container_is_rejected(self):
        payload = {k: v for k, v in CANVAS.items() if k != "container_size"}
        response = self.client.post("/api/floorplans/export", json=payload)
        self.assertEqual(response.status_code, 400)

    def test_export_rejects_container_outside_bounds(self):
        for size in ({"width": 0.5, "height": 200}, {"width": 10000, "height": 200}):
            response = self.client.post(
                "/api/floorplans/export", json={**CANVAS, "container_size": size}
            )
            self.assertEqual(response.status_code, 422)

    def test_export_with_oversized_background_is_unprocessable(self):
        data_url = "data:image/png;base64," + base64.b64encode(_png_bytes()).decode()
        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 4):
            response = self.client.post(
                "/api/floorplans/export",
                json={**CANVAS, "background_image": data_url},
            )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(
            response.json()["detail"], "Failed to load background image"
        )

    def test_export_with_broken_background_is_unprocessable(self):
        response = self.client.post(
            "/api/floorplans/export",
            json={**CANVAS, "background_image": "data:image/png;base64,AAAA"},
        )
        self.assertEqual(response.status_code, 422)

    def test_upload_writes_blob_and_record(self):
        response = self.client.post(
            "/api/floorplans/upload",
            json={**CANVAS, "event_id": "ev1", "vendor_id": "v1"},
            headers={"Authorization": "Bearer planner-1"},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["message"], "Floorplan uploaded successfully")
        self.assertEqual(payload["record"]["uploaded_by"], "planner-1")
        self.assertTrue(
            payload["storage_path"].startswith("Floorplans/ev1/v1/")
        )
        self.assertTrue(payload["storage_path"].endswith("-floorplan-ev1.png"))

        stored = self.storage.stored_objects[payload["storage_path"]]
        self.assertEqual(stored.content_type, "image/png")
        self.assertEqual(stored.metadata["uploadedBy"], "planner-1")
        record = self.db.get_floorplan_record("ev1", "v1")
        self.assertEqual(record.floorplan_url, payload["record"]["floorplan_url"])

    def test_upload_without_vendor_makes_no_writes(self):
        response = self.client.post(
            "/api/floorplans/upload",
            json={**CANVAS, "event_id": "ev1"},
            headers={"Authorization": "Bearer planner-1"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["detail"], "Please choose a vendor to upload to."
        )
        self.assertEqual(self.storage.stored_objects, {})
        self.assertEqual(self.db.records, {})

    def test_upload_without_login_is_unauthorized(self):
        response = self.client.post(
            "/api/floorplans/upload",
            json={**CANVAS, "event_id": "ev1", "vendor_id": "v1"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.storage.stored_objects, {})

    def test_upload_reports_storage_failure(self):
        with mock.patch.object(
            self.storage, "upload_bytes", side_effect=OSError("quota")
        ):
            response = self.client.post(
                "/api/floorplans/upload",
                json={**CANVAS, "event_id": "ev1", "vendor_id": "v1"},
                headers={"Authorization": "Bearer planner-1"},
            )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "Upload failed: quota")
        self.assertEqual(self.db.records, {})

    def test_get_floorplan_record(self):
        self.client.post(
            "/api/floorplans/upload",
            json={**CANVAS, "event_id": "ev1", "vendor_id": "v1"},
            headers={"Authorization": "Bearer planner-1"},
        )
        response = self.client.get("/api/events/ev1/floorplans/v1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["uploaded_by"], "planner-1")

        missing = self.client.get("/api/events/ev1/floorplans/v2")
        self.assertEqual(missing.status_code, 404)

    def test_second_upload_replaces_record(self):
        for uid in ("planner-1", "planner-2"):
            self.client.post(
                "/api/floorplans/upload",
                json={**CANVAS, "event_id": "ev1", "vendor_id": "v1"},
                headers={"Authorization": f"Bearer {uid}"},
            )
        self.assertEqual(len(self.db.records), 1)
        self.assertEqual(self.db.get_floorplan_record("ev1", "v1").uploaded_by, "planner-2")
        self.assertEqual(len(self.storage.stored_objects), 2)

    def test_vendor_floorplans_only_lists_events_with_uploads(self):
        self.client.post(
            "/api/floorplans/upload",
            json={**CANVAS, "event_id": "ev1", "vendor_id": "v1"},
            headers={"Authorization": "Bearer planner-1"},
        )
        response = self.client.get(
            "/api/vendors/v1/floorplans", params={"event_ids": "ev1,ev2"}
        )
        self.assertEqual(response.status_code, 200)
        floorplans = response.json()["floorplans"]
        self.assertEqual(list(floorplans), ["ev1"])

    def test_draft_save_load_delete(self):
        draft = {"template": "theatre", "items": CANVAS["items"]}
        saved = self.client.put("/api/events/ev1/floorplan-draft", json=draft)
        self.assertEqual(saved.status_code, 200)

        loaded = self.client.get("/api/events/ev1/floorplan-draft")
        self.assertEqual(loaded.status_code, 200)
        self.assertEqual(loaded.json()["draft"]["template"], "theatre")
        self.assertEqual(loaded.json()["draft"]["items"][0]["id"], "t1")

        deleted = self.client.delete("/api/events/ev1/floorplan-draft")
        self.assertEqual(deleted.json(), {"status": "deleted"})
        self.assertEqual(
            self.client.get("/api/events/ev1/floorplan-draft").status_code, 404
        )
        self.assertEqual(
            self.client.delete("/api/events/ev1/floorplan-draft").status_code, 404
        )

    def test_background_upload_returns_data_url(self):
        response = self.client.post(
            "/api/floorplans/background",
            files={"file": ("room.png", _png_bytes(), "image/png")},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["data_url"].startswith("data:image/png;base64,"))
        self.assertEqual(payload["content_type"], "image/png")

    def test_background_upload_rejects_other_types(self):
        response = self.client.post(
            "/api/floorplans/background",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid file type", response.json()["detail"])


if __name__ == "__main__":
    unittest.main()
