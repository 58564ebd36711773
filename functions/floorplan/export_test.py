# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import os
import shutil
import tempfile
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from floorplan import export
from floorplan.errors import (
    ImageLoadError,
    MetadataWriteFailure,
    MissingSelection,
    StorageWriteFailure,
    Unauthenticated,
)
from shared.floorplan_types import ContainerSize, FloorplanItem

FIXED_NOW = datetime(2026, 3, 14, 9, 30, 0, tzinfo=timezone.utc)


def _items():
    return [
        FloorplanItem(
            id="it-1", type="table", shape="round", x=300, y=300, w=80, h=80, color="#eab308"
        ),
        FloorplanItem(
            id="it-2", type="stage", shape="rect", x=500, y=120, w=300, h=80, color="#6b7280"
        ),
    ]


class ExportToFileTest(unittest.TestCase):

    def test_export_triggers_one_download(self):
        downloader = MagicMock()

        image = export.export_to_file(
            _items(),
            ContainerSize(width=400, height=400),
            downloader,
            template="blank",
            event_id="evt-42",
        )

        downloader.save.assert_called_once_with(
            "floorplan-evt-42.png", image.data, "image/png"
        )
        self.assertTrue(image.data.startswith(b"\x89PNG"))

    def test_export_without_event_uses_generic_name(self):
        downloader = MagicMock()
        image = export.export_to_file([], ContainerSize(width=50, height=50), downloader)
        self.assertEqual(image.file_name, "floorplan-event.png")

    def test_export_with_bad_background_downloads_nothing(self):
        downloader = MagicMock()
        with self.assertRaises(ImageLoadError):
            export.export_to_file(
                _items(),
                ContainerSize(width=100, height=100),
                downloader,
                background=b"nope",
            )
        downloader.save.assert_not_called()

    def test_local_directory_downloader_writes_file(self):
        directory = tempfile.mkdtemp()
        try:
            downloader = export.LocalDirectoryDownloader(os.path.join(directory, "out"))
            export.export_to_file(
                _items(), ContainerSize(width=100, height=80), downloader, event_id="e1"
            )
            with open(os.path.join(directory, "out", "floorplan-e1.png"), "rb") as f:
                self.assertTrue(f.read().startswith(b"\x89PNG"))
        finally:
            shutil.rmtree(directory)


class UploadToStorageTest(unittest.TestCase):

    def setUp(self):
        self.calls = MagicMock()
        self.storage = self.calls.storage
        self.records = self.calls.records
        self.storage.upload_bytes.return_value = "https://example.test/floorplan.png"
        self.actor = export.Actor(uid="planner-1")

    def _upload(self, **overrides):
        kwargs = dict(
            event_id="evt-1",
            vendor_id="vendor-9",
            actor=self.actor,
            items=_items(),
            container_size=ContainerSize(width=300, height=300),
            storage=self.storage,
            records=self.records,
            template="cocktail",
            now=lambda: FIXED_NOW,
            unique_prefix=lambda: "1234",
        )
        kwargs.update(overrides)
        return export.upload_to_storage(**kwargs)

    def test_missing_event_makes_no_calls(self):
        with self.assertRaises(MissingSelection) as ctx:
            self._upload(event_id=None)

        self.assertEqual(ctx.exception.message, "Please choose an event first.")
        self.assertEqual(self.storage.upload_bytes.call_count, 0)
        self.assertEqual(self.records.upsert_floorplan_record.call_count, 0)

    def test_missing_vendor_makes_no_calls(self):
        with self.assertRaises(MissingSelection):
            self._upload(vendor_id="")
        self.assertEqual(self.calls.mock_calls, [])

    def test_unauthenticated_makes_no_calls(self):
        with self.assertRaises(Unauthenticated):
            self._upload(actor=None)
        self.assertEqual(self.calls.mock_calls, [])

    def test_successful_upload_writes_blob_then_record(self):
        result = self._upload()

        self.assertEqual(
            [c[0] for c in self.calls.mock_calls],
            ["storage.upload_bytes", "records.upsert_floorplan_record"],
        )
        path, data, content_type, metadata = self.storage.upload_bytes.call_args[0]
        self.assertEqual(path, "Floorplans/evt-1/vendor-9/1234-floorplan-evt-1.png")
        self.assertTrue(data.startswith(b"\x89PNG"))
        self.assertEqual(content_type, "image/png")
        self.assertEqual(
            metadata,
            {"uploadedBy": "planner-1", "uploadedAt": "2026-03-14T09:30:00+00:00"},
        )

        event_id, vendor_id, record = self.records.upsert_floorplan_record.call_args[0]
        self.assertEqual((event_id, vendor_id), ("evt-1", "vendor-9"))
        self.assertEqual(record.floorplan_url, "https://example.test/floorplan.png")
        self.assertEqual(record.uploaded_by, "planner-1")
        self.assertEqual(record.uploaded_at, FIXED_NOW)

        self.assertEqual(result.record, record)
        self.assertEqual(result.storage_path, path)
        self.assertEqual(result.message, "Floorplan uploaded successfully")

    def test_storage_failure_skips_metadata(self):
        self.storage.upload_bytes.side_effect = RuntimeError("bucket unavailable")

        with self.assertRaises(StorageWriteFailure) as ctx:
            self._upload()

        self.assertEqual(ctx.exception.message, "Upload failed: bucket unavailable")
        self.records.upsert_floorplan_record.assert_not_called()

    def test_metadata_failure_is_reported(self):
        self.records.upsert_floorplan_record.side_effect = RuntimeError("denied")

        with self.assertRaises(MetadataWriteFailure) as ctx:
            self._upload()

        self.assertEqual(ctx.exception.message, "Upload failed: denied")
        self.storage.upload_bytes.assert_called_once()


if __name__ == "__main__":
    unittest.main()
