import unittest
from unittest import mock

from backend.storage import GcsStorageClient, InMemoryStorageClient


class InMemoryStorageClientTests(unittest.TestCase):
    def test_upload_and_read_back(self):
        storage = InMemoryStorageClient()
        url = storage.upload_bytes(
            "Floorplans/ev1/v1/a-floorplan-ev1.png",
            b"png",
            "image/png",
            {"uploadedBy": "u1"},
        )
        self.assertIn("Floorplans/ev1/v1/a-floorplan-ev1.png", url)
        self.assertEqual(
            storage.get_bytes("Floorplans/ev1/v1/a-floorplan-ev1.png"), b"png"
        )
        with self.assertRaises(FileNotFoundError):
            storage.get_bytes("missing.png")


class GcsStorageClientTests(unittest.TestCase):
    def test_upload_sets_metadata_and_returns_download_url(self):
        storage_module = mock.MagicMock()
        blob = storage_module.bucket.return_value.blob.return_value
        client = GcsStorageClient(storage_module=storage_module, bucket_name="b")

        url = client.upload_bytes(
            "Floorplans/ev1/v1/a.png", b"png", "image/png", {"uploadedBy": "u1"}
        )

        storage_module.bucket.assert_called_with("b")
        blob.upload_from_string.assert_called_once_with(
            b"png", content_type="image/png"
        )
        self.assertEqual(blob.metadata["uploadedBy"], "u1")
        self.assertIn("firebaseStorageDownloadTokens", blob.metadata)
        self.assertIn("Floorplans%2Fev1%2Fv1%2Fa.png", url)


if __name__ == "__main__":
    unittest.main()
