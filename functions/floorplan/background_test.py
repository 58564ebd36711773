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

import io
import unittest
from unittest import mock

from PIL import Image

from floorplan import background
from floorplan.errors import ImageLoadError, InvalidBackgroundImage


def _image_bytes(fmt="PNG"):
    buffer = io.BytesIO()
    Image.new("RGB", (8, 6), "#00ff00").save(buffer, format=fmt)
    return buffer.getvalue()


class BackgroundTest(unittest.TestCase):

    def test_validate_accepts_allowed_types(self):
        for content_type in ("image/jpeg", "image/png", "image/gif", "image/webp"):
            background.validate_background_upload(content_type, 1024)

    def test_validate_rejects_other_types(self):
        with self.assertRaises(InvalidBackgroundImage) as ctx:
            background.validate_background_upload("application/pdf", 10)
        self.assertIn("Invalid file type", ctx.exception.message)

    def test_validate_rejects_large_files(self):
        with self.assertRaises(InvalidBackgroundImage) as ctx:
            background.validate_background_upload("image/png", 5 * 1024 * 1024 + 1)
        self.assertIn("smaller than 5MB", ctx.exception.message)

    def test_data_url_round_trip(self):
        data = _image_bytes()
        url = background.to_data_url(data, "image/png")

        self.assertTrue(url.startswith("data:image/png;base64,"))
        self.assertEqual(background.decode_background_bytes(url), data)

    def test_load_background_from_bytes_and_url(self):
        data = _image_bytes(fmt="GIF")
        from_bytes = background.load_background(data)
        from_url = background.load_background(background.to_data_url(data, "image/gif"))

        self.assertEqual(from_bytes.mode, "RGB")
        self.assertEqual(from_bytes.size, (8, 6))
        self.assertEqual(from_url.size, (8, 6))

    def test_load_background_rejects_plain_urls(self):
        with self.assertRaises(ImageLoadError):
            background.load_background("https://example.test/floor.png")

    def test_load_background_rejects_garbage(self):
        with self.assertRaises(ImageLoadError):
            background.load_background(b"\x89PNG broken")

    def test_load_background_rejects_oversized_images(self):
        data = _image_bytes("PNG")
        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 10):
            with self.assertRaises(ImageLoadError):
                background.load_background(data)


if __name__ == "__main__":
    unittest.main()
