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

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from typing import Union

from PIL import Image, UnidentifiedImageError

from floorplan.errors import ImageLoadError, InvalidBackgroundImage
from shared.constants import (
    ALLOWED_BACKGROUND_CONTENT_TYPES,
    MAX_BACKGROUND_IMAGE_BYTES,
)

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL
)

BackgroundSource = Union[bytes, str]


def validate_background_upload(content_type: str | None, size: int) -> None:
    """
    Checks an uploaded background image before it is accepted.

    Raises:
        InvalidBackgroundImage: If the type is not an allowed image type or
            the file is larger than 5MB.
    """
    if content_type not in ALLOWED_BACKGROUND_CONTENT_TYPES:
        raise InvalidBackgroundImage(
            "Invalid file type. Please upload an image (JPEG, PNG, GIF, or WebP)."
        )
    if size > MAX_BACKGROUND_IMAGE_BYTES:
        raise InvalidBackgroundImage(
            "File is too large. Please upload an image smaller than 5MB."
        )


def to_data_url(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def decode_background_bytes(source: BackgroundSource) -> bytes:
    """Returns raw image bytes from either bytes or a base64 data URL."""
    if isinstance(source, bytes):
        return source

    match = DATA_URL_PATTERN.match(source.strip())
    if not match:
        raise ImageLoadError()
    try:
        return base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError() from e


def load_background(source: BackgroundSource) -> Image.Image:
    """
    Decodes a background image fully into memory.

    Args:
        source: Raw image bytes or a `data:<mime>;base64,...` URL.

    Returns:
        Image.Image: The decoded image, converted to RGB.

    Raises:
        ImageLoadError: If the source cannot be decoded as an image.
    """
    data = decode_background_bytes(source)
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGB")
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as e:
        logger.warning("Background image could not be decoded: %s", e)
        raise ImageLoadError() from e
