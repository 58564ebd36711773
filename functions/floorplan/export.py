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

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Sequence

from floorplan import rasterizer
from floorplan.background import BackgroundSource
from floorplan.errors import (
    MetadataWriteFailure,
    MissingSelection,
    StorageWriteFailure,
    Unauthenticated,
)
from shared.constants import DEFAULT_EXPORT_FORMAT
from shared.firebase_constants import FLOORPLAN_STORAGE_PREFIX
from shared.floorplan_types import ContainerSize, FloorplanItem, FloorplanRecord

logger = logging.getLogger(__name__)

UPLOAD_SUCCESS_MESSAGE = "Floorplan uploaded successfully"


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an operation."""

    uid: str


@dataclass(frozen=True)
class FloorplanImage:
    data: bytes
    mime_type: str
    file_name: str


class Downloader(Protocol):
    """Delivers an exported file to the requesting user."""

    def save(self, file_name: str, data: bytes, mime_type: str) -> None:
        ...


class BlobStore(Protocol):
    """The subset of object storage the upload needs."""

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, metadata: dict
    ) -> str:
        ...


class FloorplanRecordStore(Protocol):
    def upsert_floorplan_record(
        self, event_id: str, vendor_id: str, record: FloorplanRecord
    ) -> None:
        ...


@dataclass
class LocalDirectoryDownloader:
    """Writes exported files into a local directory."""

    directory: str

    def save(self, file_name: str, data: bytes, mime_type: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = os.path.join(self.directory, file_name)
        with open(path, "wb") as f:
            f.write(data)
        logger.info("Wrote %s (%s, %d bytes)", path, mime_type, len(data))


def export_file_name(event_id: Optional[str], extension: str = "png") -> str:
    return f"floorplan-{event_id or 'event'}.{extension}"


def create_floorplan_image(
    items: Sequence[FloorplanItem],
    container_size: Optional[ContainerSize],
    template: Optional[str] = None,
    background: Optional[BackgroundSource] = None,
    event_id: Optional[str] = None,
    image_format: str = DEFAULT_EXPORT_FORMAT,
) -> FloorplanImage:
    """
    Rasterizes a floorplan and encodes it for export.

    Raises:
        MissingContainer: If the container size is unknown.
        ImageLoadError: If the background image cannot be decoded.
    """
    image = rasterizer.rasterize(
        items, container_size, template=template, background=background
    )
    data, mime_type, extension = rasterizer.encode_image(image, image_format)
    return FloorplanImage(
        data=data,
        mime_type=mime_type,
        file_name=export_file_name(event_id, extension),
    )


def export_to_file(
    items: Sequence[FloorplanItem],
    container_size: Optional[ContainerSize],
    downloader: Downloader,
    template: Optional[str] = None,
    background: Optional[BackgroundSource] = None,
    event_id: Optional[str] = None,
    image_format: str = DEFAULT_EXPORT_FORMAT,
) -> FloorplanImage:
    """Renders the floorplan and hands it to the downloader exactly once."""
    image = create_floorplan_image(
        items,
        container_size,
        template=template,
        background=background,
        event_id=event_id,
        image_format=image_format,
    )
    downloader.save(image.file_name, image.data, image.mime_type)
    return image


@dataclass
class UploadResult:
    record: FloorplanRecord
    storage_path: str
    message: str = UPLOAD_SUCCESS_MESSAGE


def floorplan_storage_path(
    event_id: str, vendor_id: str, file_name: str, unique_prefix: str
) -> str:
    return f"{FLOORPLAN_STORAGE_PREFIX}/{event_id}/{vendor_id}/{unique_prefix}-{file_name}"


def check_upload_preconditions(
    event_id: Optional[str], vendor_id: Optional[str], actor: Optional[Actor]
) -> None:
    """
    Raises:
        MissingSelection: If no event or no vendor has been chosen.
        Unauthenticated: If there is no signed-in user.
    """
    if not event_id:
        raise MissingSelection("Please choose an event first.")
    if not vendor_id:
        raise MissingSelection("Please choose a vendor to upload to.")
    if actor is None or not actor.uid:
        logger.error("No authenticated user")
        raise Unauthenticated()


def upload_to_storage(
    event_id: Optional[str],
    vendor_id: Optional[str],
    actor: Optional[Actor],
    items: Sequence[FloorplanItem],
    container_size: Optional[ContainerSize],
    storage: BlobStore,
    records: FloorplanRecordStore,
    template: Optional[str] = None,
    background: Optional[BackgroundSource] = None,
    now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    unique_prefix: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> UploadResult:
    """
    Uploads a floorplan snapshot for a vendor and records where it lives.

    Preconditions are checked before anything is rendered or sent. The blob is
    written first; the metadata record is only written once the blob write
    succeeds. The record is an insert-or-merge, so the latest upload wins.

    Args:
        event_id: The selected event.
        vendor_id: The vendor receiving the floorplan.
        actor: The signed-in user, recorded as the uploader.
        items, container_size, template, background: What to render.
        storage: Object storage returning a download url for each write.
        records: Where the (event, vendor) metadata record is kept.

    Returns:
        UploadResult: The stored record and the object path.

    Raises:
        MissingSelection, Unauthenticated: Before any remote call.
        MissingContainer, ImageLoadError: If rendering fails.
        StorageWriteFailure: If the blob write fails; no record is written.
        MetadataWriteFailure: If the record write fails.
    """
    check_upload_preconditions(event_id, vendor_id, actor)

    image = create_floorplan_image(
        items,
        container_size,
        template=template,
        background=background,
        event_id=event_id,
    )

    uploaded_at = now()
    storage_path = floorplan_storage_path(
        event_id, vendor_id, image.file_name, unique_prefix()
    )
    try:
        floorplan_url = storage.upload_bytes(
            storage_path,
            image.data,
            image.mime_type,
            {"uploadedBy": actor.uid, "uploadedAt": uploaded_at.isoformat()},
        )
    except Exception as e:
        logger.exception("Floorplan upload to %s failed", storage_path)
        raise StorageWriteFailure(e) from e

    record = FloorplanRecord(
        floorplan_url=floorplan_url,
        uploaded_at=uploaded_at,
        uploaded_by=actor.uid,
    )
    try:
        records.upsert_floorplan_record(event_id, vendor_id, record)
    except Exception as e:
        logger.exception(
            "Saving floorplan record for event %s vendor %s failed",
            event_id,
            vendor_id,
        )
        raise MetadataWriteFailure(e) from e

    logger.info(
        "Uploaded floorplan for event %s to vendor %s by %s",
        event_id,
        vendor_id,
        actor.uid,
    )
    return UploadResult(record=record, storage_path=storage_path)
