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

# Cloud functions for the PlanIt floorplan editor - upload and vendor views.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from dataclasses import asdict, dataclass
from typing import Optional

# Third-party library imports
from dacite import from_dict, Config
from firebase_admin import initialize_app, firestore, storage
from firebase_functions import https_fn, logger, options

# Local application imports
from backend.db import FirestoreDbClient, draft_to_json
from backend.storage import GcsStorageClient
from floorplan import export
from floorplan.errors import (
    FloorplanError,
    ImageLoadError,
    InvalidBackgroundImage,
    MissingContainer,
    MissingSelection,
    Unauthenticated,
    UploadFailure,
)
from shared.api import UploadFloorplanRequest, UploadFloorplanResult, VendorFloorplansResult
from shared.constants import (
    MAX_CONTAINER_SIZE,
    MAX_ID_LENGTH,
    MAX_ITEMS_PER_FLOORPLAN,
    MIN_CONTAINER_SIZE,
)
from shared.floorplan_types import ContainerSize, FloorplanDraft
from shared.json_utils import convert_keys

initialize_app()

ERROR_CODES = [
    (MissingSelection, https_fn.FunctionsErrorCode.INVALID_ARGUMENT),
    (MissingContainer, https_fn.FunctionsErrorCode.INVALID_ARGUMENT),
    (ImageLoadError, https_fn.FunctionsErrorCode.INVALID_ARGUMENT),
    (InvalidBackgroundImage, https_fn.FunctionsErrorCode.INVALID_ARGUMENT),
    (Unauthenticated, https_fn.FunctionsErrorCode.UNAUTHENTICATED),
    (UploadFailure, https_fn.FunctionsErrorCode.UNAVAILABLE),
]


@dataclass
class DeleteFloorplanDraftResult:
    status: str


def _get_db_client() -> FirestoreDbClient:
    return FirestoreDbClient(firestore.client())


def _get_storage_client() -> GcsStorageClient:
    return GcsStorageClient(storage_module=storage)


def _to_https_error(error: FloorplanError) -> https_fn.HttpsError:
    for error_type, code in ERROR_CODES:
        if isinstance(error, error_type):
            return https_fn.HttpsError(code, error.message)
    return https_fn.HttpsError(https_fn.FunctionsErrorCode.INTERNAL, error.message)


def _actor(req: https_fn.CallableRequest) -> Optional[export.Actor]:
    if req.auth is None:
        return None
    return export.Actor(uid=req.auth.uid)


def _require_actor(req: https_fn.CallableRequest) -> export.Actor:
    actor = _actor(req)
    if actor is None:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.UNAUTHENTICATED,
            Unauthenticated().message,
        )
    return actor


def _check_id(name: str, value) -> str:
    if not value:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"Must specify {name} parameter.",
        )
    if not isinstance(value, str) or len(value) > MAX_ID_LENGTH:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"Incorrect {name} length.",
        )
    return value


def _check_container_size(container_size: Optional[ContainerSize]) -> None:
    if container_size is None:
        return
    for value in (container_size.width, container_size.height):
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not MIN_CONTAINER_SIZE <= value <= MAX_CONTAINER_SIZE
        ):
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "Incorrect container size.",
            )


@https_fn.on_call(timeout_sec=120, memory=options.MemoryOption.MB_512)
def upload_floorplan(req: https_fn.CallableRequest) -> dict:
    """
    Renders the planner's floorplan and uploads it for the chosen vendor.

    Args:
        req (https_fn.CallableRequest): The request, containing the event id,
            vendor id, items, container size, template and optional background.

    Returns:
        A dictionary representation of the UploadFloorplanResult object.
    """
    request = from_dict(
        data_class=UploadFloorplanRequest,
        data=convert_keys(req.data or {}, "camel_to_snake"),
        config=Config(check_types=False),
    )
    if len(request.items) > MAX_ITEMS_PER_FLOORPLAN:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Floorplan has too many items.",
        )
    _check_container_size(request.container_size)
    return start_floorplan_upload(request, _actor(req))


def start_floorplan_upload(
    request: UploadFloorplanRequest, actor: Optional[export.Actor]
) -> dict:
    try:
        result = export.upload_to_storage(
            event_id=request.event_id,
            vendor_id=request.vendor_id,
            actor=actor,
            items=request.items,
            container_size=request.container_size,
            storage=_get_storage_client(),
            records=_get_db_client(),
            template=request.template,
            background=request.background_image,
        )
    except FloorplanError as e:
        logger.error(f"Floorplan upload failed: {e.message}")
        raise _to_https_error(e)

    upload_result = UploadFloorplanResult(
        floorplan_url=result.record.floorplan_url,
        storage_path=result.storage_path,
        uploaded_at=result.record.uploaded_at.isoformat(),
        uploaded_by=result.record.uploaded_by,
        message=result.message,
    )
    return convert_keys(asdict(upload_result), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_512)
def get_vendor_floorplans(req: https_fn.CallableRequest) -> dict:
    """
    Returns the floorplan url for each of the given events that has one for
    this vendor. Events without an upload are left out.
    """
    data = convert_keys(req.data or {}, "camel_to_snake")
    vendor_id = _check_id("vendor_id", data.get("vendor_id"))
    event_ids = data.get("event_ids") or []
    if not isinstance(event_ids, list):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "event_ids must be a list.",
        )
    event_ids = [_check_id("event_id", event_id) for event_id in event_ids]

    floorplans = _get_db_client().list_vendor_floorplans(vendor_id, event_ids)
    result = VendorFloorplansResult(vendor_id=vendor_id, floorplans=floorplans)
    # Event ids are map keys and must not be case converted.
    return {"vendorId": result.vendor_id, "floorplans": result.floorplans}


@https_fn.on_call(memory=options.MemoryOption.MB_512)
def save_floorplan_draft(req: https_fn.CallableRequest) -> dict:
    data = convert_keys(req.data or {}, "camel_to_snake")
    _require_actor(req)
    event_id = _check_id("event_id", data.get("event_id"))
    draft_dict = data.get("draft")
    if not isinstance(draft_dict, dict):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Must specify draft parameter.",
        )

    draft = from_dict(
        data_class=FloorplanDraft,
        data=draft_dict,
        config=Config(check_types=False),
    )
    if len(draft.items) > MAX_ITEMS_PER_FLOORPLAN:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Floorplan has too many items.",
        )
    _get_db_client().save_draft(event_id, draft)
    logger.info(f"Saved floorplan draft for event {event_id}")
    return convert_keys(draft_to_json(draft), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_512)
def load_floorplan_draft(req: https_fn.CallableRequest) -> dict:
    data = convert_keys(req.data or {}, "camel_to_snake")
    _require_actor(req)
    event_id = _check_id("event_id", data.get("event_id"))

    draft = _get_db_client().get_draft(event_id)
    if draft is None:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.NOT_FOUND,
            "No saved draft found",
        )
    return convert_keys(draft_to_json(draft), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_512)
def delete_floorplan_draft(req: https_fn.CallableRequest) -> dict:
    data = convert_keys(req.data or {}, "camel_to_snake")
    _require_actor(req)
    event_id = _check_id("event_id", data.get("event_id"))

    if not _get_db_client().delete_draft(event_id):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.NOT_FOUND,
            "No saved draft found to delete.",
        )
    result = DeleteFloorplanDraftResult(status="deleted")
    return convert_keys(asdict(result), "snake_to_camel")
