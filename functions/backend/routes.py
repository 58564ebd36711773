"""
HTTP routes for the floorplan backend API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile

from backend.auth import get_current_actor
from backend.db import DbClient
from backend.dependencies import get_db_client, get_storage_client
from backend.schemas import (
    BackgroundUploadResponse,
    CatalogResponse,
    DeleteDraftResponse,
    DraftPayload,
    DraftResponse,
    ExportRequest,
    FloorplanRecordResponse,
    ItemPrototypeModel,
    LayoutRequest,
    LayoutResponse,
    TemplateModel,
    UploadRequest,
    UploadResponse,
    VendorFloorplansResponse,
)
from backend.storage import StorageClient
from floorplan import coordinate_mapper, export
from floorplan.background import to_data_url, validate_background_upload
from floorplan.errors import (
    FloorplanError,
    ImageLoadError,
    InvalidBackgroundImage,
    MissingContainer,
    MissingSelection,
    Unauthenticated,
    UploadFailure,
)
from shared.constants import MAX_BACKGROUND_IMAGE_BYTES
from shared.floorplan_types import ITEM_PROTOTYPES, TEMPLATES

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS_CODES = {
    MissingContainer: 400,
    MissingSelection: 400,
    InvalidBackgroundImage: 400,
    Unauthenticated: 401,
    ImageLoadError: 422,
    UploadFailure: 502,
}


def _http_error(error: FloorplanError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=500, detail=error.message)


class _ResponseDownloader:
    """Captures an export so it can be returned as the HTTP response."""

    def __init__(self):
        self.response: Response | None = None

    def save(self, file_name: str, data: bytes, mime_type: str) -> None:
        self.response = Response(
            content=data,
            media_type=mime_type,
            headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
        )


@router.get("/floorplans/catalog", response_model=CatalogResponse)
def get_catalog():
    return CatalogResponse(
        templates=[
            TemplateModel(id=t.id, name=t.name, color=t.color) for t in TEMPLATES
        ],
        item_prototypes=[
            ItemPrototypeModel(
                key=key,
                type=str(proto.type),
                w=proto.w,
                h=proto.h,
                shape=str(proto.shape),
                color=proto.color,
            )
            for key, proto in ITEM_PROTOTYPES.items()
        ],
    )


@router.post("/floorplans/layout", response_model=LayoutResponse)
def layout_floorplan(payload: LayoutRequest):
    """
    Maps logical item geometry to pixel styles. Returns no styles until the
    client reports a container size.
    """
    container_size = (
        payload.container_size.to_container_size() if payload.container_size else None
    )
    styles = coordinate_mapper.map_items(
        [item.to_item() for item in payload.items],
        container_size,
        selected_id=payload.selected_id,
    )
    return LayoutResponse(
        styles={item_id: style.to_css() for item_id, style in styles.items()}
    )


@router.post("/floorplans/export")
def export_floorplan(payload: ExportRequest):
    downloader = _ResponseDownloader()
    try:
        export.export_to_file(
            payload.to_items(),
            payload.to_container_size(),
            downloader,
            template=payload.template,
            background=payload.background_image,
            event_id=payload.event_id,
            image_format=payload.image_format,
        )
    except FloorplanError as e:
        raise _http_error(e)
    return downloader.response


@router.post("/floorplans/upload", response_model=UploadResponse)
def upload_floorplan(
    payload: UploadRequest,
    actor: Optional[export.Actor] = Depends(get_current_actor),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    try:
        result = export.upload_to_storage(
            event_id=payload.event_id,
            vendor_id=payload.vendor_id,
            actor=actor,
            items=payload.to_items(),
            container_size=payload.to_container_size(),
            storage=storage,
            records=db,
            template=payload.template,
            background=payload.background_image,
        )
    except FloorplanError as e:
        raise _http_error(e)

    return UploadResponse(
        record=FloorplanRecordResponse(
            event_id=payload.event_id,
            vendor_id=payload.vendor_id,
            floorplan_url=result.record.floorplan_url,
            uploaded_at=result.record.uploaded_at,
            uploaded_by=result.record.uploaded_by,
        ),
        storage_path=result.storage_path,
        message=result.message,
    )


@router.get(
    "/events/{event_id}/floorplans/{vendor_id}",
    response_model=FloorplanRecordResponse,
)
def get_floorplan(event_id: str, vendor_id: str, db: DbClient = Depends(get_db_client)):
    record = db.get_floorplan_record(event_id, vendor_id)
    if not record:
        raise HTTPException(status_code=404, detail="Floorplan not found")
    return FloorplanRecordResponse(
        event_id=event_id,
        vendor_id=vendor_id,
        floorplan_url=record.floorplan_url,
        uploaded_at=record.uploaded_at,
        uploaded_by=record.uploaded_by,
    )


@router.get("/vendors/{vendor_id}/floorplans", response_model=VendorFloorplansResponse)
def list_vendor_floorplans(
    vendor_id: str,
    event_ids: str = Query(..., description="Comma separated event ids"),
    db: DbClient = Depends(get_db_client),
):
    ids = [e.strip() for e in event_ids.split(",") if e.strip()]
    return VendorFloorplansResponse(
        vendor_id=vendor_id, floorplans=db.list_vendor_floorplans(vendor_id, ids)
    )


@router.put("/events/{event_id}/floorplan-draft", response_model=DraftResponse)
def save_draft(
    event_id: str, payload: DraftPayload, db: DbClient = Depends(get_db_client)
):
    db.save_draft(event_id, payload.to_draft())
    return DraftResponse(event_id=event_id, draft=payload)


@router.get("/events/{event_id}/floorplan-draft", response_model=DraftResponse)
def load_draft(event_id: str, db: DbClient = Depends(get_db_client)):
    draft = db.get_draft(event_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="No saved draft found")
    return DraftResponse(event_id=event_id, draft=DraftPayload.from_draft(draft))


@router.delete(
    "/events/{event_id}/floorplan-draft", response_model=DeleteDraftResponse
)
def delete_draft(event_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete_draft(event_id):
        raise HTTPException(status_code=404, detail="No saved draft found to delete.")
    return DeleteDraftResponse(status="deleted")


@router.post("/floorplans/background", response_model=BackgroundUploadResponse)
async def upload_background(file: UploadFile = File(...)):
    data = await file.read(MAX_BACKGROUND_IMAGE_BYTES + 1)
    try:
        validate_background_upload(file.content_type, len(data))
    except InvalidBackgroundImage as e:
        raise _http_error(e)
    logger.info("Background image uploaded: %s, %d bytes", file.content_type, len(data))
    return BackgroundUploadResponse(
        data_url=to_data_url(data, file.content_type),
        content_type=file.content_type,
        size=len(data),
    )
