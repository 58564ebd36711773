"""
Pydantic schemas for the floorplan FastAPI backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from shared.constants import (
    MAX_CONTAINER_SIZE,
    MAX_ID_LENGTH,
    MAX_ITEMS_PER_FLOORPLAN,
    MIN_CONTAINER_SIZE,
)
from shared.floorplan_types import ContainerSize, FloorplanDraft, FloorplanItem


class FloorplanItemModel(BaseModel):
    id: str = Field(..., max_length=MAX_ID_LENGTH)
    type: str = Field(..., max_length=64)
    shape: str = "rect"
    x: float
    y: float
    w: float = Field(..., ge=0)
    h: float = Field(..., ge=0)
    rotation: Optional[float] = 0
    color: Optional[str] = "#999"

    def to_item(self) -> FloorplanItem:
        return FloorplanItem(
            id=self.id,
            type=self.type,
            shape=self.shape,
            x=self.x,
            y=self.y,
            w=self.w,
            h=self.h,
            rotation=self.rotation or 0,
            color=self.color or "#999",
        )

    @classmethod
    def from_item(cls, item: FloorplanItem) -> "FloorplanItemModel":
        return cls(
            id=item.id,
            type=item.type,
            shape=item.shape,
            x=item.x,
            y=item.y,
            w=item.w,
            h=item.h,
            rotation=item.rotation,
            color=item.color,
        )


class ContainerSizeModel(BaseModel):
    width: float = Field(..., ge=MIN_CONTAINER_SIZE, le=MAX_CONTAINER_SIZE)
    height: float = Field(..., ge=MIN_CONTAINER_SIZE, le=MAX_CONTAINER_SIZE)

    def to_container_size(self) -> ContainerSize:
        return ContainerSize(width=self.width, height=self.height)


class FloorplanCanvas(BaseModel):
    """The parts of a floorplan that are rendered."""

    items: list[FloorplanItemModel] = Field(
        default_factory=list, max_length=MAX_ITEMS_PER_FLOORPLAN
    )
    container_size: Optional[ContainerSizeModel] = None
    template: Optional[str] = None
    background_image: Optional[str] = None

    def to_items(self) -> list[FloorplanItem]:
        return [item.to_item() for item in self.items]

    def to_container_size(self) -> Optional[ContainerSize]:
        if self.container_size is None:
            return None
        return self.container_size.to_container_size()


class LayoutRequest(BaseModel):
    items: list[FloorplanItemModel] = Field(
        default_factory=list, max_length=MAX_ITEMS_PER_FLOORPLAN
    )
    container_size: Optional[ContainerSizeModel] = None
    selected_id: Optional[str] = None


class LayoutResponse(BaseModel):
    styles: dict[str, dict]


class ExportRequest(FloorplanCanvas):
    event_id: Optional[str] = Field(default=None, max_length=MAX_ID_LENGTH)
    image_format: Literal["PNG", "JPEG", "WEBP"] = "PNG"


class UploadRequest(FloorplanCanvas):
    event_id: Optional[str] = Field(default=None, max_length=MAX_ID_LENGTH)
    vendor_id: Optional[str] = Field(default=None, max_length=MAX_ID_LENGTH)


class FloorplanRecordResponse(BaseModel):
    event_id: str
    vendor_id: str
    floorplan_url: str
    uploaded_at: datetime
    uploaded_by: str


class UploadResponse(BaseModel):
    record: FloorplanRecordResponse
    storage_path: str
    message: str


class VendorFloorplansResponse(BaseModel):
    vendor_id: str
    floorplans: dict[str, str]


class DraftPayload(BaseModel):
    template: str = "blank"
    items: list[FloorplanItemModel] = Field(
        default_factory=list, max_length=MAX_ITEMS_PER_FLOORPLAN
    )
    background_image: Optional[str] = None

    def to_draft(self) -> FloorplanDraft:
        return FloorplanDraft(
            template=self.template,
            items=[item.to_item() for item in self.items],
            background_image=self.background_image,
        )

    @classmethod
    def from_draft(cls, draft: FloorplanDraft) -> "DraftPayload":
        return cls(
            template=draft.template,
            items=[FloorplanItemModel.from_item(item) for item in draft.items],
            background_image=draft.background_image,
        )


class DraftResponse(BaseModel):
    event_id: str
    draft: DraftPayload


class DeleteDraftResponse(BaseModel):
    status: Literal["deleted"]


class BackgroundUploadResponse(BaseModel):
    data_url: str
    content_type: str
    size: int


class TemplateModel(BaseModel):
    id: str
    name: str
    color: str


class ItemPrototypeModel(BaseModel):
    key: str
    type: str
    w: float
    h: float
    shape: str
    color: str


class CatalogResponse(BaseModel):
    templates: list[TemplateModel]
    item_prototypes: list[ItemPrototypeModel]
