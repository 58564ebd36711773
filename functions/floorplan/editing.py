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

import math
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, List, Literal, Optional

from shared.constants import LOGICAL_CANVAS_SIZE, MIN_ITEM_SIZE
from shared.floorplan_types import (
    DEFAULT_TEMPLATE_ID,
    ITEM_PROTOTYPES,
    FloorplanDraft,
    FloorplanItem,
)


def bounding_half(
    w: float, h: float, rotation: float, axis: Literal["w", "h"]
) -> float:
    """Half extent of the item's rotated bounding box along one axis."""
    rad = math.radians(rotation)
    cos = abs(math.cos(rad))
    sin = abs(math.sin(rad))
    if axis == "w":
        return (w * cos + h * sin) / 2
    return (w * sin + h * cos) / 2


def normalize_rotation(rotation: float) -> float:
    return rotation % 360


def clamp_position(
    x: float, y: float, w: float, h: float, rotation: float
) -> tuple[float, float]:
    """Keeps the rotated bounding box of an item inside the logical canvas."""
    half_w = bounding_half(w, h, rotation, "w")
    half_h = bounding_half(w, h, rotation, "h")
    return (
        max(half_w, min(LOGICAL_CANVAS_SIZE - half_w, x)),
        max(half_h, min(LOGICAL_CANVAS_SIZE - half_h, y)),
    )


def _new_item_id() -> str:
    return f"it-{uuid.uuid4()}"


@dataclass
class FloorplanSession:
    """
    Transient editing state for one floorplan.

    Every mutation marks the session dirty; saving a draft or uploading is
    what clears it.
    """

    items: List[FloorplanItem] = field(default_factory=list)
    selected_id: Optional[str] = None
    is_dirty: bool = False
    id_factory: Callable[[], str] = _new_item_id

    def _find(self, item_id: str) -> Optional[FloorplanItem]:
        return next((it for it in self.items if it.id == item_id), None)

    def _replace(self, updated: FloorplanItem) -> None:
        self.items = [updated if it.id == updated.id else it for it in self.items]
        self.is_dirty = True

    @property
    def selected(self) -> Optional[FloorplanItem]:
        if self.selected_id is None:
            return None
        return self._find(self.selected_id)

    def select(self, item_id: str) -> None:
        if self._find(item_id) is None:
            raise KeyError(item_id)
        self.selected_id = item_id

    def clear_selection(self) -> None:
        self.selected_id = None

    def add_item(self, prototype_key: str) -> FloorplanItem:
        """Adds an item from a prototype at the canvas center and selects it."""
        proto = ITEM_PROTOTYPES[prototype_key]
        item = FloorplanItem(
            id=self.id_factory(),
            type=str(proto.type),
            shape=str(proto.shape),
            x=LOGICAL_CANVAS_SIZE / 2,
            y=LOGICAL_CANVAS_SIZE / 2,
            w=proto.w,
            h=proto.h,
            rotation=0,
            color=proto.color,
        )
        self.items = [*self.items, item]
        self.selected_id = item.id
        self.is_dirty = True
        return item

    def remove_selected(self) -> None:
        if not self.selected_id:
            return
        self.items = [it for it in self.items if it.id != self.selected_id]
        self.selected_id = None
        self.is_dirty = True

    def move_item(self, item_id: str, x: float, y: float) -> FloorplanItem:
        item = self._find(item_id)
        if item is None:
            raise KeyError(item_id)
        new_x, new_y = clamp_position(x, y, item.w, item.h, item.rotation or 0)
        updated = replace(item, x=new_x, y=new_y)
        self._replace(updated)
        return updated

    def rotate_selected(self, delta: float) -> Optional[FloorplanItem]:
        item = self.selected
        if item is None:
            return None
        rotation = normalize_rotation((item.rotation or 0) + delta)
        x, y = clamp_position(item.x, item.y, item.w, item.h, rotation)
        updated = replace(item, rotation=rotation, x=x, y=y)
        self._replace(updated)
        return updated

    def scale_selected(self, factor: float) -> Optional[FloorplanItem]:
        item = self.selected
        if item is None:
            return None
        w = max(MIN_ITEM_SIZE, item.w * factor)
        h = max(MIN_ITEM_SIZE, item.h * factor)
        x, y = clamp_position(item.x, item.y, w, h, item.rotation or 0)
        updated = replace(item, w=w, h=h, x=x, y=y)
        self._replace(updated)
        return updated

    def to_draft(
        self,
        template: str = DEFAULT_TEMPLATE_ID,
        background_image: Optional[str] = None,
    ) -> FloorplanDraft:
        return FloorplanDraft(
            template=template,
            items=[replace(it) for it in self.items],
            background_image=background_image,
        )

    def mark_saved(self) -> None:
        self.is_dirty = False

    @classmethod
    def from_draft(cls, draft: FloorplanDraft) -> "FloorplanSession":
        items = [
            replace(it, rotation=it.rotation if it.rotation is not None else 0)
            for it in draft.items
        ]
        return cls(items=items)
