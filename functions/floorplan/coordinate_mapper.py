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

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from shared.constants import LOGICAL_CANVAS_SIZE
from shared.floorplan_types import ContainerSize, FloorplanItem

SELECTED_Z_INDEX = 999
DEFAULT_Z_INDEX = 2


@dataclass(frozen=True)
class ItemStyle:
    """Pixel-space placement of an item inside the rendered container."""

    left: float
    top: float
    width: float
    height: float
    rotation: float
    selected: bool = False

    def to_css(self) -> dict:
        """Returns the inline style applied to the item element."""
        return {
            "left": f"{_format_px(self.left)}px",
            "top": f"{_format_px(self.top)}px",
            "width": f"{_format_px(self.width)}px",
            "height": f"{_format_px(self.height)}px",
            "transform": f"rotate({_format_px(self.rotation)}deg)",
            "transformOrigin": "center center",
            "position": "absolute",
            "zIndex": SELECTED_Z_INDEX if self.selected else DEFAULT_Z_INDEX,
        }


def _format_px(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(round(value, 4))


def scale_factors(container_size: ContainerSize) -> tuple[float, float]:
    """Returns the (x, y) scale from logical units to container pixels."""
    return (
        container_size.width / LOGICAL_CANVAS_SIZE,
        container_size.height / LOGICAL_CANVAS_SIZE,
    )


def map_item(
    item: FloorplanItem,
    container_size: Optional[ContainerSize],
    selected: bool = False,
) -> Optional[ItemStyle]:
    """
    Maps an item's logical geometry onto the measured container.

    Args:
        item (FloorplanItem): The item to place.
        container_size (ContainerSize | None): The measured container, or None
            if layout has not happened yet.
        selected (bool): Whether the item is the current selection.

    Returns:
        ItemStyle | None: The pixel placement, or None when the container has
        not been measured. Rotation is left as a pure transform about the
        element's center and does not affect left/top.
    """
    if not container_size:
        return None

    scale_x, scale_y = scale_factors(container_size)
    return ItemStyle(
        left=item.x * scale_x,
        top=item.y * scale_y,
        width=item.w * scale_x,
        height=item.h * scale_y,
        rotation=item.rotation or 0,
        selected=selected,
    )


def map_items(
    items: Iterable[FloorplanItem],
    container_size: Optional[ContainerSize],
    selected_id: Optional[str] = None,
) -> Dict[str, ItemStyle]:
    if not container_size:
        return {}
    return {
        item.id: map_item(item, container_size, selected=item.id == selected_id)
        for item in items
    }
