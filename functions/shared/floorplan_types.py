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

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import List, Optional

from shared.constants import DEFAULT_BACKGROUND_COLOR, DEFAULT_ITEM_COLOR


class ItemType(StrEnum):
    TABLE = "table"
    CHAIR = "chair"
    STAGE = "stage"
    LIGHT = "light"
    PIANO = "piano"
    DANCE_FLOOR = "dance_floor"
    DRINK_BAR = "drink_bar"
    BUFFET = "buffet"
    CAKE_TABLE = "cake_table"
    HEAD_TABLE = "head_table"
    WALKWAY_CARPET = "walkway_carpet"
    CATERING_STAND = "catering_stand"
    EXIT_DOOR = "exit_door"


class ItemShape(StrEnum):
    ROUND = "round"
    RECT = "rect"
    SQUARE = "square"


# Item types drawn without a text label.
UNLABELED_ITEM_TYPES = frozenset({ItemType.CHAIR.value, ItemType.LIGHT.value})

# Item types with a dark fill, labelled in white.
DARK_BACKGROUND_ITEM_TYPES = frozenset(
    {
        ItemType.PIANO.value,
        ItemType.STAGE.value,
        ItemType.DRINK_BAR.value,
        ItemType.BUFFET.value,
        ItemType.WALKWAY_CARPET.value,
        ItemType.CATERING_STAND.value,
        ItemType.EXIT_DOOR.value,
        ItemType.HEAD_TABLE.value,
    }
)


@dataclass
class FloorplanItem:
    """A piece of furniture or a fixture placed on the floorplan.

    Geometry is expressed in the logical 1000x1000 canvas; `x`/`y` locate the
    item and `rotation` is in clockwise degrees about its center.
    """

    id: str
    type: str
    shape: str
    x: float
    y: float
    w: float
    h: float
    rotation: float = 0
    color: str = DEFAULT_ITEM_COLOR

    @property
    def is_round(self) -> bool:
        return self.shape == ItemShape.ROUND


@dataclass(frozen=True)
class ContainerSize:
    """Measured on-screen size of the canvas element, in pixels."""

    width: float
    height: float


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    color: str


@dataclass(frozen=True)
class ItemPrototype:
    type: str
    w: float
    h: float
    shape: str
    color: str


TEMPLATES: List[Template] = [
    Template(id="blank", name="Blank", color="#ffffff"),
    Template(id="banquet", name="Banquet (rect rows)", color="#f8fafc"),
    Template(id="theatre", name="Theatre (rows)", color="#fbf7ff"),
    Template(id="cocktail", name="Cocktail (open)", color="#fff8f0"),
]

TEMPLATE_COLORS = {template.id: template.color for template in TEMPLATES}

DEFAULT_TEMPLATE_ID = TEMPLATES[0].id

ITEM_PROTOTYPES = {
    "table_small": ItemPrototype(ItemType.TABLE, 80, 80, ItemShape.ROUND, "#eab308"),
    "table_square": ItemPrototype(ItemType.TABLE, 80, 80, ItemShape.SQUARE, "#f97316"),
    "table_large": ItemPrototype(ItemType.TABLE, 140, 80, ItemShape.RECT, "#f97316"),
    "chair": ItemPrototype(ItemType.CHAIR, 22, 22, ItemShape.ROUND, "#60a5fa"),
    "stage": ItemPrototype(ItemType.STAGE, 300, 80, ItemShape.RECT, "#6b7280"),
    "light_small": ItemPrototype(ItemType.LIGHT, 20, 20, ItemShape.ROUND, "#fef08a"),
    "light_medium": ItemPrototype(ItemType.LIGHT, 30, 30, ItemShape.ROUND, "#fef08a"),
    "light_large": ItemPrototype(ItemType.LIGHT, 40, 40, ItemShape.ROUND, "#fef08a"),
    "piano": ItemPrototype(ItemType.PIANO, 120, 60, ItemShape.RECT, "#000000"),
    "dance_floor": ItemPrototype(
        ItemType.DANCE_FLOOR, 200, 200, ItemShape.SQUARE, "#d1d5db"
    ),
    "drink_bar": ItemPrototype(ItemType.DRINK_BAR, 150, 50, ItemShape.RECT, "#7f1d1d"),
    "buffet": ItemPrototype(ItemType.BUFFET, 180, 60, ItemShape.RECT, "#92400e"),
    "cake_table": ItemPrototype(
        ItemType.CAKE_TABLE, 60, 60, ItemShape.SQUARE, "#fbcfe8"
    ),
    "head_table": ItemPrototype(
        ItemType.HEAD_TABLE, 200, 60, ItemShape.RECT, "#db2777"
    ),
    "walkway_carpet": ItemPrototype(
        ItemType.WALKWAY_CARPET, 300, 40, ItemShape.RECT, "#b91c1c"
    ),
    "catering_stand": ItemPrototype(
        ItemType.CATERING_STAND, 100, 50, ItemShape.RECT, "#15803d"
    ),
    "exit_door": ItemPrototype(ItemType.EXIT_DOOR, 60, 30, ItemShape.RECT, "#dc2626"),
}


def template_color(template_id: Optional[str]) -> str:
    """Returns the background color for a template id, white if unknown."""
    return TEMPLATE_COLORS.get(template_id, DEFAULT_BACKGROUND_COLOR)


@dataclass
class FloorplanRecord:
    """Metadata stored per (event, vendor) pointing at an uploaded snapshot."""

    floorplan_url: str
    uploaded_at: datetime
    uploaded_by: str


@dataclass
class FloorplanDraft:
    """The editable state of a floorplan, saved between editing sessions."""

    template: str = DEFAULT_TEMPLATE_ID
    items: List[FloorplanItem] = field(default_factory=list)
    background_image: Optional[str] = None
