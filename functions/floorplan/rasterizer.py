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

"""
Rasterizes a floorplan into a supersampled bitmap.

Rendering happens in two steps: `build_draw_commands` turns the items into an
immutable list of draw commands, and `render_commands` paints that list onto
a fresh Pillow image in a single pass.
"""

from __future__ import annotations

import io
import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

from PIL import Image, ImageColor, ImageDraw, ImageFont

from floorplan.background import BackgroundSource, load_background
from floorplan.errors import MissingContainer
from shared.constants import (
    DEFAULT_ITEM_COLOR,
    GRID_COLOR,
    GRID_LINE_WIDTH,
    GRID_STEP,
    LABEL_FONT_SIZE_LARGE,
    LABEL_FONT_SIZE_SMALL,
    LABEL_SMALL_ITEM_THRESHOLD,
    LOGICAL_CANVAS_SIZE,
    LOSSY_EXPORT_QUALITY,
    SUPERSAMPLE_SCALE,
)
from shared.floorplan_types import (
    DARK_BACKGROUND_ITEM_TYPES,
    UNLABELED_ITEM_TYPES,
    ContainerSize,
    FloorplanItem,
    template_color,
)

logger = logging.getLogger(__name__)

LIGHT_LABEL_COLOR = "#fff"
DARK_LABEL_COLOR = "#000"

ELLIPSE_SEGMENTS = 72
LABEL_PADDING = 2

EXPORT_FORMATS = {
    "PNG": ("image/png", "png", False),
    "JPEG": ("image/jpeg", "jpg", True),
    "WEBP": ("image/webp", "webp", True),
}

Point = Tuple[float, float]


@dataclass(frozen=True)
class FillBackground:
    color: str


@dataclass(frozen=True)
class StretchBackgroundImage:
    pass


@dataclass(frozen=True)
class GridLine:
    start: Tuple[int, int]
    end: Tuple[int, int]
    color: str = GRID_COLOR
    width: int = GRID_LINE_WIDTH


@dataclass(frozen=True)
class DrawShape:
    center: Tuple[int, int]
    width: int
    height: int
    rotation: float
    round: bool
    color: str


@dataclass(frozen=True)
class DrawLabel:
    center: Tuple[int, int]
    rotation: float
    text: str
    color: str
    font_size: int


DrawCommand = Union[FillBackground, StretchBackgroundImage, GridLine, DrawShape, DrawLabel]


@dataclass(frozen=True)
class DrawPlan:
    canvas_size: Tuple[int, int]
    commands: Tuple[DrawCommand, ...]

    def labels(self) -> list[DrawLabel]:
        return [c for c in self.commands if isinstance(c, DrawLabel)]


def _round(value: float) -> int:
    # Half-up rounding, so .5 pixels do not alternate with banker's rounding.
    return int(math.floor(value + 0.5))


def _resolve_color(color: Optional[str]) -> str:
    if not color:
        return DEFAULT_ITEM_COLOR
    try:
        ImageColor.getrgb(color)
    except ValueError:
        logger.warning("Unknown item color %r, using default", color)
        return DEFAULT_ITEM_COLOR
    return color


def canvas_size_for(container_size: ContainerSize) -> Tuple[int, int]:
    return (
        max(1, _round(container_size.width * SUPERSAMPLE_SCALE)),
        max(1, _round(container_size.height * SUPERSAMPLE_SCALE)),
    )


def format_label(item_type: str) -> str:
    """Formats an item type for display, e.g. "dance_floor" -> "Dance Floor"."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), item_type.replace("_", " "))


def label_color(item_type: str) -> str:
    return LIGHT_LABEL_COLOR if item_type in DARK_BACKGROUND_ITEM_TYPES else DARK_LABEL_COLOR


def label_font_size(item: FloorplanItem) -> int:
    if min(item.w, item.h) < LABEL_SMALL_ITEM_THRESHOLD:
        base = LABEL_FONT_SIZE_SMALL
    else:
        base = LABEL_FONT_SIZE_LARGE
    return base * SUPERSAMPLE_SCALE


def _grid_lines(
    canvas_size: Tuple[int, int], pixel_scale_x: float, pixel_scale_y: float
) -> list[GridLine]:
    # LOGICAL_CANVAS_SIZE / GRID_STEP lines per axis at any container size.
    width, height = canvas_size
    steps = range(0, LOGICAL_CANVAS_SIZE, GRID_STEP)
    lines = [
        GridLine(start=(x, 0), end=(x, height))
        for x in (_round(k * pixel_scale_x) for k in steps)
    ]
    lines.extend(
        GridLine(start=(0, y), end=(width, y))
        for y in (_round(k * pixel_scale_y) for k in steps)
    )
    return lines


def _item_commands(
    item: FloorplanItem, pixel_scale_x: float, pixel_scale_y: float
) -> list[DrawCommand]:
    center = (_round(item.x * pixel_scale_x), _round(item.y * pixel_scale_y))
    rotation = item.rotation or 0
    commands: list[DrawCommand] = [
        DrawShape(
            center=center,
            width=_round(item.w * pixel_scale_x),
            height=_round(item.h * pixel_scale_y),
            rotation=rotation,
            round=item.is_round,
            color=_resolve_color(item.color),
        )
    ]
    if item.type not in UNLABELED_ITEM_TYPES:
        commands.append(
            DrawLabel(
                center=center,
                rotation=rotation,
                text=format_label(item.type),
                color=label_color(item.type),
                font_size=label_font_size(item),
            )
        )
    return commands


def build_draw_commands(
    items: Iterable[FloorplanItem],
    container_size: Optional[ContainerSize],
    template: Optional[str] = None,
    has_background_image: bool = False,
) -> DrawPlan:
    """
    Builds the ordered draw commands for a floorplan.

    Args:
        items: Items in paint order.
        container_size: Measured container; the canvas is twice this size.
        template: Template id used for the flat background color.
        has_background_image: Whether a raster background replaces the fill.

    Returns:
        DrawPlan: Canvas size and commands (background, grid, then items).

    Raises:
        MissingContainer: If the container has not been measured.
    """
    if not container_size:
        raise MissingContainer()

    canvas_size = canvas_size_for(container_size)
    pixel_scale_x = container_size.width / LOGICAL_CANVAS_SIZE * SUPERSAMPLE_SCALE
    pixel_scale_y = container_size.height / LOGICAL_CANVAS_SIZE * SUPERSAMPLE_SCALE

    commands: list[DrawCommand] = []
    if has_background_image:
        commands.append(StretchBackgroundImage())
    else:
        commands.append(FillBackground(color=template_color(template)))
    commands.extend(_grid_lines(canvas_size, pixel_scale_x, pixel_scale_y))
    for item in items or []:
        commands.extend(_item_commands(item, pixel_scale_x, pixel_scale_y))

    return DrawPlan(canvas_size=canvas_size, commands=tuple(commands))


def _rotate_point(dx: float, dy: float, center: Point, radians: float) -> Point:
    # Clockwise on screen, since the y axis points down.
    cos_r = math.cos(radians)
    sin_r = math.sin(radians)
    return (
        center[0] + dx * cos_r - dy * sin_r,
        center[1] + dx * sin_r + dy * cos_r,
    )


def _shape_outline(command: DrawShape) -> list[Point]:
    radians = math.radians(command.rotation)
    half_w = command.width / 2
    half_h = command.height / 2
    if command.round:
        offsets = [
            (
                half_w * math.cos(2 * math.pi * i / ELLIPSE_SEGMENTS),
                half_h * math.sin(2 * math.pi * i / ELLIPSE_SEGMENTS),
            )
            for i in range(ELLIPSE_SEGMENTS)
        ]
    else:
        offsets = [(-half_w, -half_h), (half_w, -half_h), (half_w, half_h), (-half_w, half_h)]
    return [_rotate_point(dx, dy, command.center, radians) for dx, dy in offsets]


def _draw_shape(draw: ImageDraw.ImageDraw, command: DrawShape) -> None:
    if command.width <= 0 or command.height <= 0:
        return
    if command.rotation % 360 == 0:
        cx, cy = command.center
        box = [
            cx - command.width / 2,
            cy - command.height / 2,
            cx + command.width / 2 - 1,
            cy + command.height / 2 - 1,
        ]
        if box[2] < box[0] or box[3] < box[1]:
            return
        if command.round:
            draw.ellipse(box, fill=command.color)
        else:
            draw.rectangle(box, fill=command.color)
        return
    draw.polygon(_shape_outline(command), fill=command.color)


def _load_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=size)


def _draw_label(canvas: Image.Image, command: DrawLabel) -> None:
    font = _load_font(command.font_size)
    left, top, right, bottom = font.getbbox(command.text)
    text_w = max(1, math.ceil(right - left))
    text_h = max(1, math.ceil(bottom - top))

    layer = Image.new(
        "RGBA",
        (text_w + 2 * LABEL_PADDING, text_h + 2 * LABEL_PADDING),
        (0, 0, 0, 0),
    )
    ImageDraw.Draw(layer).text(
        (LABEL_PADDING - left, LABEL_PADDING - top),
        command.text,
        font=font,
        fill=command.color,
    )
    if command.rotation % 360 != 0:
        # Pillow rotates counter-clockwise; item rotation is clockwise.
        layer = layer.rotate(
            -command.rotation, resample=Image.Resampling.BICUBIC, expand=True
        )

    cx, cy = command.center
    origin = (_round(cx - layer.width / 2), _round(cy - layer.height / 2))
    canvas.paste(layer, origin, layer)


def render_commands(
    plan: DrawPlan, background_image: Optional[Image.Image] = None
) -> Image.Image:
    """Paints a draw plan onto a new RGB image."""
    canvas = Image.new("RGB", plan.canvas_size, "#ffffff")
    draw = ImageDraw.Draw(canvas)
    for command in plan.commands:
        if isinstance(command, FillBackground):
            draw.rectangle([(0, 0), plan.canvas_size], fill=command.color)
        elif isinstance(command, StretchBackgroundImage):
            if background_image is not None:
                canvas.paste(
                    background_image.convert("RGB").resize(
                        plan.canvas_size, Image.Resampling.BILINEAR
                    ),
                    (0, 0),
                )
        elif isinstance(command, GridLine):
            draw.line([command.start, command.end], fill=command.color, width=command.width)
        elif isinstance(command, DrawShape):
            _draw_shape(draw, command)
        elif isinstance(command, DrawLabel):
            _draw_label(canvas, command)
    return canvas


def rasterize(
    items: Sequence[FloorplanItem],
    container_size: Optional[ContainerSize],
    template: Optional[str] = None,
    background: Optional[BackgroundSource] = None,
) -> Image.Image:
    """
    Renders the floorplan into a bitmap twice the size of the container.

    The background is decoded before anything is drawn, so a bad background
    raises ImageLoadError without producing any output.

    Raises:
        MissingContainer: If the container has not been measured.
        ImageLoadError: If the background cannot be decoded.
    """
    if not container_size:
        raise MissingContainer()
    background_image = load_background(background) if background else None
    plan = build_draw_commands(
        items,
        container_size,
        template=template,
        has_background_image=background_image is not None,
    )
    return render_commands(plan, background_image)


def encode_image(image: Image.Image, image_format: str = "PNG") -> tuple[bytes, str, str]:
    """
    Encodes a rendered floorplan.

    Returns:
        A tuple of (data, mime type, file extension). Lossy formats are
        written at quality 90.
    """
    fmt = image_format.upper()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {image_format}")
    mime_type, extension, lossy = EXPORT_FORMATS[fmt]

    buffer = io.BytesIO()
    if lossy:
        image.save(buffer, format=fmt, quality=LOSSY_EXPORT_QUALITY)
    else:
        image.save(buffer, format=fmt)
    return buffer.getvalue(), mime_type, extension
