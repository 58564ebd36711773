"""
Render a saved floorplan draft to an image file.

The draft is the JSON shape stored by the editor (camelCase or snake_case
keys): {"template": "banquet", "items": [...], "backgroundImage": ...}.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dacite import Config, from_dict

from floorplan.errors import FloorplanError
from floorplan.export import LocalDirectoryDownloader, export_to_file
from shared.api import FloorplanRenderRequest
from shared.constants import MAX_CONTAINER_SIZE, MIN_CONTAINER_SIZE
from shared.floorplan_types import ContainerSize, FloorplanDraft
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)


def container_dimension(value: str) -> float:
    size = float(value)
    if not MIN_CONTAINER_SIZE <= size <= MAX_CONTAINER_SIZE:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_CONTAINER_SIZE} and {MAX_CONTAINER_SIZE}"
        )
    return size


def load_render_request(
    draft_path: Path,
    width: float,
    height: float,
    background_path: Optional[Path] = None,
    image_format: str = "PNG",
) -> FloorplanRenderRequest:
    with open(draft_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    draft = from_dict(
        data_class=FloorplanDraft,
        data=convert_keys(data, "camel_to_snake"),
        config=Config(check_types=False),
    )
    background = draft.background_image
    if background_path is not None:
        background = background_path.read_bytes()
    return FloorplanRenderRequest(
        items=draft.items,
        container_size=ContainerSize(width=width, height=height),
        template=draft.template,
        background_image=background,
        image_format=image_format,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Render a floorplan draft")
    parser.add_argument("draft", type=Path, help="Path to the draft JSON file")
    parser.add_argument(
        "--width",
        type=container_dimension,
        default=1000,
        help="Container width in pixels (output is twice this)",
    )
    parser.add_argument(
        "--height",
        type=container_dimension,
        default=1000,
        help="Container height in pixels (output is twice this)",
    )
    parser.add_argument(
        "--out-dir",
        type=str,
        default=".",
        help="Directory to write the image into",
    )
    parser.add_argument(
        "--event-id",
        type=str,
        default=None,
        help="Event id used in the output file name",
    )
    parser.add_argument(
        "--background",
        type=Path,
        default=None,
        help="Background image file, overrides the draft's background",
    )
    parser.add_argument(
        "--format",
        dest="image_format",
        choices=["PNG", "JPEG", "WEBP"],
        default="PNG",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    request = load_render_request(
        args.draft,
        args.width,
        args.height,
        background_path=args.background,
        image_format=args.image_format,
    )
    try:
        image = export_to_file(
            request.items,
            request.container_size,
            LocalDirectoryDownloader(args.out_dir),
            template=request.template,
            background=request.background_image,
            event_id=args.event_id,
            image_format=request.image_format,
        )
    except FloorplanError as exc:
        logger.error("Render failed: %s", exc.message)
        return 1

    logger.info("Rendered %d items into %s", len(request.items), image.file_name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
