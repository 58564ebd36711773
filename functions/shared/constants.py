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

# Logical canvas in which item geometry is authored.
LOGICAL_CANVAS_SIZE = 1000

# Exports are rendered at twice the measured container size.
SUPERSAMPLE_SCALE = 2

GRID_STEP = 25
GRID_COLOR = "#e6e6e6"
GRID_LINE_WIDTH = 1

DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_ITEM_COLOR = "#999"

LABEL_FONT_SIZE_SMALL = 10
LABEL_FONT_SIZE_LARGE = 12
# Items whose smaller side is below this get the small label font.
LABEL_SMALL_ITEM_THRESHOLD = 50

MIN_ITEM_SIZE = 8

LOSSY_EXPORT_QUALITY = 90
DEFAULT_EXPORT_FORMAT = "PNG"

MAX_BACKGROUND_IMAGE_BYTES = 5 * 1024 * 1024
ALLOWED_BACKGROUND_CONTENT_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)

MAX_ITEMS_PER_FLOORPLAN = 500

# Measured container bounds, in CSS pixels.
MIN_CONTAINER_SIZE = 1
MAX_CONTAINER_SIZE = 8192

MAX_ID_LENGTH = 128
