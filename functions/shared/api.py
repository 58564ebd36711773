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
from typing import Dict, List, Optional, Union

from shared.floorplan_types import ContainerSize, FloorplanItem


@dataclass
class FloorplanRenderRequest:
    """Everything needed to rasterize a floorplan snapshot."""

    items: List[FloorplanItem]
    container_size: Optional[ContainerSize]
    template: Optional[str] = None
    background_image: Optional[Union[str, bytes]] = None
    image_format: str = "PNG"


@dataclass
class UploadFloorplanRequest:
    """Request object for uploading a floorplan to a vendor."""

    event_id: Optional[str] = None
    vendor_id: Optional[str] = None
    items: List[FloorplanItem] = field(default_factory=list)
    container_size: Optional[ContainerSize] = None
    template: Optional[str] = None
    background_image: Optional[str] = None


@dataclass
class UploadFloorplanResult:
    floorplan_url: str
    storage_path: str
    uploaded_at: str
    uploaded_by: str
    message: str


@dataclass
class VendorFloorplansResult:
    """Maps event ids to the floorplan url uploaded for the vendor."""

    vendor_id: str
    floorplans: Dict[str, str]
