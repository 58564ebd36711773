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


class FloorplanError(Exception):
    """Base class for floorplan failures that are reported to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingContainer(FloorplanError):
    """The canvas container has not been measured yet."""

    def __init__(self, message: str = "Canvas container not found"):
        super().__init__(message)


class ImageLoadError(FloorplanError):
    """The background image could not be decoded."""

    def __init__(self, message: str = "Failed to load background image"):
        super().__init__(message)


class InvalidBackgroundImage(FloorplanError):
    pass


class MissingSelection(FloorplanError):
    pass


class Unauthenticated(FloorplanError):
    def __init__(self, message: str = "Please log in to upload the floorplan."):
        super().__init__(message)


class UploadFailure(FloorplanError):
    """A remote write failed partway through an upload."""

    def __init__(self, cause: Exception):
        super().__init__(f"Upload failed: {cause}")
        self.cause = cause


class StorageWriteFailure(UploadFailure):
    pass


class MetadataWriteFailure(UploadFailure):
    pass
