"""
Storage abstraction for floorplan snapshots: Tencent COS (S3-compatible),
Firebase Storage, and in-memory testing.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config

FIREBASE_DOWNLOAD_URL = (
    "https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{path}?alt=media&token={token}"
)


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, metadata: dict
    ) -> str:
        """Stores `data` at `path` and returns a download url for it."""
        ...

    def get_bytes(self, path: str) -> bytes:
        ...


@dataclass
class StoredObject:
    data: bytes
    content_type: str
    metadata: dict


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict[str, StoredObject] = field(default_factory=dict)

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, metadata: dict
    ) -> str:
        self.stored_objects[path] = StoredObject(
            data=data, content_type=content_type, metadata=dict(metadata)
        )
        return f"{self.base_url}/{quote(path)}"

    def get_bytes(self, path: str) -> bytes:
        stored = self.stored_objects.get(path)
        if stored is None:
            raise FileNotFoundError(path)
        return stored.data

    def reset(self) -> None:
        self.stored_objects.clear()


@dataclass
class CosStorageClient:
    """
    S3-compatible storage client for Tencent COS.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    download_url_expires_in: int = 7 * 24 * 3600

    def __post_init__(self):
        # Use virtual-hosted style addressing to satisfy COS requirements.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, metadata: dict
    ) -> str:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
            Metadata={k: str(v) for k, v in metadata.items()},
        )
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=self.download_url_expires_in,
        )

    def get_bytes(self, path: str) -> bytes:
        response = self._client.get_object(Bucket=self.bucket, Key=path)
        return response["Body"].read()


@dataclass
class GcsStorageClient:
    """
    Firebase Storage client.

    Download urls use a Firebase download token stored in the object's
    metadata, the same way the web SDK's getDownloadURL resolves them.
    """

    storage_module: Any
    bucket_name: str | None = None

    def _bucket(self):
        return self.storage_module.bucket(self.bucket_name)

    def upload_bytes(
        self, path: str, data: bytes, content_type: str, metadata: dict
    ) -> str:
        bucket = self._bucket()
        blob = bucket.blob(path)
        token = str(uuid.uuid4())
        blob.metadata = {**metadata, "firebaseStorageDownloadTokens": token}
        blob.upload_from_string(data, content_type=content_type)
        return FIREBASE_DOWNLOAD_URL.format(
            bucket=bucket.name, path=quote(path, safe=""), token=token
        )

    def get_bytes(self, path: str) -> bytes:
        return self._bucket().blob(path).download_as_bytes()
