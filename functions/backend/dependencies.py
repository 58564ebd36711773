"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import firebase_admin
from firebase_admin import firestore, storage

from backend.config import get_settings
from backend.db import DbClient, FirestoreDbClient, InMemoryDbClient, PostgresDbClient
from backend.storage import (
    CosStorageClient,
    GcsStorageClient,
    InMemoryStorageClient,
    StorageClient,
)

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None


def ensure_firebase_app() -> None:
    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app()


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so records and drafts persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _db_client = InMemoryDbClient()
    elif settings.database_url:
        _db_client = PostgresDbClient(settings.database_url)
    elif settings.use_firestore:
        ensure_firebase_app()
        _db_client = FirestoreDbClient(firestore.client())
    else:
        _db_client = InMemoryDbClient()
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    elif settings.cos_bucket:
        _storage_client = CosStorageClient(
            bucket=settings.cos_bucket,
            region=settings.cos_region or "",
            endpoint=settings.cos_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            download_url_expires_in=settings.download_url_expires_in,
        )
    elif settings.firebase_storage_bucket:
        ensure_firebase_app()
        _storage_client = GcsStorageClient(
            storage_module=storage, bucket_name=settings.firebase_storage_bucket
        )
    else:
        _storage_client = InMemoryStorageClient()
    return _storage_client
