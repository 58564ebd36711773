"""
Database abstraction for floorplan records and drafts: Postgres (via
SQLAlchemy), Firestore, and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Protocol

from dacite import Config, from_dict
from sqlalchemy import JSON, Column, Float, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.firebase_constants import (
    EVENT_COLLECTION,
    FLOORPLAN_DRAFTS_COLLECTION,
    FLOORPLANS_COLLECTION,
)
from shared.floorplan_types import FloorplanDraft, FloorplanRecord
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)


class DbClient(Protocol):
    """Interface for database access."""

    def get_floorplan_record(
        self, event_id: str, vendor_id: str
    ) -> Optional[FloorplanRecord]:
        ...

    def upsert_floorplan_record(
        self, event_id: str, vendor_id: str, record: FloorplanRecord
    ) -> None:
        """Inserts the record, or merges it into an existing one, in one call."""
        ...

    def list_vendor_floorplans(
        self, vendor_id: str, event_ids: Iterable[str]
    ) -> Dict[str, str]:
        ...

    def save_draft(self, event_id: str, draft: FloorplanDraft) -> None:
        ...

    def get_draft(self, event_id: str) -> Optional[FloorplanDraft]:
        ...

    def delete_draft(self, event_id: str) -> bool:
        ...


def draft_to_json(draft: FloorplanDraft) -> dict:
    return asdict(draft)


def draft_from_json(data: dict) -> FloorplanDraft:
    return from_dict(
        data_class=FloorplanDraft, data=data, config=Config(check_types=False)
    )


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.records: Dict[tuple[str, str], FloorplanRecord] = {}
        self.drafts: Dict[str, dict] = {}

    def get_floorplan_record(
        self, event_id: str, vendor_id: str
    ) -> Optional[FloorplanRecord]:
        return self.records.get((event_id, vendor_id))

    def upsert_floorplan_record(
        self, event_id: str, vendor_id: str, record: FloorplanRecord
    ) -> None:
        self.records[(event_id, vendor_id)] = record

    def list_vendor_floorplans(
        self, vendor_id: str, event_ids: Iterable[str]
    ) -> Dict[str, str]:
        floorplans = {}
        for event_id in event_ids:
            record = self.records.get((event_id, vendor_id))
            if record:
                floorplans[event_id] = record.floorplan_url
        return floorplans

    def save_draft(self, event_id: str, draft: FloorplanDraft) -> None:
        # Stored as JSON so later edits to the caller's draft do not leak in.
        self.drafts[event_id] = draft_to_json(draft)

    def get_draft(self, event_id: str) -> Optional[FloorplanDraft]:
        data = self.drafts.get(event_id)
        return draft_from_json(data) if data is not None else None

    def delete_draft(self, event_id: str) -> bool:
        return self.drafts.pop(event_id, None) is not None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.records.clear()
        self.drafts.clear()


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "FloorplanRecordRow") -> FloorplanRecord:
        return FloorplanRecord(
            floorplan_url=row.floorplan_url,
            uploaded_at=datetime.fromtimestamp(row.uploaded_at, tz=timezone.utc),
            uploaded_by=row.uploaded_by,
        )

    def get_floorplan_record(
        self, event_id: str, vendor_id: str
    ) -> Optional[FloorplanRecord]:
        with self.Session() as session:
            row = session.get(FloorplanRecordRow, (event_id, vendor_id))
            return self._to_record(row) if row else None

    def upsert_floorplan_record(
        self, event_id: str, vendor_id: str, record: FloorplanRecord
    ) -> None:
        with self.Session() as session:
            session.merge(
                FloorplanRecordRow(
                    event_id=event_id,
                    vendor_id=vendor_id,
                    floorplan_url=record.floorplan_url,
                    uploaded_at=record.uploaded_at.timestamp(),
                    uploaded_by=record.uploaded_by,
                )
            )
            session.commit()

    def list_vendor_floorplans(
        self, vendor_id: str, event_ids: Iterable[str]
    ) -> Dict[str, str]:
        event_ids = list(event_ids)
        if not event_ids:
            return {}
        with self.Session() as session:
            rows = (
                session.query(FloorplanRecordRow)
                .filter(
                    FloorplanRecordRow.vendor_id == vendor_id,
                    FloorplanRecordRow.event_id.in_(event_ids),
                )
                .all()
            )
            return {row.event_id: row.floorplan_url for row in rows}

    def save_draft(self, event_id: str, draft: FloorplanDraft) -> None:
        with self.Session() as session:
            session.merge(
                FloorplanDraftRow(
                    event_id=event_id,
                    data=draft_to_json(draft),
                    updated_at=time.time(),
                )
            )
            session.commit()

    def get_draft(self, event_id: str) -> Optional[FloorplanDraft]:
        with self.Session() as session:
            row = session.get(FloorplanDraftRow, event_id)
            return draft_from_json(row.data) if row else None

    def delete_draft(self, event_id: str) -> bool:
        with self.Session() as session:
            row = session.get(FloorplanDraftRow, event_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


class FirestoreDbClient:
    """
    Firestore-backed implementation using the collection layout the web
    client reads: Event/{eventId}/Floorplans/{vendorId}.
    """

    def __init__(self, client: Any):
        self.client = client

    def _record_ref(self, event_id: str, vendor_id: str):
        return (
            self.client.collection(EVENT_COLLECTION)
            .document(event_id)
            .collection(FLOORPLANS_COLLECTION)
            .document(vendor_id)
        )

    def _draft_ref(self, event_id: str):
        return self.client.collection(FLOORPLAN_DRAFTS_COLLECTION).document(event_id)

    def get_floorplan_record(
        self, event_id: str, vendor_id: str
    ) -> Optional[FloorplanRecord]:
        doc = self._record_ref(event_id, vendor_id).get()
        if not doc.exists:
            return None
        return from_dict(
            data_class=FloorplanRecord,
            data=convert_keys(doc.to_dict(), "camel_to_snake"),
            config=Config(check_types=False),
        )

    def upsert_floorplan_record(
        self, event_id: str, vendor_id: str, record: FloorplanRecord
    ) -> None:
        payload = convert_keys(asdict(record), "snake_to_camel")
        self._record_ref(event_id, vendor_id).set(payload, merge=True)

    def list_vendor_floorplans(
        self, vendor_id: str, event_ids: Iterable[str]
    ) -> Dict[str, str]:
        floorplans = {}
        for event_id in event_ids:
            try:
                doc = self._record_ref(event_id, vendor_id).get()
            except Exception as e:
                logger.error(f"Error fetching floorplan for event {event_id}: {e}")
                continue
            if doc.exists:
                url = (doc.to_dict() or {}).get("floorplanUrl")
                if url:
                    floorplans[event_id] = url
        return floorplans

    def save_draft(self, event_id: str, draft: FloorplanDraft) -> None:
        self._draft_ref(event_id).set(
            convert_keys(draft_to_json(draft), "snake_to_camel")
        )

    def get_draft(self, event_id: str) -> Optional[FloorplanDraft]:
        doc = self._draft_ref(event_id).get()
        if not doc.exists:
            return None
        return draft_from_json(convert_keys(doc.to_dict(), "camel_to_snake"))

    def delete_draft(self, event_id: str) -> bool:
        ref = self._draft_ref(event_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True


Base = declarative_base()


class FloorplanRecordRow(Base):
    __tablename__ = "floorplan_records"

    event_id = Column(String, primary_key=True)
    vendor_id = Column(String, primary_key=True, index=True)
    floorplan_url = Column(String, nullable=False)
    uploaded_at = Column(Float, nullable=False)
    uploaded_by = Column(String, nullable=False)


class FloorplanDraftRow(Base):
    __tablename__ = "floorplan_drafts"

    event_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(Float, nullable=False)
