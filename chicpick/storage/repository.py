"""JSON-backed storage for the wardrobe inventory."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_KEY = "chicpick_dresses"


@dataclass(slots=True)
class GarmentRecord:
    """One tracked clothing item with its classification and wear history."""

    id: str
    image: str
    category: str
    color: str
    occasion: str
    created_at: datetime
    last_worn: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        """Return the camelCase mapping stored in the wardrobe document."""

        return {
            "id": self.id,
            "imageData": self.image,
            "category": self.category,
            "color": self.color,
            "occasion": self.occasion,
            "lastWorn": self.last_worn.isoformat() if self.last_worn else None,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_document(cls, payload: Dict[str, Any]) -> "GarmentRecord":
        """Build a record from its stored mapping; raises on missing or invalid fields."""

        last_worn = payload.get("lastWorn")
        return cls(
            id=str(payload["id"]),
            image=str(payload["imageData"]),
            category=str(payload["category"]),
            color=str(payload["color"]),
            occasion=str(payload["occasion"]),
            created_at=datetime.fromisoformat(payload["createdAt"]),
            last_worn=datetime.fromisoformat(last_worn) if last_worn else None,
        )


class DocumentBackend:
    """Key-value persistence of a single JSON text document."""

    async def read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def write(self, key: str, body: str) -> None:
        raise NotImplementedError


class FileDocumentBackend(DocumentBackend):
    """Stores each document as ``<root>/<key>.json``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def _path(self, key: str) -> Path:
        return self._root / f"{key}.json"

    async def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def write(self, key: str, body: str) -> None:
        await asyncio.to_thread(self._write_file, self._path(key), body)

    @staticmethod
    def _write_file(path: Path, body: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(path)


class MemoryDocumentBackend(DocumentBackend):
    """Process-local backend, useful for previews and tests."""

    def __init__(self, documents: Optional[Dict[str, str]] = None) -> None:
        self.documents: Dict[str, str] = dict(documents or {})

    async def read(self, key: str) -> Optional[str]:
        return self.documents.get(key)

    async def write(self, key: str, body: str) -> None:
        self.documents[key] = body


class GarmentStore:
    """Owns the canonical garment collection and mirrors it to the backend.

    Every mutating call persists the full collection before returning. A failed
    write is logged and reported through the return value and ``last_error``;
    the in-memory collection stays authoritative for the running session.
    """

    def __init__(self, backend: DocumentBackend, key: str = DEFAULT_DOCUMENT_KEY) -> None:
        self._backend = backend
        self._key = key
        self._records: List[GarmentRecord] = []
        self.last_error: Optional[str] = None

    async def load(self) -> List[GarmentRecord]:
        """Read the persisted collection; missing or malformed data yields an empty one."""

        try:
            body = await self._backend.read(self._key)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read wardrobe document %s: %s", self._key, exc)
            body = None

        self._records = self._parse(body) if body else []
        logger.info("Loaded %d garments from %s", len(self._records), self._key)
        return list(self._records)

    def _parse(self, body: str) -> List[GarmentRecord]:
        try:
            payload = json.loads(body)
            if not isinstance(payload, list):
                raise ValueError(f"expected a list, got {type(payload).__name__}")
            records = [GarmentRecord.from_document(item) for item in payload]
            if len({record.id for record in records}) != len(records):
                raise ValueError("duplicate garment ids")
            return records
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Discarding malformed wardrobe document %s: %s", self._key, exc)
            return []

    async def save(self, records: Optional[List[GarmentRecord]] = None) -> bool:
        """Persist the full collection; return ``False`` if the write failed."""

        if records is not None:
            self._records = list(records)
        body = json.dumps(
            [record.to_document() for record in self._records],
            ensure_ascii=False,
        )
        try:
            await self._backend.write(self._key, body)
        except OSError as exc:
            self.last_error = str(exc)
            logger.error("Failed to persist wardrobe document %s: %s", self._key, exc)
            return False
        self.last_error = None
        return True

    def list_records(self) -> List[GarmentRecord]:
        """Return the current collection, newest first."""

        return list(self._records)

    def get(self, garment_id: str) -> Optional[GarmentRecord]:
        for record in self._records:
            if record.id == garment_id:
                return record
        return None

    def __contains__(self, garment_id: object) -> bool:
        return any(record.id == garment_id for record in self._records)

    def __len__(self) -> int:
        return len(self._records)

    async def add(self, record: GarmentRecord) -> bool:
        """Prepend a record and persist."""

        if record.id in self:
            raise ValueError(f"Garment id {record.id!r} is already in the wardrobe.")
        self._records.insert(0, record)
        logger.info("Added garment %s (%s)", record.id, record.category)
        return await self.save()

    async def remove(self, garment_id: str) -> Optional[bool]:
        """Delete a record; returns ``None`` when the id is unknown."""

        remaining = [record for record in self._records if record.id != garment_id]
        if len(remaining) == len(self._records):
            logger.debug("Remove ignored, no garment %s", garment_id)
            return None
        self._records = remaining
        logger.info("Removed garment %s", garment_id)
        return await self.save()

    async def set_last_worn(self, garment_id: str, timestamp: datetime) -> Optional[bool]:
        """Update one record's wear timestamp; returns ``None`` when the id is unknown."""

        record = self.get(garment_id)
        if record is None:
            logger.debug("Wear ignored, no garment %s", garment_id)
            return None
        record.last_worn = timestamp
        logger.info("Garment %s marked worn at %s", garment_id, timestamp.isoformat())
        return await self.save()

    async def close(self) -> bool:
        """Flush the collection one last time."""

        return await self.save()
