"""High-level wardrobe operations exposed to the presentation layer."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from chicpick.api import AITunnelClient
from chicpick.classification import AnalysisResult, ClassificationAdapter
from chicpick.config.settings import ClosetSettings, get_settings
from chicpick.freshness import WearFreshness, evaluate_freshness
from chicpick.imaging import compress_image
from chicpick.state_machine import AddFlowState, AddFlowStateMachine, StagingError
from chicpick.storage import FileDocumentBackend, GarmentRecord, GarmentStore
from chicpick.suggestion import SuggestionResult, SuggestionSelector

logger = logging.getLogger(__name__)

ADDED_NOTICE = "Added to wardrobe!"
DELETED_NOTICE = "Item deleted successfully"
WORN_NOTICE = "Marked as worn today"
NOT_FOUND_NOTICE = "That item is no longer in your wardrobe."
PERSISTENCE_FAILED_NOTICE = "Could not save your wardrobe. Changes are kept until the app closes."


class FilterOption(str, Enum):
    """Occasion tags offered by the wardrobe filter."""

    ALL = "All"
    CASUAL = "Casual"
    FORMAL = "Formal"
    PARTY = "Party"
    WORK = "Work"


@dataclass(slots=True)
class StagedClassification:
    """An acquired image and its classification, waiting to be committed or discarded."""

    image: str
    analysis: AnalysisResult | None
    token: int


@dataclass(slots=True, frozen=True)
class OperationOutcome:
    """What a mutation did, for the presentation layer to report."""

    notice: str
    applied: bool = True
    persisted: bool = True
    suggestion_cleared: bool = False
    garment: GarmentRecord | None = None


def _local_now() -> datetime:
    return datetime.now().astimezone()


class WardrobeController:
    """Keeps the store, the add flow and the current suggestion consistent."""

    def __init__(
        self,
        store: GarmentStore,
        adapter: ClassificationAdapter,
        selector: SuggestionSelector | None = None,
        *,
        clock: Callable[[], datetime] = _local_now,
        id_factory: Callable[[], str] | None = None,
        image_max_side: int = 800,
        image_quality: int = 70,
        client: AITunnelClient | None = None,
    ) -> None:
        self._store = store
        self._adapter = adapter
        self._selector = selector or SuggestionSelector()
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._image_max_side = image_max_side
        self._image_quality = image_quality
        self._client = client
        self._flow = AddFlowStateMachine()
        self._staged: StagedClassification | None = None
        self._suggestion_id: str | None = None
        self._issued_ids: set[str] = set()

    @classmethod
    async def open(cls, settings: ClosetSettings | None = None) -> "WardrobeController":
        """Build all collaborators from settings and load the stored wardrobe."""

        settings = settings or get_settings()
        store = GarmentStore(FileDocumentBackend(Path(settings.storage_root)), settings.storage_key)
        await store.load()
        client = AITunnelClient(settings)
        return cls(
            store,
            ClassificationAdapter(client),
            image_max_side=settings.image_max_side,
            image_quality=settings.image_quality,
            client=client,
        )

    async def close(self) -> None:
        """Flush the wardrobe and release HTTP resources."""

        self.discard_add()
        await self._store.close()
        if self._client is not None:
            await self._client.close()

    @property
    def add_state(self) -> AddFlowState:
        return self._flow.current

    @property
    def staged(self) -> StagedClassification | None:
        return self._staged

    @property
    def last_persistence_error(self) -> Optional[str]:
        return self._store.last_error

    def list_inventory(self) -> list[GarmentRecord]:
        return self._store.list_records()

    def filtered_by_occasion(self, tag: FilterOption | str) -> list[GarmentRecord]:
        """Return garments whose occasion matches ``tag`` exactly; ``All`` returns everything."""

        value = tag.value if isinstance(tag, FilterOption) else tag
        records = self._store.list_records()
        if value == FilterOption.ALL.value:
            return records
        return [record for record in records if record.occasion == value]

    def freshness_of(self, record: GarmentRecord, now: datetime | None = None) -> WearFreshness:
        return evaluate_freshness(record.last_worn, now or self._clock())

    async def begin_add(self, image: bytes | str) -> StagedClassification | None:
        """Compress and classify a new photo without touching the wardrobe.

        Returns ``None`` if the flow was discarded before classification finished.
        Raises :class:`chicpick.imaging.ImageProcessingError` for unreadable images.
        """

        self._staged = None
        token = self._flow.start()

        if isinstance(image, bytes):
            try:
                encoded = await asyncio.to_thread(
                    compress_image,
                    image,
                    max_side=self._image_max_side,
                    quality=self._image_quality,
                )
            except ValueError:
                if not self._flow.is_current(token):
                    return None
                self._flow.abort()
                logger.warning("Add flow %d aborted: image could not be processed", token)
                raise
        else:
            encoded = image

        if not self._flow.is_current(token):
            return None
        self._flow.advance(AddFlowState.CLASSIFYING)

        analysis = await self._adapter.classify(encoded)
        if not self._flow.is_current(token):
            logger.info("Dropping classification for discarded add flow %d", token)
            return None

        self._flow.advance(AddFlowState.STAGED)
        self._staged = StagedClassification(image=encoded, analysis=analysis, token=token)
        return self._staged

    async def commit_add(self, staged: StagedClassification | None = None) -> OperationOutcome:
        """Promote the staged classification to a new garment record."""

        staged = staged or self._staged
        if staged is None or not staged.image or staged.analysis is None:
            raise StagingError("Nothing is staged: an image and its classification are required.")
        if staged is not self._staged or not self._flow.is_current(staged.token):
            raise StagingError("The staged garment was discarded.")

        record = GarmentRecord(
            id=self._new_id(),
            image=staged.image,
            category=staged.analysis.category,
            color=staged.analysis.color,
            occasion=staged.analysis.occasion,
            created_at=self._clock(),
            last_worn=None,
        )
        self._staged = None
        self._flow.finish()
        persisted = await self._store.add(record)
        return OperationOutcome(
            notice=ADDED_NOTICE if persisted else PERSISTENCE_FAILED_NOTICE,
            persisted=persisted,
            garment=record,
        )

    def discard_add(self) -> None:
        """Drop the staged or in-flight add; safe to call at any time."""

        self._staged = None
        self._flow.discard()

    async def wear(self, garment_id: str, now: datetime | None = None) -> OperationOutcome:
        """Mark a garment as worn now; unknown ids are ignored."""

        result = await self._store.set_last_worn(garment_id, now or self._clock())
        cleared = self._invalidate_if(garment_id)
        if result is None:
            return OperationOutcome(notice=NOT_FOUND_NOTICE, applied=False, suggestion_cleared=cleared)
        return OperationOutcome(
            notice=WORN_NOTICE if result else PERSISTENCE_FAILED_NOTICE,
            persisted=result,
            suggestion_cleared=cleared,
            garment=self._store.get(garment_id),
        )

    async def delete(self, garment_id: str) -> OperationOutcome:
        """Remove a garment; unknown ids are ignored."""

        result = await self._store.remove(garment_id)
        cleared = self._invalidate_if(garment_id)
        if result is None:
            return OperationOutcome(notice=NOT_FOUND_NOTICE, applied=False, suggestion_cleared=cleared)
        return OperationOutcome(
            notice=DELETED_NOTICE if result else PERSISTENCE_FAILED_NOTICE,
            persisted=result,
            suggestion_cleared=cleared,
        )

    def request_suggestion(self, now: datetime | None = None) -> SuggestionResult:
        """Replace the current suggestion with a fresh random pick."""

        self._suggestion_id = None
        result = self._selector.suggest(self._store.list_records(), now or self._clock())
        if result.garment is not None:
            self._suggestion_id = result.garment.id
        return result

    def current_suggestion(self) -> GarmentRecord | None:
        if self._suggestion_id is None:
            return None
        return self._store.get(self._suggestion_id)

    def _invalidate_if(self, garment_id: str) -> bool:
        if self._suggestion_id is not None and self._suggestion_id == garment_id:
            self._suggestion_id = None
            return True
        return False

    def _new_id(self) -> str:
        while True:
            candidate = self._id_factory()
            if candidate not in self._issued_ids and candidate not in self._store:
                self._issued_ids.add(candidate)
                return candidate
