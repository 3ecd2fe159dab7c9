"""Random outfit pick among garments that have rested long enough."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

from chicpick.freshness import is_eligible
from chicpick.storage import GarmentRecord

logger = logging.getLogger(__name__)


class SuggestionStatus(str, Enum):
    """Outcome of a suggestion request."""

    SUGGESTED = "suggested"
    EMPTY_WARDROBE = "empty_wardrobe"
    EXHAUSTED = "exhausted"

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self]


_STATUS_MESSAGES = {
    SuggestionStatus.SUGGESTED: "Today's Pick",
    SuggestionStatus.EMPTY_WARDROBE: "Your closet is empty. Add your first item to get suggestions.",
    SuggestionStatus.EXHAUSTED: (
        "Everything in your wardrobe has been worn recently! Maybe time for some laundry?"
    ),
}


@dataclass(slots=True, frozen=True)
class SuggestionResult:
    """A picked garment, or the reason there is nothing to suggest."""

    status: SuggestionStatus
    garment: GarmentRecord | None = None

    @property
    def found(self) -> bool:
        return self.garment is not None


class RandomSource:
    """Picks an index uniformly from ``range(count)``."""

    def pick_index(self, count: int) -> int:
        raise NotImplementedError


class SystemRandomSource(RandomSource):
    """Unseeded source backed by :mod:`random`."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def pick_index(self, count: int) -> int:
        return self._rng.randrange(count)


class SuggestionSelector:
    """Filters the inventory through the freshness rule and draws one survivor."""

    def __init__(self, random_source: RandomSource | None = None) -> None:
        self._random = random_source or SystemRandomSource()

    def eligible(self, garments: Sequence[GarmentRecord], now: datetime) -> list[GarmentRecord]:
        return [garment for garment in garments if is_eligible(garment.last_worn, now)]

    def suggest(self, garments: Sequence[GarmentRecord], now: datetime) -> SuggestionResult:
        """Return a uniformly random eligible garment, or why there is none."""

        if not garments:
            return SuggestionResult(SuggestionStatus.EMPTY_WARDROBE)

        candidates = self.eligible(garments, now)
        if not candidates:
            logger.info("All %d garments were worn recently", len(garments))
            return SuggestionResult(SuggestionStatus.EXHAUSTED)

        index = self._random.pick_index(len(candidates))
        picked = candidates[index]
        logger.debug("Picked garment %s out of %d candidates", picked.id, len(candidates))
        return SuggestionResult(SuggestionStatus.SUGGESTED, picked)
