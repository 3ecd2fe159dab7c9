"""Day-boundary arithmetic behind the "don't repeat within 2 days" rule."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

MIN_REST_DAYS = 2


@dataclass(slots=True, frozen=True)
class WearFreshness:
    """Everything the app derives from a garment's last wear, computed once."""

    days_since: Optional[int]
    eligible: bool
    label: str
    recently_worn: bool


def _local_date(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def calendar_days_between(now: datetime, then: datetime) -> int:
    """Number of midnights separating the two moments, in local time.

    Worn at 23:00 and evaluated at 01:00 the next day gives 1, not 0.
    """

    return abs((_local_date(now) - _local_date(then)).days)


def recency_label(days_since: Optional[int]) -> str:
    if days_since is None:
        return "Never worn"
    if days_since == 0:
        return "Worn today"
    if days_since == 1:
        return "Worn yesterday"
    return f"{days_since} days ago"


def evaluate_freshness(last_worn: Optional[datetime], now: datetime) -> WearFreshness:
    """Return eligibility, display label and recent-wear flag for one garment."""

    if last_worn is None:
        return WearFreshness(days_since=None, eligible=True, label=recency_label(None), recently_worn=False)

    days_since = calendar_days_between(now, last_worn)
    recent = days_since < MIN_REST_DAYS
    return WearFreshness(
        days_since=days_since,
        eligible=not recent,
        label=recency_label(days_since),
        recently_worn=recent,
    )


def is_eligible(last_worn: Optional[datetime], now: datetime) -> bool:
    return evaluate_freshness(last_worn, now).eligible
