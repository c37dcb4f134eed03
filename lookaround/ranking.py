"""Ranking policy for place search results."""
from __future__ import annotations

from typing import Iterable, List, Optional

from . import config
from .models import Place, SortMethod


def checkins_ordered_before(a: Place, b: Place) -> bool:
    """Legacy check-ins predicate.

    A missing count on either side orders ``a`` first, so the predicate is not a
    strict weak ordering when counts are missing.
    """
    if a.checkins is None:
        return True
    if b.checkins is None:
        return True
    return a.checkins > b.checkins


def _insertion_sort(places: List[Place]) -> List[Place]:
    # Counted places stay descending; a place without a count walks to the front.
    result = list(places)
    for i in range(1, len(result)):
        j = i
        while j > 0 and checkins_ordered_before(result[j], result[j - 1]):
            result[j], result[j - 1] = result[j - 1], result[j]
            j -= 1
    return result


def _sort_by_checkins(places: List[Place], missing_checkins: str) -> List[Place]:
    if missing_checkins == "legacy":
        return _insertion_sort(places)
    return sorted(
        places,
        key=lambda p: (p.checkins is not None, -(p.checkins or 0)),
    )


def _sort_by_friends(places: List[Place]) -> List[Place]:
    return sorted(
        places,
        key=lambda p: (p.context_count is None, -(p.context_count or 0)),
    )


def sort_places(
    places: Iterable[Place],
    method: SortMethod = SortMethod.MAGIC,
    missing_checkins: Optional[str] = None,
) -> List[Place]:
    policy = config.validate_missing_checkins_policy(
        missing_checkins if missing_checkins is not None else config.CHECKINS_MISSING_POLICY
    )
    items = list(places)

    if method is SortMethod.CHECKINS:
        return _sort_by_checkins(items, policy)
    if method is SortMethod.FRIENDS:
        return _sort_by_friends(items)
    if method is not SortMethod.MAGIC:
        raise ValueError(f"Unknown sort method: {method}")

    by_friends = _sort_by_friends(items)
    boundary = next((i for i, p in enumerate(by_friends) if p.context_count == 0), None)
    if boundary is None:
        return by_friends
    return by_friends[:boundary] + _sort_by_checkins(by_friends[boundary:], policy)
