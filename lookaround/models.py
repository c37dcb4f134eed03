"""Typed records decoded from Graph API responses."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
from uuid import UUID

_MISSING = object()

_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def json_path(data: Any, path: Sequence[Any], default: Any = None) -> Any:
    """Walk ``path`` through nested dicts/lists, returning ``default`` on any miss."""
    current = data
    for part in path:
        if isinstance(part, int):
            if not isinstance(current, list) or not -len(current) <= part < len(current):
                return default
            current = current[part]
        else:
            if not isinstance(current, dict):
                return default
            current = current.get(part, _MISSING)
            if current is _MISSING:
                return default
    if current is None:
        return default
    return current


class SortMethod(Enum):
    MAGIC = 0
    FRIENDS = 1
    CHECKINS = 2

    @classmethod
    def parse(cls, value: str) -> "SortMethod":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown sort method: {value}") from None


class FilterCategory(Enum):
    """Place categories accepted by the search ``categories`` filter."""

    ARTS_ENTERTAINMENT = "ARTS_ENTERTAINMENT"
    EDUCATION = "EDUCATION"
    FITNESS_RECREATION = "FITNESS_RECREATION"
    FOOD_BEVERAGE = "FOOD_BEVERAGE"
    HOTEL_LODGING = "HOTEL_LODGING"
    MEDICAL_HEALTH = "MEDICAL_HEALTH"
    SHOPPING_RETAIL = "SHOPPING_RETAIL"
    TRAVEL_TRANSPORTATION = "TRAVEL_TRANSPORTATION"
    RESTAURANT = "restaurant"
    BAR = "bar"
    CAFE = "cafe"
    MUSEUM = "museum"
    PARK = "park"

    @property
    def search_string(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "FilterCategory":
        text = value.strip()
        for member in cls:
            if text.upper() == member.name or text.lower() == member.value.lower():
                return member
        raise ValueError(f"Unknown category: {value}")


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Place:
    id: str
    name: str
    location: Location
    description: str = ""
    context_count: Optional[int] = None
    checkins: Optional[int] = None
    rating: Optional[float] = None
    hours: Dict[str, str] = field(default_factory=dict)
    is_always_open: Optional[bool] = None
    address: str = ""
    images: Tuple[str, ...] = ()
    engagement: Optional[str] = None


@dataclass(frozen=True)
class User:
    id: Optional[UUID]
    name: str = ""
    profile_image_url: str = ""


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _context_count(item: Dict[str, Any]) -> Optional[int]:
    friends = json_path(item, ["context", "friends_who_visited"])
    if not isinstance(friends, dict):
        return None
    total = _optional_int(json_path(friends, ["summary", "total_count"]))
    if total is not None:
        return total
    data = friends.get("data")
    if isinstance(data, list):
        return len(data)
    return None


def place_from_json(item: Any) -> Optional[Place]:
    """Build a Place from one ``data`` element, or None if required fields are missing."""
    if not isinstance(item, dict):
        return None
    place_id = item.get("id")
    name = item.get("name")
    if not place_id or not isinstance(name, str) or not name:
        return None
    lat = _optional_float(json_path(item, ["location", "latitude"]))
    lon = _optional_float(json_path(item, ["location", "longitude"]))
    if lat is None or lon is None:
        return None

    images = []
    picture = json_path(item, ["picture", "data", "url"])
    if isinstance(picture, str) and picture:
        images.append(picture)
    cover = json_path(item, ["cover", "source"])
    if isinstance(cover, str) and cover:
        images.append(cover)

    hours = json_path(item, ["hours"], {})
    is_always_open = item.get("is_always_open")

    return Place(
        id=str(place_id),
        name=name,
        location=Location(latitude=lat, longitude=lon),
        description=str(json_path(item, ["about"], "")),
        context_count=_context_count(item),
        checkins=_optional_int(item.get("checkins")),
        rating=_optional_float(item.get("overall_star_rating")),
        hours={str(k): str(v) for k, v in hours.items()} if isinstance(hours, dict) else {},
        is_always_open=is_always_open if isinstance(is_always_open, bool) else None,
        address=str(json_path(item, ["single_line_address"], "")),
        images=tuple(images),
        engagement=json_path(item, ["engagement", "social_sentence"]),
    )


def parse_user_id(raw: Any) -> Optional[UUID]:
    if not isinstance(raw, str) or not _UUID_RE.match(raw):
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None


def user_from_json(payload: Any) -> User:
    return User(
        id=parse_user_id(json_path(payload, ["id"])),
        name=str(json_path(payload, ["name"], "")),
        profile_image_url=str(json_path(payload, ["picture", "data", "url"], "")),
    )
