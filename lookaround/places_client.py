"""Place search request building, response decoding and the search client."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from . import config
from .http import GraphRequest, GraphTransport, RequestMetrics
from .models import FilterCategory, Location, Place, SortMethod, place_from_json
from .ranking import sort_places

logger = logging.getLogger(__name__)

CategoryLike = Union[FilterCategory, str]


def category_search_string(category: CategoryLike) -> str:
    if isinstance(category, FilterCategory):
        return category.search_string
    return str(category)


def graph_path_for_categories(categories: Sequence[CategoryLike]) -> str:
    # The Graph API ignores a list passed in parameters, so the filter goes in the path.
    tokens = "".join(f"%22{category_search_string(c)}%22," for c in categories)
    return "/search?categories=[" + tokens + "]"


def default_location() -> Location:
    return Location(
        latitude=config.DEFAULT_LOCATION["lat"],
        longitude=config.DEFAULT_LOCATION["lon"],
    )


def build_place_search_request(
    categories: Optional[Sequence[CategoryLike]] = None,
    location: Optional[Location] = None,
    distance: Optional[int] = None,
    access_token: Optional[str] = None,
) -> GraphRequest:
    center = location if location is not None else default_location()
    radius = int(distance) if distance is not None else config.DEFAULT_SEARCH_DISTANCE_M
    graph_path = graph_path_for_categories(categories) if categories is not None else "/search?"
    parameters: Dict[str, Any] = {
        "fields": config.PLACE_FIELDS,
        "type": "place",
        "center": f"{center.latitude}, {center.longitude}",
        "distance": radius,
        "limit": config.SEARCH_RESULT_LIMIT,
    }
    return GraphRequest(
        graph_path=graph_path,
        parameters=parameters,
        http_method="GET",
        api_version=config.GRAPH_API_VERSION,
        access_token=access_token,
    )


def decode_place(item: Any) -> Optional[Place]:
    """Decode one search result, returning None instead of failing the batch."""
    return place_from_json(item)


def parse_place_search_response(
    response: Dict[str, Any],
    limit: Optional[int] = None,
) -> List[Place]:
    items = response.get("data") if isinstance(response, dict) else None
    if not isinstance(items, list):
        items = []
    decoded = [decode_place(item) for item in items]
    places = [p for p in decoded if p is not None]
    ranked = sort_places(places, SortMethod.MAGIC)
    cap = config.MAX_RESULTS if limit is None else min(int(limit), config.MAX_RESULTS)
    end = min(len(ranked), max(0, cap))
    logger.debug(
        "Decoded %s places (%s skipped), returning %s",
        len(places),
        len(items) - len(places),
        end,
    )
    return ranked[:end]


class PlaceSearch:
    def __init__(
        self,
        transport: GraphTransport,
        access_token: Optional[str] = None,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.transport = transport
        self.access_token = access_token
        self.metrics = metrics

    def fetch_places(
        self,
        categories: Optional[Sequence[CategoryLike]] = None,
        location: Optional[Location] = None,
        distance: Optional[int] = None,
    ) -> List[Place]:
        request = build_place_search_request(
            categories, location=location, distance=distance, access_token=self.access_token
        )
        if self.metrics is not None:
            self.metrics.inc_network("places")
        response = self.transport.execute(request)
        return parse_place_search_response(response)
