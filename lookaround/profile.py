"""Current user profile lookup with a single-slot identifier cache."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from . import config
from .cache import KeyValueStore
from .http import GraphRequest, GraphTransport, RequestMetrics, TransportError
from .models import User, parse_user_id, user_from_json

logger = logging.getLogger(__name__)


def build_profile_request(access_token: Optional[str] = None) -> GraphRequest:
    return GraphRequest(
        graph_path="/me",
        parameters={"fields": config.PROFILE_FIELDS},
        http_method="GET",
        api_version=config.GRAPH_API_VERSION,
        access_token=access_token,
    )


def parse_profile_response(response: Dict[str, Any]) -> User:
    return user_from_json(response)


class ProfileRequest:
    """Resolves the current user, caching the identifier under a fixed key.

    A successful fetch stores the identifier; a failed fetch removes it, so a
    stale identifier is never served after a failed refresh.
    """

    def __init__(
        self,
        transport: GraphTransport,
        store: KeyValueStore,
        access_token: Optional[str] = None,
        metrics: Optional[RequestMetrics] = None,
        cache_key: str = config.USER_ID_KEY,
    ) -> None:
        self.transport = transport
        self.store = store
        self.access_token = access_token
        self.metrics = metrics
        self.cache_key = cache_key

    def cached_user_id(self) -> Optional[UUID]:
        return parse_user_id(self.store.get(self.cache_key))

    def fetch_current_user_id(self) -> Optional[UUID]:
        cached = self.cached_user_id()
        if cached is not None:
            if self.metrics is not None:
                self.metrics.inc_cache_hit("profile")
            logger.debug("User id cache hit")
            return cached
        logger.info("User id cache miss, fetching profile")
        return self.fetch_current_user().id

    def fetch_current_user(self) -> User:
        request = build_profile_request(self.access_token)
        if self.metrics is not None:
            self.metrics.inc_network("profile")
        try:
            response = self.transport.execute(request)
        except TransportError:
            logger.info("Profile fetch failed, clearing cached user id")
            self.store.remove(self.cache_key)
            raise

        user = parse_profile_response(response)
        if user.id is None:
            logger.warning("Profile response has no usable id")
            self.store.remove(self.cache_key)
        else:
            self.store.set(self.cache_key, str(user.id))
        return user

    def clear_cached_user_id(self) -> None:
        self.store.remove(self.cache_key)
