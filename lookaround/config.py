"""Project configuration.

Loads client settings from lookaround_config.json when available, falling back
to sensible defaults. Keep Graph API request shapes centralized here.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- API endpoints ---

GRAPH_BASE_URL = "https://graph.facebook.com"
GRAPH_API_VERSION = "v2.11"

# --- Field selections ---

PLACE_FIELDS = (
    "name, about, id, location, context, engagement, checkins, picture, cover, "
    "overall_star_rating, hours, is_always_open, single_line_address"
)
PROFILE_FIELDS = "id, name, picture{url}"

# --- Place search defaults ---

# Facebook Building 20, used when no location is detected.
_DEFAULT_LOCATION: Dict[str, float] = {"lat": 37.4816734, "lon": -122.1556204}
_DEFAULT_SEARCH_DISTANCE_M = 1000

DEFAULT_LOCATION: Dict[str, float] = dict(_DEFAULT_LOCATION)
DEFAULT_SEARCH_DISTANCE_M = _DEFAULT_SEARCH_DISTANCE_M
SEARCH_RESULT_LIMIT = 50
MAX_RESULTS = 10

# --- Ranking ---

# "legacy" keeps the asymmetric check-ins predicate, "first" puts places
# without a check-in count ahead of every counted place.
CHECKINS_MISSING_POLICIES = ("legacy", "first")
CHECKINS_MISSING_POLICY = "legacy"

# --- Profile cache ---

USER_ID_KEY = "FBUserIDKey"
STORE_DB_PATH = "lookaround.db"

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20
HTTP_RETRY_MAX = 3
HTTP_BACKOFF_BASE = 0.5
HTTP_BACKOFF_MAX = 8.0

# --- Env ---

ACCESS_TOKEN_ENV = "GRAPH_ACCESS_TOKEN"


def validate_missing_checkins_policy(policy: str) -> str:
    value = (policy or "").strip().lower()
    if value not in CHECKINS_MISSING_POLICIES:
        raise ValueError(
            f"checkins missing policy must be one of: {', '.join(CHECKINS_MISSING_POLICIES)}"
        )
    return value


def load_client_config(path: Optional[str] = None) -> bool:
    """Load client configuration from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "lookaround_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    globals_ref = globals()

    center = data.get("default_location", {})
    center_lat = center.get("lat")
    center_lon = center.get("lon")
    if center_lat is not None and center_lon is not None:
        globals_ref["DEFAULT_LOCATION"] = {"lat": float(center_lat), "lon": float(center_lon)}

    distance = data.get("default_distance_m")
    if distance is not None:
        globals_ref["DEFAULT_SEARCH_DISTANCE_M"] = int(distance)

    version = data.get("graph_api_version")
    if version:
        globals_ref["GRAPH_API_VERSION"] = str(version)

    policy = data.get("checkins_missing_policy")
    if policy:
        globals_ref["CHECKINS_MISSING_POLICY"] = validate_missing_checkins_policy(policy)

    store_path = data.get("store_path")
    if store_path:
        globals_ref["STORE_DB_PATH"] = str(store_path)

    return True


def apply_env_overrides(environ: Optional[Dict[str, str]] = None) -> None:
    env = os.environ if environ is None else environ
    globals_ref = globals()

    version = (env.get("LOOKAROUND_GRAPH_API_VERSION") or "").strip()
    if version:
        globals_ref["GRAPH_API_VERSION"] = version

    policy = (env.get("LOOKAROUND_CHECKINS_MISSING") or "").strip()
    if policy:
        globals_ref["CHECKINS_MISSING_POLICY"] = validate_missing_checkins_policy(policy)

    store_path = (env.get("LOOKAROUND_STORE_PATH") or "").strip()
    if store_path:
        globals_ref["STORE_DB_PATH"] = store_path
