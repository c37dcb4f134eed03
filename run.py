"""CLI entrypoint."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv as _load_dotenv

from lookaround import config
from lookaround.cache import SqliteStore
from lookaround.http import GraphHttpClient, RequestMetrics, TransportError
from lookaround.models import FilterCategory, Location, SortMethod
from lookaround.places_client import PlaceSearch
from lookaround.profile import ProfileRequest
from lookaround.ranking import sort_places
from lookaround.reporting import render_places_table, write_places_json


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    _load_dotenv(dotenv_path=env_path, override=False)


def _access_token() -> Optional[str]:
    token = (os.environ.get(config.ACCESS_TOKEN_ENV) or "").strip()
    return token or None


def parse_categories(raw: Optional[str]) -> Optional[List[FilterCategory]]:
    if raw is None:
        return None
    return [FilterCategory.parse(part) for part in raw.split(",") if part.strip()]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find nearby places ranked by social context")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--preflight", action="store_true", help="Run offline checks only")
    group.add_argument("--places", action="store_true", help="Search places near a location")
    group.add_argument("--me", action="store_true", help="Resolve the current user id")
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lon", type=float, default=None)
    parser.add_argument("--distance", type=int, default=None, help="Search radius in meters")
    parser.add_argument(
        "--categories",
        type=str,
        default=None,
        help="Comma-separated categories (e.g. restaurant,bar)",
    )
    parser.add_argument(
        "--sort",
        choices=[m.name.lower() for m in SortMethod],
        default="magic",
        help="Re-sort the returned places (default: magic)",
    )
    parser.add_argument("--store-path", type=str, default=None)
    parser.add_argument("--out", type=str, default=None, help="Write places JSON to this path")
    parser.add_argument("--refresh", action="store_true", help="Ignore the cached user id")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def run_preflight(access_token: Optional[str]) -> int:
    ok = True
    if access_token:
        print("Access token: OK")
    else:
        print("Access token: MISSING")
        ok = False
    try:
        config.validate_missing_checkins_policy(config.CHECKINS_MISSING_POLICY)
        print(f"Checkins policy: OK ({config.CHECKINS_MISSING_POLICY})")
    except ValueError as exc:
        print(f"Checkins policy: FAIL ({exc})")
        ok = False
    print(
        "Defaults: center={lat}, {lon} distance={distance}m api={version}".format(
            lat=config.DEFAULT_LOCATION["lat"],
            lon=config.DEFAULT_LOCATION["lon"],
            distance=config.DEFAULT_SEARCH_DISTANCE_M,
            version=config.GRAPH_API_VERSION,
        )
    )
    print("Preflight: OK" if ok else "Preflight: FAIL")
    return 0 if ok else 1


def run_places(args: argparse.Namespace, access_token: Optional[str]) -> int:
    location = None
    if args.lat is not None or args.lon is not None:
        if args.lat is None or args.lon is None:
            print("--lat and --lon must be given together", file=sys.stderr)
            return 2
        location = Location(latitude=args.lat, longitude=args.lon)
    try:
        categories = parse_categories(args.categories)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    metrics = RequestMetrics()
    search = PlaceSearch(GraphHttpClient(), access_token=access_token, metrics=metrics)
    try:
        places = search.fetch_places(categories, location=location, distance=args.distance)
    except TransportError as exc:
        print(f"Place search failed: {exc}", file=sys.stderr)
        return 1

    method = SortMethod.parse(args.sort)
    if method is not SortMethod.MAGIC:
        places = sort_places(places, method)
    print(render_places_table(places))
    if args.out:
        write_places_json(args.out, places, method.name.lower())
        print(f"Wrote {len(places)} places to {args.out}")
    return 0


def run_me(args: argparse.Namespace, access_token: Optional[str]) -> int:
    store = SqliteStore(args.store_path or config.STORE_DB_PATH)
    try:
        profile = ProfileRequest(GraphHttpClient(), store, access_token=access_token)
        if args.refresh:
            profile.clear_cached_user_id()
        user_id = profile.fetch_current_user_id()
    except TransportError as exc:
        print(f"Profile request failed: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()
    if user_id is None:
        print("User id: (not a UUID)")
        return 1
    print(f"User id: {user_id}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    config.load_client_config()
    config.apply_env_overrides()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    access_token = _access_token()

    if args.preflight:
        return run_preflight(access_token)
    if not access_token:
        print(f"Missing {config.ACCESS_TOKEN_ENV} in environment", file=sys.stderr)
        return 2
    if args.places:
        return run_places(args, access_token)
    return run_me(args, access_token)


if __name__ == "__main__":
    sys.exit(main())
